# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""
Value conversion helpers.

Two families of functions live here:

Strict conversions
    ``to_int32(value)``, ``to_double(value)``, ``to_guid(value)``, ...
    They parse the textual form of ``value`` and raise a typed error
    (``FormatError``, ``NumericOverflowError``, ``NullInputError``) on failure.

Defaulting conversions
    ``to_int32_or(value, default)``, ``to_double_or(value, default)``, ...
    Same parse, but any conversion failure returns ``default``. The swallowed
    error is logged at DEBUG level.

Example::

    >>> to_int32("42")
    42
    >>> to_int32_or("abc", 0)
    0
    >>> to_int32("abc")
    Traceback (most recent call last):
    ...
    genro_extensions.errors.FormatError: Invalid numeric literal: 'abc'

Numeric helpers accept an optional ``NumberStyle`` and ``NumberFormat`` (see
``genro_extensions.numbers``).

``change_type(value, target)`` converts between runtime types through a
dispatch table, unwrapping ``Optional[...]`` targets first. ``get_value``
applies it to a field of a record (dict, ``sqlite3.Row``, ...), where both
``None`` and ``DB_NULL`` mean "no value".
"""

from __future__ import annotations

import io
import logging
import math
import pickle
import re
import shutil
import struct
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, BinaryIO, NamedTuple, TypeVar
from uuid import UUID

from dateutil import parser as dateutil_parser

from .errors import (
    FormatError,
    InvalidCastError,
    NullInputError,
    NumericOverflowError,
    SerializationError,
    StreamReadError,
)
from .numbers import (
    INVARIANT,
    NumberFormat,
    NumberStyle,
    numeric_type,
    parse_number,
)
from .typeutils import unwrap_optional

__all__ = [
    "DB_NULL",
    "Unit",
    "change_type",
    "from_bytes",
    "get_value",
    "get_value_or",
    "stream_to_bytes",
    "to_bool",
    "to_byte",
    "to_byte_or",
    "to_bytes",
    "to_datetime",
    "to_datetime_or",
    "to_decimal",
    "to_decimal_or",
    "to_double",
    "to_double_or",
    "to_float",
    "to_float_or",
    "to_guid",
    "to_guid_or",
    "to_int16",
    "to_int16_or",
    "to_int32",
    "to_int32_or",
    "to_int64",
    "to_int64_or",
    "to_number",
    "to_number_or",
    "to_single",
    "to_single_or",
    "to_timespan",
    "to_timespan_or",
    "to_unit",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that defaulting conversions turn into the fallback value.
_CONVERSION_ERRORS = (FormatError, NumericOverflowError, NullInputError)


class DBNullType:
    """Type of ``DB_NULL``, the database null sentinel."""

    _instance: DBNullType | None = None

    def __new__(cls) -> DBNullType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DB_NULL"

    def __str__(self) -> str:
        return ""

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "DB_NULL"


DB_NULL = DBNullType()


def _is_absent(value: Any) -> bool:
    return value is None or value is DB_NULL


def _text(value: Any, target: str) -> str:
    if _is_absent(value):
        raise NullInputError(f"Cannot convert {value!r} to {target}")
    return value if isinstance(value, str) else str(value)


def _fallback(func: Callable[[], T], default: Any, target: str) -> T | Any:
    try:
        return func()
    except _CONVERSION_ERRORS as exc:
        logger.debug("Conversion to %s failed, using default %r: %s", target, default, exc)
        return default


# -----------------------------------------------------------------------------
# Numeric conversions
# -----------------------------------------------------------------------------


def to_number(
    value: Any,
    tag: str,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> int | float | Decimal:
    """
    Convert ``value`` to the numeric target ``tag``.

    Args:
        value: Any object; its ``str()`` form is parsed.
        tag: ``"byte"``, ``"int16"``, ``"int32"``, ``"int64"``, ``"single"``,
            ``"double"`` or ``"decimal"``.
        style: Allowed literal elements, see ``NumberStyle``.
        number_format: Literal symbols, see ``NumberFormat``.

    Raises:
        NullInputError: If ``value`` is None or DB_NULL.
        FormatError: If the text is not a valid literal.
        NumericOverflowError: If the number does not fit ``tag``.
        ValueError: If ``tag`` is unknown or ``style`` is invalid for it.
    """
    numeric_type(tag)
    return parse_number(_text(value, tag), tag, style, number_format)


def to_number_or(
    value: Any,
    tag: str,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    """Like ``to_number`` but return ``default`` when the conversion fails."""
    numeric_type(tag)
    return _fallback(lambda: to_number(value, tag, style, number_format), default, tag)


def to_byte(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> int:
    """Convert ``value`` to an unsigned 8-bit integer (0..255)."""
    return to_number(value, "byte", style, number_format)


def to_byte_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "byte", default, style, number_format)


def to_int16(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> int:
    """Convert ``value`` to a signed 16-bit integer."""
    return to_number(value, "int16", style, number_format)


def to_int16_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "int16", default, style, number_format)


def to_int32(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> int:
    """
    Convert ``value`` to a signed 32-bit integer.

    Examples:
        >>> to_int32(" -42 ")
        -42
        >>> to_int32("1,000", NumberStyle.INTEGER | NumberStyle.ALLOW_THOUSANDS)
        1000
        >>> to_int32("ff", NumberStyle.HEX_NUMBER)
        255
    """
    return to_number(value, "int32", style, number_format)


def to_int32_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    """
    Convert ``value`` to a signed 32-bit integer, or return ``default``.

    Examples:
        >>> to_int32_or("42", 0)
        42
        >>> to_int32_or(None, -1)
        -1
    """
    return to_number_or(value, "int32", default, style, number_format)


def to_int64(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> int:
    """Convert ``value`` to a signed 64-bit integer."""
    return to_number(value, "int64", style, number_format)


def to_int64_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "int64", default, style, number_format)


def to_single(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> float:
    """Convert ``value`` to a float rounded to single (32-bit) precision."""
    return to_number(value, "single", style, number_format)


def to_single_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "single", default, style, number_format)


# ``float`` here is the 32-bit type of typed languages, as in ``to_single``.
to_float = to_single
to_float_or = to_single_or


def to_double(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> float:
    """Convert ``value`` to a Python float (64-bit)."""
    return to_number(value, "double", style, number_format)


def to_double_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "double", default, style, number_format)


def to_decimal(
    value: Any, style: NumberStyle | None = None, number_format: NumberFormat | None = None
) -> Decimal:
    """Convert ``value`` to ``Decimal``, keeping the literal's scale."""
    return to_number(value, "decimal", style, number_format)


def to_decimal_or(
    value: Any,
    default: Any,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> Any:
    return to_number_or(value, "decimal", default, style, number_format)


# -----------------------------------------------------------------------------
# Other scalar conversions
# -----------------------------------------------------------------------------


def to_bool(value: Any) -> bool:
    """
    Coerce ``value`` to bool without ever failing.

    Only ``"1"`` and ``"true"`` (case-insensitive, surrounding blanks ignored)
    are True. None, DB_NULL, blank strings and any other text are False.

    Examples:
        >>> to_bool("TRUE"), to_bool(" 1 "), to_bool(True)
        (True, True, True)
        >>> to_bool("2"), to_bool(""), to_bool(None)
        (False, False, False)
    """
    if _is_absent(value):
        return False
    text = str(value).strip()
    if not text:
        return False
    return text == "1" or text.lower() == "true"


def to_guid(value: Any) -> UUID:
    """Convert ``value`` to ``uuid.UUID``."""
    if isinstance(value, UUID):
        return value
    text = _text(value, "guid").strip()
    try:
        return UUID(text)
    except ValueError as exc:
        raise FormatError(f"Invalid GUID: {text!r}") from exc


def to_guid_or(value: Any, default: Any) -> Any:
    return _fallback(lambda: to_guid(value), default, "guid")


_TIMESPAN_RE = re.compile(
    r"(?P<sign>-)?"
    r"(?:(?P<days>\d+)\.)?"
    r"(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?"
)
_DAYS_RE = re.compile(r"(?P<sign>-)?(?P<days>\d+)")


def to_timespan(value: Any) -> timedelta:
    """
    Convert ``value`` to ``timedelta``.

    Accepted forms are ``[-][d.]hh:mm[:ss[.fffffff]]`` and a bare day count
    ``[-]d``. Hours must be below 24, minutes and seconds below 60.

    Examples:
        >>> to_timespan("1.02:03:04.5")
        datetime.timedelta(days=1, seconds=7384, microseconds=500000)
        >>> to_timespan("-3")
        datetime.timedelta(days=-3)
    """
    if isinstance(value, timedelta):
        return value
    text = _text(value, "timespan").strip()

    parts: dict[str, int] = {}
    match = _DAYS_RE.fullmatch(text)
    if match is None:
        match = _TIMESPAN_RE.fullmatch(text)
        if match is None:
            raise FormatError(f"Invalid time span: {text!r}")
        parts["hours"] = int(match.group("hours"))
        parts["minutes"] = int(match.group("minutes"))
        parts["seconds"] = int(match.group("seconds") or 0)
        if parts["hours"] > 23 or parts["minutes"] > 59 or parts["seconds"] > 59:
            raise NumericOverflowError(f"Time span component out of range: {text!r}")
        # Seven fractional digits are 100ns ticks; timedelta keeps microseconds.
        ticks = int((match.group("fraction") or "0").ljust(7, "0"))
        parts["microseconds"] = ticks // 10
    parts["days"] = int(match.group("days") or 0)

    try:
        result = timedelta(**parts)
        return -result if match.group("sign") else result
    except OverflowError as exc:
        raise NumericOverflowError(f"Time span out of range: {text!r}") from exc


def to_timespan_or(value: Any, default: Any) -> Any:
    return _fallback(lambda: to_timespan(value), default, "timespan")


def to_datetime(value: Any, **parser_options: Any) -> datetime:
    """
    Convert ``value`` to ``datetime`` using ``dateutil.parser.parse``.

    Args:
        value: A datetime, a date or a date/time text.
        **parser_options: Passed to ``dateutil.parser.parse`` (``dayfirst``,
            ``yearfirst``, ``tzinfos``, ...).
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    text = _text(value, "datetime")
    try:
        return dateutil_parser.parse(text, **parser_options)
    except OverflowError as exc:
        raise NumericOverflowError(f"Date out of range: {text!r}") from exc
    except ValueError as exc:
        raise FormatError(f"Invalid date: {text!r}") from exc


def to_datetime_or(value: Any, default: Any, **parser_options: Any) -> Any:
    return _fallback(lambda: to_datetime(value, **parser_options), default, "datetime")


class Unit(NamedTuple):
    """A CSS length: numeric value plus unit kind (``px``, ``%``, ``em``, ...)."""

    value: float
    kind: str = "px"

    def __str__(self) -> str:
        return f"{self.value:g}{self.kind}"


_UNIT_RE = re.compile(
    r"\s*(?P<value>[+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*(?P<kind>px|pt|pc|in|mm|cm|%|em|ex)?\s*",
    re.IGNORECASE,
)


def to_unit(value: Any) -> Unit:
    """
    Parse a CSS length. A bare number is a pixel length.

    Examples:
        >>> to_unit(12)
        Unit(value=12.0, kind='px')
        >>> str(to_unit("50%"))
        '50%'
    """
    if isinstance(value, Unit):
        return value
    text = _text(value, "unit")
    match = _UNIT_RE.fullmatch(text)
    if match is None:
        raise FormatError(f"Invalid unit: {text!r}")
    kind = (match.group("kind") or "px").lower()
    return Unit(float(match.group("value")), kind)


# -----------------------------------------------------------------------------
# Generic runtime-type conversion
# -----------------------------------------------------------------------------


def _change_number(value: Any, tag: str) -> int | float | Decimal:
    if isinstance(value, str):
        return parse_number(value, tag, number_format=INVARIANT)
    if isinstance(value, bool):
        value = int(value)
    if not isinstance(value, (int, float, Decimal)):
        raise InvalidCastError(f"Cannot convert {type(value).__name__} to {tag}")

    target = numeric_type(tag)
    if isinstance(value, float) and not math.isfinite(value):
        # inf and nan only exist in the binary floating point targets
        if tag in ("single", "double"):
            return value
        raise NumericOverflowError(f"Value {value!r} does not fit {tag}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise NumericOverflowError(f"Value {value!r} does not fit {tag}")

    if target.integral:
        # round() on float and Decimal is half-to-even
        number = value if isinstance(value, int) else round(value)
        if not target.minimum <= number <= target.maximum:
            raise NumericOverflowError(f"Value {value!r} does not fit {tag}")
        return int(number)

    if target.tag == "decimal":
        exact = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
        if not target.minimum <= exact <= target.maximum:
            raise NumericOverflowError(f"Value {value!r} does not fit decimal")
        return exact

    try:
        number = float(value)
    except OverflowError as exc:
        raise NumericOverflowError(f"Value {value!r} does not fit {tag}") from exc
    if math.isinf(number):
        raise NumericOverflowError(f"Value {value!r} does not fit {tag}")
    if target.tag == "single":
        try:
            number = struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError as exc:
            raise NumericOverflowError(f"Value {value!r} does not fit single") from exc
    return number


_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _change_int(value: Any) -> int:
    if isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.fullmatch(text):
            raise FormatError(f"Invalid integer literal: {value!r}")
        return int(text)
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, (float, Decimal)):
        try:
            return round(value)
        except (OverflowError, ValueError, InvalidOperation) as exc:
            raise NumericOverflowError(f"Value {value!r} does not fit int") from exc
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to int")


def _change_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
        raise FormatError(f"Invalid boolean literal: {value!r}")
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to bool")


def _change_datetime(value: Any) -> datetime:
    if isinstance(value, (datetime, date, str)):
        return to_datetime(value)
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to datetime")


def _change_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return to_datetime(value).date()
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to date")


def _change_timedelta(value: Any) -> timedelta:
    if isinstance(value, (timedelta, str)):
        return to_timespan(value)
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to timedelta")


def _change_uuid(value: Any) -> UUID:
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return UUID(bytes=bytes(value))
    if isinstance(value, (UUID, str)):
        return to_guid(value)
    raise InvalidCastError(f"Cannot convert {type(value).__name__} to UUID")


def _change_str(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


# Targets that cannot hold None unless wrapped in Optional.
_VALUE_CONVERTERS: dict[Any, Callable[[Any], Any]] = {
    int: _change_int,
    float: lambda v: _change_number(v, "double"),
    Decimal: lambda v: _change_number(v, "decimal"),
    bool: _change_bool,
    datetime: _change_datetime,
    date: _change_date,
    timedelta: _change_timedelta,
    UUID: _change_uuid,
    "byte": lambda v: _change_number(v, "byte"),
    "int16": lambda v: _change_number(v, "int16"),
    "int32": lambda v: _change_number(v, "int32"),
    "int64": lambda v: _change_number(v, "int64"),
    "single": lambda v: _change_number(v, "single"),
    "double": lambda v: _change_number(v, "double"),
    "decimal": lambda v: _change_number(v, "decimal"),
}

_REFERENCE_CONVERTERS: dict[Any, Callable[[Any], Any]] = {
    str: _change_str,
}


def change_type(value: Any, target: Any) -> Any:
    """
    Convert ``value`` to ``target``.

    ``target`` is a type (``int``, ``float``, ``str``, ``bool``, ``Decimal``,
    ``datetime``, ``date``, ``timedelta``, ``UUID`` or any other class), a
    sized numeric tag (``"int32"``, ``"byte"``, ...) or an ``Optional`` of
    either.

    Rules:
        - ``Optional[T]`` is unwrapped to ``T`` and absent input gives None.
        - Absent input (None or DB_NULL) gives None for targets that are not
          value types (``str``, ``object``, user classes).
        - Absent input for a value type raises ``InvalidCastError``.
        - Values already of the target type are returned unchanged.
        - Targets without a conversion path raise ``InvalidCastError``.

    Examples:
        >>> change_type("12", int)
        12
        >>> change_type(None, int | None) is None
        True
        >>> change_type(2.5, "int32")
        2

    Raises:
        ValueError: If ``target`` is None or an unknown tag string.
        InvalidCastError: If there is no conversion path.
        FormatError: If a string is not a valid literal for the target.
        NumericOverflowError: If a number does not fit the target.
    """
    if target is None:
        raise ValueError("target type cannot be None")

    is_optional, target = unwrap_optional(target)
    if isinstance(target, str) and target not in _VALUE_CONVERTERS:
        numeric_type(target)

    if _is_absent(value):
        if is_optional or target not in _VALUE_CONVERTERS:
            return None
        raise InvalidCastError(f"Cannot convert {value!r} to value type {target!r}")

    converter = _VALUE_CONVERTERS.get(target) or _REFERENCE_CONVERTERS.get(target)
    if converter is not None:
        if isinstance(target, type) and type(value) is target:
            return value
        return converter(value)

    if isinstance(target, type) and isinstance(value, target):
        return value
    raise InvalidCastError(
        f"Cannot convert {type(value).__name__} to {getattr(target, '__name__', target)}"
    )


def get_value(record: Any, field: str | int, target: Any) -> Any:
    """
    Read ``record[field]`` and convert it with ``change_type``.

    ``record`` is any object supporting item access: a dict, a ``sqlite3.Row``,
    a database driver row. Lookup errors from the record propagate.
    """
    return change_type(record[field], target)


def get_value_or(record: Any, field: str | int, target: Any, default: Any) -> Any:
    """
    Read ``record[field]``; return ``default`` if it is None or DB_NULL.

    Non-null values are converted with ``change_type`` and conversion errors
    propagate.
    """
    raw = record[field]
    if _is_absent(raw):
        return default
    return change_type(raw, target)


# -----------------------------------------------------------------------------
# Bytes
# -----------------------------------------------------------------------------


def to_bytes(obj: Any) -> bytes | None:
    """
    Serialize an object graph with ``pickle``. None gives None.

    Raises:
        SerializationError: If the graph cannot be pickled.
    """
    if obj is None:
        return None
    try:
        return pickle.dumps(obj)
    except (pickle.PicklingError, TypeError, AttributeError) as exc:
        raise SerializationError(f"Cannot serialize {type(obj).__name__}: {exc}") from exc


def from_bytes(data: bytes | None) -> Any:
    """
    Rebuild an object graph produced by ``to_bytes``. None gives None.

    Only use with trusted data: unpickling can execute arbitrary code.

    Raises:
        SerializationError: If ``data`` is not a valid pickle.
    """
    if data is None:
        return None
    try:
        return pickle.loads(data)
    except (
        pickle.UnpicklingError,
        EOFError,
        ValueError,
        TypeError,
        AttributeError,
        ImportError,
        IndexError,
    ) as exc:
        raise SerializationError(f"Cannot deserialize data: {exc}") from exc


def stream_to_bytes(stream: BinaryIO) -> bytes:
    """
    Read a binary stream to exhaustion and return its content.

    The stream is neither rewound nor closed.

    Raises:
        StreamReadError: If reading fails or the stream is closed.
    """
    buffer = io.BytesIO()
    try:
        shutil.copyfileobj(stream, buffer)
    except (OSError, ValueError) as exc:
        # ValueError: read on a closed stream
        raise StreamReadError(f"Failed to read stream: {exc}") from exc
    return buffer.getvalue()
