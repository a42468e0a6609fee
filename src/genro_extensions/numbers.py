# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""
Numeric literal parsing with explicit styles and formats.

This module is the parsing core behind the ``to_*`` helpers of
``genro_extensions.conversion``. It knows three things:

- which numeric targets exist and their ranges (``NUMERIC_TYPES``);
- which syntactic elements a literal may contain (``NumberStyle``);
- which symbols the literal uses (``NumberFormat``).

Parsing works on text only. The literal is validated against the style,
turned into an exact ``Decimal`` and then range checked and narrowed to the
target. Integral targets reject a non-zero fractional part as an overflow,
so ``"1.5"`` parsed with ``NumberStyle.NUMBER`` into ``int32`` fails while
``"1.0"`` succeeds.

Example::

    >>> parse_number("(1,234)", "int32", NumberStyle.INTEGER
    ...              | NumberStyle.ALLOW_PARENTHESES | NumberStyle.ALLOW_THOUSANDS)
    -1234
    >>> parse_number("1.234,5", "decimal", number_format=NumberFormat(
    ...              decimal_separator=",", group_separator="."))
    Decimal('1234.5')
"""

from __future__ import annotations

import locale
import re
import struct
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Flag
from typing import NamedTuple

from .config import get_settings
from .errors import FormatError, NumericOverflowError

__all__ = [
    "INVARIANT",
    "NUMERIC_TYPES",
    "NumberFormat",
    "NumberStyle",
    "NumericType",
    "default_number_format",
    "numeric_type",
    "parse_number",
]

# Whitespace accepted around a literal.
_WHITE = " \t\n\v\f\r"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
# Larger exponents are clamped to this magnitude before building a Decimal.
_MAX_EXPONENT = 999999


class NumberStyle(Flag):
    """Syntactic elements allowed in a numeric literal."""

    NONE = 0
    ALLOW_LEADING_WHITE = 1
    ALLOW_TRAILING_WHITE = 2
    ALLOW_LEADING_SIGN = 4
    ALLOW_TRAILING_SIGN = 8
    ALLOW_PARENTHESES = 16
    ALLOW_DECIMAL_POINT = 32
    ALLOW_THOUSANDS = 64
    ALLOW_EXPONENT = 128
    ALLOW_CURRENCY_SYMBOL = 256
    ALLOW_HEX_SPECIFIER = 512

    INTEGER = ALLOW_LEADING_WHITE | ALLOW_TRAILING_WHITE | ALLOW_LEADING_SIGN
    HEX_NUMBER = ALLOW_LEADING_WHITE | ALLOW_TRAILING_WHITE | ALLOW_HEX_SPECIFIER
    NUMBER = INTEGER | ALLOW_TRAILING_SIGN | ALLOW_DECIMAL_POINT | ALLOW_THOUSANDS
    FLOAT = INTEGER | ALLOW_DECIMAL_POINT | ALLOW_EXPONENT
    CURRENCY = NUMBER | ALLOW_PARENTHESES | ALLOW_CURRENCY_SYMBOL
    ANY = CURRENCY | ALLOW_EXPONENT


@dataclass(frozen=True)
class NumberFormat:
    """
    Symbols used by numeric literals.

    The defaults are the invariant format. ``NumberFormat.current()`` reads the
    separators and signs from the process locale (``locale.localeconv()``),
    falling back to the invariant symbol where the locale leaves one empty.
    """

    decimal_separator: str = "."
    group_separator: str = ","
    negative_sign: str = "-"
    positive_sign: str = "+"
    currency_symbol: str = "¤"
    nan_symbol: str = "NaN"
    positive_infinity_symbol: str = "Infinity"
    negative_infinity_symbol: str = "-Infinity"

    @classmethod
    def current(cls) -> NumberFormat:
        """Build a format from the current process locale."""
        conv = locale.localeconv()
        return cls(
            decimal_separator=conv.get("decimal_point") or ".",
            group_separator=conv.get("thousands_sep") or ",",
            negative_sign=conv.get("negative_sign") or "-",
            positive_sign=conv.get("positive_sign") or "+",
            currency_symbol=conv.get("currency_symbol") or "¤",
        )


INVARIANT = NumberFormat()


class NumericType(NamedTuple):
    """Description of a numeric target."""

    tag: str
    integral: bool
    minimum: Decimal
    maximum: Decimal
    bits: int
    signed: bool
    default_style: NumberStyle


_DECIMAL_MAX = Decimal("79228162514264337593543950335")
_SINGLE_MAX = Decimal("3.4028234663852886e38")
_DOUBLE_MAX = Decimal(sys.float_info.max)


def _int_type(tag: str, bits: int, signed: bool) -> NumericType:
    if signed:
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        low, high = 0, 2**bits - 1
    return NumericType(
        tag, True, Decimal(low), Decimal(high), bits, signed, NumberStyle.INTEGER
    )


NUMERIC_TYPES: dict[str, NumericType] = {
    "byte": _int_type("byte", 8, signed=False),
    "int16": _int_type("int16", 16, signed=True),
    "int32": _int_type("int32", 32, signed=True),
    "int64": _int_type("int64", 64, signed=True),
    "single": NumericType(
        "single", False, -_SINGLE_MAX, _SINGLE_MAX, 32, True,
        NumberStyle.FLOAT | NumberStyle.ALLOW_THOUSANDS,
    ),
    "double": NumericType(
        "double", False, -_DOUBLE_MAX, _DOUBLE_MAX, 64, True,
        NumberStyle.FLOAT | NumberStyle.ALLOW_THOUSANDS,
    ),
    "decimal": NumericType(
        "decimal", False, -_DECIMAL_MAX, _DECIMAL_MAX, 128, True,
        NumberStyle.NUMBER,
    ),
}


def numeric_type(tag: str) -> NumericType:
    """Return the ``NumericType`` for ``tag``, raising ValueError if unknown."""
    try:
        return NUMERIC_TYPES[tag]
    except KeyError:
        raise ValueError(
            f"Unknown numeric type: {tag!r}. "
            f"Supported: {', '.join(NUMERIC_TYPES)}"
        ) from None


def default_number_format() -> NumberFormat:
    """Return the format selected by the ``number_format`` setting."""
    if get_settings().number_format == "current":
        return NumberFormat.current()
    return INVARIANT


def parse_number(
    text: str,
    tag: str,
    style: NumberStyle | None = None,
    number_format: NumberFormat | None = None,
) -> int | float | Decimal:
    """
    Parse ``text`` into the numeric target identified by ``tag``.

    Args:
        text: The literal to parse.
        tag: One of the keys of ``NUMERIC_TYPES``.
        style: Allowed syntactic elements. Defaults to the target's style.
        number_format: Symbols to use. Defaults to ``default_number_format()``.

    Returns:
        ``int`` for integral targets, ``float`` for ``single``/``double``,
        ``Decimal`` for ``decimal``.

    Raises:
        FormatError: If ``text`` is not a valid literal for the style.
        NumericOverflowError: If the value does not fit the target.
        ValueError: If ``tag`` is unknown or the style is invalid for it.
    """
    target = numeric_type(tag)
    if style is None:
        style = target.default_style
    if number_format is None:
        number_format = default_number_format()

    if style & NumberStyle.ALLOW_HEX_SPECIFIER:
        return _parse_hex(text, target, style)

    body = _strip_white(text, style)
    if not body:
        raise FormatError(f"Empty numeric literal for {tag}: {text!r}")

    if tag in ("single", "double"):
        special = _special_float(body, number_format)
        if special is not None:
            return special

    value = _parse_decimal(body, style, number_format, text)
    return _narrow(value, target, text)


def _strip_white(text: str, style: NumberStyle) -> str:
    if style & NumberStyle.ALLOW_LEADING_WHITE:
        text = text.lstrip(_WHITE)
    if style & NumberStyle.ALLOW_TRAILING_WHITE:
        text = text.rstrip(_WHITE)
    return text


def _parse_hex(text: str, target: NumericType, style: NumberStyle) -> int:
    if not target.integral:
        raise ValueError(f"Hex style is only valid for integral types, not {target.tag}")
    if style & ~NumberStyle.HEX_NUMBER:
        raise ValueError("Hex style can only be combined with white space flags")

    body = _strip_white(text, style)
    if not body or not all(c in _HEX_DIGITS for c in body):
        raise FormatError(f"Invalid hex literal for {target.tag}: {text!r}")

    value = int(body, 16)
    if value >= 2**target.bits:
        raise NumericOverflowError(f"Value {text!r} is out of range for {target.tag}")
    # Hex literals of signed targets are two's complement bit patterns.
    if target.signed and value >= 2 ** (target.bits - 1):
        value -= 2**target.bits
    return value


def _special_float(body: str, fmt: NumberFormat) -> float | None:
    folded = body.casefold()
    if folded in {fmt.nan_symbol.casefold(), "nan"}:
        return float("nan")
    positive = {fmt.positive_infinity_symbol.casefold(), "inf", "infinity"}
    positive |= {fmt.positive_sign + p for p in positive}
    if folded in positive:
        return float("inf")
    negative = {fmt.negative_infinity_symbol.casefold()}
    negative |= {fmt.negative_sign + p for p in ("inf", "infinity")}
    if folded in negative:
        return float("-inf")
    return None


def _take_currency(body: str, style: NumberStyle, fmt: NumberFormat) -> str:
    if not (style & NumberStyle.ALLOW_CURRENCY_SYMBOL) or not fmt.currency_symbol:
        return body
    if body.startswith(fmt.currency_symbol):
        body = body[len(fmt.currency_symbol):].lstrip(" ")
    if body.endswith(fmt.currency_symbol):
        body = body[: -len(fmt.currency_symbol)].rstrip(" ")
    return body


def _take_sign(body: str, style: NumberStyle, fmt: NumberFormat) -> tuple[str, bool | None]:
    """Strip one leading or trailing sign; return (body, negative or None)."""
    if style & NumberStyle.ALLOW_LEADING_SIGN:
        if body.startswith(fmt.negative_sign):
            return body[len(fmt.negative_sign):], True
        if body.startswith(fmt.positive_sign):
            return body[len(fmt.positive_sign):], False
    if style & NumberStyle.ALLOW_TRAILING_SIGN:
        if body.endswith(fmt.negative_sign):
            return body[: -len(fmt.negative_sign)], True
        if body.endswith(fmt.positive_sign):
            return body[: -len(fmt.positive_sign)], False
    return body, None


def _digits_pattern(style: NumberStyle, fmt: NumberFormat) -> re.Pattern[str]:
    if style & NumberStyle.ALLOW_THOUSANDS and fmt.group_separator:
        int_part = rf"[0-9](?:[0-9]|{re.escape(fmt.group_separator)})*"
    else:
        int_part = r"[0-9]+"
    pattern = rf"(?P<int>{int_part})?"
    if style & NumberStyle.ALLOW_DECIMAL_POINT:
        pattern += rf"(?:{re.escape(fmt.decimal_separator)}(?P<frac>[0-9]*))?"
    if style & NumberStyle.ALLOW_EXPONENT:
        pattern += r"(?:[eE](?P<exp>[+-]?[0-9]+))?"
    return re.compile(pattern)


def _clamp_exponent(exponent: str) -> str:
    """
    Bound the exponent of a literal to ``_MAX_EXPONENT``.

    A clamped positive exponent still overflows every target, a clamped
    negative one still leaves a non-zero fraction, so range checking gives
    the same verdict as with the exact exponent.
    """
    negative = exponent.startswith("-")
    digits = exponent.lstrip("+-").lstrip("0") or "0"
    if len(digits) > len(str(_MAX_EXPONENT)) or int(digits) > _MAX_EXPONENT:
        digits = str(_MAX_EXPONENT)
    return ("-" if negative else "") + digits


def _parse_decimal(
    body: str, style: NumberStyle, fmt: NumberFormat, original: str
) -> Decimal:
    negative = False
    if (
        style & NumberStyle.ALLOW_PARENTHESES
        and body.startswith("(")
        and body.endswith(")")
    ):
        negative = True
        body = body[1:-1]

    body = _take_currency(body, style, fmt)
    body, sign = _take_sign(body, style, fmt)
    if sign is not None:
        if negative:
            raise FormatError(f"Sign inside parentheses: {original!r}")
        negative = sign
        body = _take_currency(body, style, fmt)

    match = _digits_pattern(style, fmt).fullmatch(body)
    if match is None:
        raise FormatError(f"Invalid numeric literal: {original!r}")

    int_digits = (match.group("int") or "").replace(fmt.group_separator, "")
    frac_digits = match.groupdict().get("frac") or ""
    exponent = match.groupdict().get("exp")
    if not int_digits and not frac_digits:
        raise FormatError(f"Invalid numeric literal: {original!r}")

    literal = int_digits or "0"
    if frac_digits:
        literal += "." + frac_digits
    if exponent:
        literal += "E" + _clamp_exponent(exponent)
    try:
        value = Decimal(literal)
    except InvalidOperation as exc:
        raise FormatError(f"Invalid numeric literal: {original!r}") from exc
    return -value if negative else value


def _narrow(value: Decimal, target: NumericType, original: str) -> int | float | Decimal:
    if value < target.minimum or value > target.maximum:
        raise NumericOverflowError(f"Value {original!r} is out of range for {target.tag}")

    if target.integral:
        if value != value.to_integral_value():
            raise NumericOverflowError(
                f"Value {original!r} has a fractional part and does not fit {target.tag}"
            )
        return int(value)

    if target.tag == "decimal":
        return value

    number = float(value)
    if target.tag == "single":
        try:
            number = struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError as exc:
            raise NumericOverflowError(
                f"Value {original!r} is out of range for single"
            ) from exc
    return number
