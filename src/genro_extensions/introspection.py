# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""
Name-based access to fields, properties and methods of arbitrary objects.

Terminology:

- field: an instance attribute (``__dict__`` or ``__slots__``) or a plain
  data attribute declared on the class (with a value or an annotation);
- property: a ``property`` descriptor found along the class MRO;
- method: a function defined on the class. A ``functools.singledispatchmethod``
  exposes one overload per registered type.

Members whose name starts with an underscore are not public: looking them up
raises ``MemberAccessError``. Members are resolved on ``type(obj)`` at every
call; nothing is cached.

Example::

    >>> class Point:
    ...     def __init__(self, x: int) -> None:
    ...         self.x = x
    ...     def double(self) -> int:
    ...         return self.x * 2
    >>> p = Point(2)
    >>> set_field_value(p, "x", 5)
    >>> invoke_method(p, "double")
    10

Index-based property access (``get_property_value_at``) depends on the order
of ``list_properties``: most derived class first, then definition order inside
each class. Renaming or moving a property changes the indexes, so prefer the
name-based accessors.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import MethodType, UnionType
from typing import Any, Union, get_args, get_origin, get_type_hints

from .errors import (
    AmbiguousMatchError,
    InvocationError,
    MemberAccessError,
    MemberNotFoundError,
    TypeMismatchError,
)
from .typeutils import safe_is_instance

__all__ = [
    "MethodInfo",
    "PropertyInfo",
    "get_field_value",
    "get_method_info",
    "get_property_info",
    "get_property_type",
    "get_property_value",
    "get_property_value_at",
    "invoke_method",
    "invoke_method_with_args",
    "invoke_method_with_types",
    "list_methods",
    "list_properties",
    "set_field_value",
    "set_property_value",
    "set_property_value_at",
]

_MISSING = object()


@dataclass(frozen=True)
class PropertyInfo:
    """Description of a property: declared type and accessor availability."""

    name: str
    type: Any
    readable: bool
    writable: bool
    owner: type


@dataclass(frozen=True)
class MethodInfo:
    """
    One callable overload of a method, bound to an instance.

    Attributes:
        name: Method name.
        parameter_types: Declared types of the positional parameters
            (``Any`` when not annotated), excluding ``self``/``cls``.
        required: Number of positional parameters without a default.
        variadic: True if the overload accepts ``*args``.
        return_type: Declared return type (``Any`` when not annotated).
        target: The callable invoked by ``invoke``.
        owner: Class defining the method.
    """

    name: str
    parameter_types: tuple[Any, ...]
    required: int
    variadic: bool
    return_type: Any
    target: Callable[..., Any]
    owner: type

    def accepts(self, args: Sequence[Any]) -> bool:
        """True if ``args`` fit the arity and the declared parameter types."""
        count = len(args)
        if count < self.required:
            return False
        if count > len(self.parameter_types) and not self.variadic:
            return False
        return all(
            safe_is_instance(arg, declared)
            for arg, declared in zip(args, self.parameter_types)
        )

    def invoke(self, *args: Any) -> Any:
        """Call the overload, wrapping any raised exception in ``InvocationError``."""
        try:
            return self.target(*args)
        except Exception as exc:
            raise InvocationError(
                f"{self.owner.__name__}.{self.name} raised {type(exc).__name__}: {exc}"
            ) from exc


# -----------------------------------------------------------------------------
# Lookup helpers
# -----------------------------------------------------------------------------


def _check_public(obj: Any, name: str) -> None:
    if name.startswith("_"):
        raise MemberAccessError(
            f"Member {name!r} of {type(obj).__name__} is not public"
        )


def _find_static(cls: type, name: str) -> tuple[type | None, Any]:
    """Return ``(owner, raw attribute)`` from the MRO without triggering descriptors."""
    for klass in cls.__mro__:
        if name in vars(klass):
            return klass, vars(klass)[name]
    return None, _MISSING


def _type_hints(target: Any) -> dict[str, Any]:
    # Unresolvable forward references leave the member untyped.
    try:
        return get_type_hints(target)
    except (NameError, TypeError, AttributeError):
        return dict(getattr(target, "__annotations__", {}))


def _slot_names(cls: type) -> set[str]:
    names: set[str] = set()
    for klass in cls.__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(slots)
    return names


def _is_method_like(attr: Any) -> bool:
    return (
        inspect.isfunction(attr)
        or isinstance(attr, (staticmethod, classmethod, property))
        or isinstance(attr, functools.singledispatchmethod)
    )


def _is_field(obj: Any, name: str) -> bool:
    cls = type(obj)
    if name in getattr(obj, "__dict__", {}):
        return True
    if name in _slot_names(cls):
        return True
    _, attr = _find_static(cls, name)
    if attr is _MISSING:
        return name in _type_hints(cls)
    return not _is_method_like(attr) and not hasattr(attr, "__get__")


def _require_field(obj: Any, name: str) -> None:
    _check_public(obj, name)
    if not _is_field(obj, name):
        raise MemberNotFoundError(f"{type(obj).__name__} has no field {name!r}")


def _check_type(value: Any, declared: Any, owner: type, name: str) -> None:
    if not safe_is_instance(value, declared):
        raise TypeMismatchError(
            f"Cannot assign {type(value).__name__} to "
            f"{owner.__name__}.{name} declared as {declared!r}"
        )


# -----------------------------------------------------------------------------
# Fields
# -----------------------------------------------------------------------------


def get_field_value(obj: Any, name: str) -> Any:
    """
    Return the value of field ``name``.

    Raises:
        MemberNotFoundError: If there is no such field (or a slot is unset).
        MemberAccessError: If ``name`` is not public.
    """
    _require_field(obj, name)
    try:
        return getattr(obj, name)
    except AttributeError as exc:
        raise MemberNotFoundError(
            f"Field {name!r} of {type(obj).__name__} has no value"
        ) from exc


def set_field_value(obj: Any, name: str, value: Any) -> None:
    """
    Assign ``value`` to field ``name``.

    The value is checked against the class annotation of the field, if any.

    Raises:
        MemberNotFoundError: If there is no such field.
        MemberAccessError: If ``name`` is not public or the object is read-only
            (e.g. a frozen dataclass).
        TypeMismatchError: If ``value`` does not match the annotation.
    """
    _require_field(obj, name)
    cls = type(obj)
    hints = _type_hints(cls)
    if name in hints:
        _check_type(value, hints[name], cls, name)
    try:
        setattr(obj, name, value)
    except AttributeError as exc:
        raise MemberAccessError(
            f"Field {name!r} of {cls.__name__} cannot be assigned: {exc}"
        ) from exc


# -----------------------------------------------------------------------------
# Properties
# -----------------------------------------------------------------------------


def _property_info(owner: type, name: str, prop: property) -> PropertyInfo:
    declared: Any = Any
    if prop.fget is not None:
        declared = _type_hints(prop.fget).get("return", Any)
    return PropertyInfo(
        name=name,
        type=declared,
        readable=prop.fget is not None,
        writable=prop.fset is not None,
        owner=owner,
    )


def _require_property(obj: Any, name: str) -> tuple[property, PropertyInfo]:
    _check_public(obj, name)
    owner, attr = _find_static(type(obj), name)
    if not isinstance(attr, property):
        raise MemberNotFoundError(f"{type(obj).__name__} has no property {name!r}")
    return attr, _property_info(owner, name, attr)


def list_properties(obj: Any) -> list[PropertyInfo]:
    """
    Return the public properties of ``obj``.

    Order: most derived class first, definition order inside each class.
    A property overridden in a subclass appears once, at the subclass position.
    """
    seen: set[str] = set()
    result: list[PropertyInfo] = []
    for klass in type(obj).__mro__:
        for name, attr in vars(klass).items():
            if name in seen or name.startswith("_"):
                continue
            seen.add(name)
            if isinstance(attr, property):
                result.append(_property_info(klass, name, attr))
    return result


def get_property_info(
    obj: Any, name: str, expected_type: Any = None
) -> PropertyInfo | None:
    """
    Describe property ``name``; None if it does not exist.

    With ``expected_type``, None is also returned when the declared type
    differs from it.
    """
    if name.startswith("_"):
        return None
    owner, attr = _find_static(type(obj), name)
    if not isinstance(attr, property):
        return None
    info = _property_info(owner, name, attr)
    if expected_type is not None and info.type != expected_type:
        return None
    return info


def get_property_type(obj: Any, name: str) -> Any:
    """Return the declared type of property ``name`` (``Any`` if unannotated)."""
    return _require_property(obj, name)[1].type


def get_property_value(obj: Any, name: str) -> Any:
    """
    Read property ``name``.

    Raises:
        MemberNotFoundError: If there is no such property.
        MemberAccessError: If it is not public or has no getter.
    """
    prop, info = _require_property(obj, name)
    if prop.fget is None:
        raise MemberAccessError(f"Property {name!r} of {info.owner.__name__} is write-only")
    return prop.fget(obj)


def set_property_value(obj: Any, name: str, value: Any) -> None:
    """
    Write property ``name``.

    Raises:
        MemberNotFoundError: If there is no such property.
        MemberAccessError: If it is not public or has no setter.
        TypeMismatchError: If ``value`` does not match the getter's return type.
    """
    prop, info = _require_property(obj, name)
    if prop.fset is None:
        raise MemberAccessError(f"Property {name!r} of {info.owner.__name__} is read-only")
    _check_type(value, info.type, info.owner, name)
    prop.fset(obj, value)


def _property_at(obj: Any, index: int) -> PropertyInfo:
    properties = list_properties(obj)
    if not 0 <= index < len(properties):
        raise MemberNotFoundError(
            f"{type(obj).__name__} has no property at index {index} "
            f"({len(properties)} properties)"
        )
    return properties[index]


def get_property_value_at(obj: Any, index: int) -> Any:
    """Read the property at position ``index`` of ``list_properties(obj)``."""
    return get_property_value(obj, _property_at(obj, index).name)


def set_property_value_at(obj: Any, index: int, value: Any) -> None:
    """Write the property at position ``index`` of ``list_properties(obj)``."""
    set_property_value(obj, _property_at(obj, index).name, value)


# -----------------------------------------------------------------------------
# Methods
# -----------------------------------------------------------------------------


def _make_info(
    name: str,
    owner: type,
    func: Callable[..., Any],
    target: Callable[..., Any],
    skip: int,
    first_type: Any = _MISSING,
) -> MethodInfo:
    hints = _type_hints(func)
    parameter_types: list[Any] = []
    required = 0
    variadic = False
    params = list(inspect.signature(func).parameters.values())[skip:]
    for param in params:
        if param.kind is param.VAR_POSITIONAL:
            variadic = True
        elif param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            parameter_types.append(hints.get(param.name, Any))
            if param.default is param.empty:
                required += 1
    if first_type is not _MISSING and parameter_types:
        parameter_types[0] = first_type
    return MethodInfo(
        name=name,
        parameter_types=tuple(parameter_types),
        required=required,
        variadic=variadic,
        return_type=hints.get("return", Any),
        target=target,
        owner=owner,
    )


def list_methods(obj: Any, name: str) -> list[MethodInfo]:
    """
    Return every overload of method ``name`` bound to ``obj``.

    A plain function, ``staticmethod`` or ``classmethod`` gives one overload.
    A ``functools.singledispatchmethod`` gives one overload per registered
    type, the default implementation being registered for ``object``.
    Missing or non-method attributes give an empty list.
    """
    cls = type(obj)
    owner, attr = _find_static(cls, name)
    if attr is _MISSING:
        return []

    if isinstance(attr, functools.singledispatchmethod):
        overloads = []
        for registered, func in attr.dispatcher.registry.items():
            overloads.append(
                _make_info(
                    name, owner, func, MethodType(func, obj), 1, registered
                )
            )
        return overloads
    if isinstance(attr, staticmethod):
        func = attr.__func__
        return [_make_info(name, owner, func, func, 0)]
    if isinstance(attr, classmethod):
        func = attr.__func__
        return [_make_info(name, owner, func, MethodType(func, cls), 1)]
    if inspect.isfunction(attr):
        return [_make_info(name, owner, attr, MethodType(attr, obj), 1)]
    return []


def _accepts_type(declared: Any, given: Any) -> bool:
    if declared is Any or declared is object or declared == given:
        return True
    origin = get_origin(declared)
    if origin is Union or isinstance(declared, UnionType):
        return any(_accepts_type(arg, given) for arg in get_args(declared))
    if origin is not None:
        declared = origin
    if isinstance(declared, type) and isinstance(given, type):
        return issubclass(given, declared)
    return False


def _more_specific(info: MethodInfo, other: MethodInfo, count: int) -> bool:
    """True if the first ``count`` parameters of ``info`` narrow those of ``other``."""
    mine = info.parameter_types[:count]
    theirs = other.parameter_types[:count]
    if mine == theirs or len(mine) != len(theirs):
        return False
    narrower = all(_accepts_type(t, m) for m, t in zip(mine, theirs))
    wider = all(_accepts_type(m, t) for m, t in zip(mine, theirs))
    return narrower and not wider


def _most_specific(overloads: list[MethodInfo], count: int) -> list[MethodInfo]:
    # Like singledispatch: an overload loses to any overload with narrower parameters.
    return [
        info for info in overloads
        if not any(_more_specific(other, info, count) for other in overloads)
    ]


def get_method_info(
    obj: Any, name: str, types: Sequence[Any] = ()
) -> MethodInfo | None:
    """
    Find the overload of ``name`` whose parameter types match ``types``.

    An exact match wins; otherwise the narrowest overload whose parameters
    accept the given types (subclasses, ``Any``, unions) is used. ``types=()`` selects the
    zero-argument overload. Returns None when nothing matches or the name is
    not public.

    Raises:
        AmbiguousMatchError: If several equally narrow overloads accept
            ``types`` and none matches exactly.
    """
    if name.startswith("_"):
        return None
    types = tuple(types)
    candidates = [
        info for info in list_methods(obj, name)
        if len(info.parameter_types) == len(types)
    ]
    for info in candidates:
        if info.parameter_types == types:
            return info

    compatible = [
        info for info in candidates
        if all(_accepts_type(d, g) for d, g in zip(info.parameter_types, types))
    ]
    compatible = _most_specific(compatible, len(types))
    if len(compatible) > 1:
        raise AmbiguousMatchError(
            f"Several overloads of {type(obj).__name__}.{name} accept {types!r}"
        )
    return compatible[0] if compatible else None


def invoke_method_with_types(
    obj: Any, name: str, types: Sequence[Any], args: Sequence[Any] = ()
) -> Any:
    """
    Invoke the overload of ``name`` selected by explicit parameter ``types``.

    Raises:
        MemberAccessError: If ``name`` is not public.
        MemberNotFoundError: If no overload matches ``types``.
        AmbiguousMatchError: If the match is ambiguous.
        InvocationError: If the method raises; the cause is chained.
    """
    _check_public(obj, name)
    info = get_method_info(obj, name, types)
    if info is None:
        raise MemberNotFoundError(
            f"{type(obj).__name__} has no method {name!r} taking {tuple(types)!r}"
        )
    return info.invoke(*args)


def invoke_method(obj: Any, name: str) -> Any:
    """Invoke the zero-argument overload of ``name``."""
    return invoke_method_with_types(obj, name, ())


def invoke_method_with_args(obj: Any, name: str, args: Sequence[Any]) -> Any:
    """
    Invoke ``name`` choosing the overload from the runtime ``args``.

    Among the overloads accepting ``args`` the narrowest one wins, so a
    ``singledispatchmethod`` registration beats the ``object`` default.

    Raises:
        MemberAccessError: If ``name`` is not public.
        MemberNotFoundError: If there is no method or no overload accepts ``args``.
        AmbiguousMatchError: If several equally narrow overloads accept ``args``.
        InvocationError: If the method raises; the cause is chained.
    """
    _check_public(obj, name)
    overloads = list_methods(obj, name)
    if not overloads:
        raise MemberNotFoundError(f"{type(obj).__name__} has no method {name!r}")

    matching = _most_specific(
        [info for info in overloads if info.accepts(args)], len(args)
    )
    if not matching:
        raise MemberNotFoundError(
            f"No overload of {type(obj).__name__}.{name} accepts "
            f"({', '.join(type(a).__name__ for a in args)})"
        )
    if len(matching) > 1:
        raise AmbiguousMatchError(
            f"{len(matching)} overloads of {type(obj).__name__}.{name} accept "
            f"({', '.join(type(a).__name__ for a in args)})"
        )
    return matching[0].invoke(*args)
