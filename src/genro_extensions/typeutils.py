# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Helpers for working with type hints at runtime."""

from __future__ import annotations

import types
from typing import Any, Literal, Union, get_args, get_origin

__all__ = ["is_nullable", "safe_is_instance", "unwrap_optional"]


def unwrap_optional(type_hint: Any) -> tuple[bool, Any]:
    """
    Check if a type hint is Optional (Union with None).

    Args:
        type_hint: Type annotation to check.

    Returns:
        Tuple of (is_optional, inner_type).

    Examples:
        >>> unwrap_optional(Union[int, None])
        (True, <class 'int'>)
        >>> unwrap_optional(int | None)
        (True, <class 'int'>)
        >>> unwrap_optional(int)
        (False, <class 'int'>)
    """
    origin = get_origin(type_hint)
    # Handle both typing.Union and types.UnionType (Python 3.10+ `X | Y` syntax)
    if origin is Union or isinstance(type_hint, types.UnionType):
        args = get_args(type_hint)
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1 and type(None) in args:
            return True, non_none[0]
    return False, type_hint


def is_nullable(type_hint: Any) -> bool:
    """Return True if ``type_hint`` is ``Optional[X]`` for a single type X."""
    return unwrap_optional(type_hint)[0]


def safe_is_instance(value: Any, type_hint: Any) -> bool:
    """
    ``isinstance`` that understands common typing constructs.

    Supports plain classes, ``Any``, ``None``, ``Optional``/``Union``,
    ``Literal`` and parametrized generics (only the origin is checked, so
    ``list[int]`` accepts any list). Anything else is accepted.
    """
    if type_hint is Any or type_hint is object:
        return True
    if type_hint is None or type_hint is type(None):
        return value is None

    origin = get_origin(type_hint)
    if origin is Union or isinstance(type_hint, types.UnionType):
        return any(safe_is_instance(value, arg) for arg in get_args(type_hint))
    if origin is Literal:
        return value in get_args(type_hint)
    if origin is not None:
        type_hint = origin

    if isinstance(type_hint, type):
        # bool is an int subclass, but an int annotation should not take a bool
        if type_hint is int and isinstance(value, bool):
            return False
        if type_hint is float and isinstance(value, int) and not isinstance(value, bool):
            return True
        return isinstance(value, type_hint)
    return True
