# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for typeutils module."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from genro_extensions.typeutils import is_nullable, safe_is_instance, unwrap_optional


class TestUnwrapOptional:
    """Tests for unwrap_optional and is_nullable."""

    def test_optional_forms(self) -> None:
        """Optional, Union with None and X | None are recognised."""
        assert unwrap_optional(Optional[int]) == (True, int)
        assert unwrap_optional(Union[str, None]) == (True, str)
        assert unwrap_optional(float | None) == (True, float)

    def test_not_optional(self) -> None:
        """Plain types and wider unions are returned unchanged."""
        assert unwrap_optional(int) == (False, int)
        hint = Union[int, str, None]
        assert unwrap_optional(hint) == (False, hint)
        assert unwrap_optional("int32") == (False, "int32")

    def test_is_nullable(self) -> None:
        """Only Optional of a single type is nullable."""
        assert is_nullable(Optional[int]) is True
        assert is_nullable(str | None) is True
        assert is_nullable(int) is False
        assert is_nullable(str) is False
        assert is_nullable(Union[int, str]) is False


class TestSafeIsInstance:
    """Tests for safe_is_instance."""

    def test_plain_classes(self) -> None:
        """Plain classes behave like isinstance."""
        assert safe_is_instance("a", str)
        assert not safe_is_instance(1, str)

    def test_bool_is_not_int(self) -> None:
        """A bool does not satisfy an int annotation."""
        assert not safe_is_instance(True, int)
        assert safe_is_instance(True, bool)

    def test_int_is_float(self) -> None:
        """An int satisfies a float annotation."""
        assert safe_is_instance(3, float)
        assert not safe_is_instance(True, float)

    def test_any_and_none(self) -> None:
        """Any takes everything, None only takes None."""
        assert safe_is_instance(object(), Any)
        assert safe_is_instance(None, None)
        assert not safe_is_instance(0, None)

    def test_unions(self) -> None:
        """Union members are tried in turn."""
        assert safe_is_instance(None, Optional[int])
        assert safe_is_instance("x", int | str)
        assert not safe_is_instance(1.5, int | str)

    def test_literal(self) -> None:
        """Literal checks membership."""
        assert safe_is_instance("a", Literal["a", "b"])
        assert not safe_is_instance("c", Literal["a", "b"])

    def test_generics(self) -> None:
        """Generics are checked on their origin only."""
        assert safe_is_instance([1, 2], list[int])
        assert safe_is_instance(["x"], list[int])
        assert not safe_is_instance((1,), list[int])
        assert safe_is_instance({"a": 1}, dict[str, int])
