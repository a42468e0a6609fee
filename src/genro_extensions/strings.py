# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""String helpers: title-casing, splitting, filtering and hashing."""

from __future__ import annotations

import hashlib
import locale
import re
import string

from .config import get_settings
from .errors import DigestEncodingError

__all__ = [
    "capitalize",
    "join_chars",
    "remove_special_characters",
    "split",
    "to_md5",
]

_WORD_RE = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")
_ALPHANUMERIC = frozenset(string.ascii_letters + string.digits)

# Languages where i/I pair with dotted İ and dotless ı.
_DOTTED_I_LANGUAGES = frozenset({"tr", "az"})


def _title_language() -> str:
    name = get_settings().title_locale
    if name is None:
        try:
            name = locale.getlocale(locale.LC_CTYPE)[0]
        except ValueError:
            name = None
    return (name or "").replace("-", "_").split("_")[0].lower()


def _upper(text: str, language: str) -> str:
    if language in _DOTTED_I_LANGUAGES:
        text = text.replace("i", "İ")
    return text.upper()


def _lower(text: str, language: str) -> str:
    if language in _DOTTED_I_LANGUAGES:
        text = text.replace("I", "ı").replace("İ", "i")
    return text.lower()


def capitalize(text: str | None) -> str:
    """
    Title-case every word of ``text``.

    Words written entirely in upper case are treated as acronyms and kept.
    Other words get an upper-case first letter and a lower-case rest.
    Apostrophes do not start a new word. Letter casing follows the
    ``title_locale`` setting, or the process ``LC_CTYPE`` locale.

    Examples:
        >>> capitalize("hello world")
        'Hello World'
        >>> capitalize("the NASA rover's wHEELS")
        "The NASA Rover's Wheels"
        >>> capitalize(None)
        ''
    """
    if not text:
        return ""
    language = _title_language()

    def title_word(match: re.Match[str]) -> str:
        word = match.group(0)
        if word.isupper():
            return word
        return _upper(word[0], language) + _lower(word[1:], language)

    return _WORD_RE.sub(title_word, text)


def split(text: str | None, separator: str) -> list[str]:
    """
    Split on a literal ``separator``, dropping empty segments.

    Examples:
        >>> split("a,,b,", ",")
        ['a', 'b']
        >>> split("a--b", "--")
        ['a', 'b']
        >>> split("", ",")
        []
    """
    if not text:
        return []
    if not separator:
        return [text]
    return [segment for segment in text.split(separator) if segment]


def remove_special_characters(text: str | None) -> str:
    """Keep only ASCII letters and digits, in their original order."""
    if not text:
        return ""
    return "".join(c for c in text if c in _ALPHANUMERIC)


def to_md5(text: str) -> str:
    """
    Return the MD5 digest of the ASCII bytes of ``text`` as upper-case hex.

    Raises:
        DigestEncodingError: If ``text`` contains non-ASCII characters.

    Examples:
        >>> to_md5("hello")
        '5D41402ABC4B2A76B9719D911017C592'
    """
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError as exc:
        raise DigestEncodingError(
            f"Cannot compute digest: non-ASCII character at position {exc.start}"
        ) from exc
    return hashlib.md5(data, usedforsecurity=False).hexdigest().upper()


def join_chars(text: str | None, separator: str) -> str:
    """
    Join the characters of ``text`` with ``separator``.

    Examples:
        >>> join_chars("abc", "-")
        'a-b-c'
    """
    if text is None:
        return ""
    return separator.join(text)
