# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""
Package settings with layered sources.

Settings are resolved from three sources, later ones overriding earlier ones::

    built-in defaults  <  GENRO_EXTENSIONS_* env vars  <  configure(**overrides)

Environment values are strings and are converted using the field types of
``Settings``. Example::

    GENRO_EXTENSIONS_NUMBER_FORMAT=current
    GENRO_EXTENSIONS_TITLE_LOCALE=tr_TR

    >>> get_settings().number_format
    'current'

Settings are read at call time by the conversion, string and XML helpers.
``configure()`` replaces the active settings in a single assignment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "configure",
    "get_settings",
    "load_env",
    "reset_settings",
]

logger = logging.getLogger(__name__)

ENV_PREFIX = "GENRO_EXTENSIONS"

_NUMBER_FORMATS = frozenset({"invariant", "current"})


@dataclass(frozen=True)
class Settings:
    """
    Active package settings.

    Attributes:
        number_format: ``"invariant"`` parses numbers with ``.`` as decimal
            separator and ``,`` as group separator. ``"current"`` reads the
            separators from the process locale.
        title_locale: Locale name used by ``capitalize``. None means the
            process ``LC_CTYPE`` locale.
        xml_attribute_prefix: Key prefix marking XML attributes in mappings.
        xml_text_key: Key holding element text in mappings.
    """

    number_format: str = "invariant"
    title_locale: str | None = None
    xml_attribute_prefix: str = "@"
    xml_text_key: str = "#text"

    def __post_init__(self) -> None:
        if self.number_format not in _NUMBER_FORMATS:
            raise ValueError(
                f"Invalid number_format: {self.number_format!r}. "
                f"Expected one of: {', '.join(sorted(_NUMBER_FORMATS))}"
            )
        if not self.xml_attribute_prefix:
            raise ValueError("xml_attribute_prefix cannot be empty")
        if not self.xml_text_key:
            raise ValueError("xml_text_key cannot be empty")


_FIELD_NAMES = frozenset(f.name for f in fields(Settings))

_active: Settings | None = None


def load_env(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """
    Load settings from environment variables with the given prefix.

    The prefix is stripped and the remaining key is lowercased. Variables that
    do not name a ``Settings`` field are ignored. An empty ``TITLE_LOCALE``
    means "use the process locale".

    Examples:
        Given environment::

            GENRO_EXTENSIONS_NUMBER_FORMAT=current
            GENRO_EXTENSIONS_UNRELATED=x

        >>> load_env()
        {'number_format': 'current'}
    """
    prefix_with_underscore = f"{prefix}_"
    prefix_len = len(prefix_with_underscore)

    result: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix_with_underscore):
            continue
        clean_key = key[prefix_len:].lower()
        if clean_key not in _FIELD_NAMES:
            continue
        if clean_key == "title_locale" and not value.strip():
            result[clean_key] = None
        else:
            result[clean_key] = value.strip()
    return result


def _check_keys(overrides: dict[str, Any]) -> None:
    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ValueError(
            f"Unknown setting(s): {', '.join(sorted(unknown))}. "
            f"Supported: {', '.join(sorted(_FIELD_NAMES))}"
        )


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment if needed."""
    global _active
    if _active is None:
        _active = Settings(**load_env())
    return _active


def configure(**overrides: Any) -> Settings:
    """
    Override settings on top of the currently active ones.

    Args:
        **overrides: ``Settings`` field values.

    Returns:
        The new active settings.

    Raises:
        ValueError: If a key is unknown or a value is invalid.
    """
    global _active
    _check_keys(overrides)
    settings = replace(get_settings(), **overrides)
    _active = settings
    logger.debug("genro_extensions settings: %s", settings)
    return settings


def reset_settings() -> None:
    """Drop the active settings; the next ``get_settings()`` reloads them."""
    global _active
    _active = None
