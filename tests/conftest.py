# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures."""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from genro_extensions.config import ENV_PREFIX, reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test with default settings and no package env vars."""
    for key in list(os.environ):
        if key.startswith(f"{ENV_PREFIX}_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()
