"""Shared pytest fixtures for Briefmark tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

from briefmark.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

load_dotenv()


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop the cached Settings so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
