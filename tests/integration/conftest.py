"""Integration test configuration.

Database tests run against ``DEV__TEST_DATABASE_URL``; each test gets a
fresh engine bound to its own event loop and a schema created on demand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest_asyncio

from briefmark.config import get_settings
from briefmark.db.engine import close_db, create_schema, init_db

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest_asyncio.fixture
async def test_db() -> AsyncIterator[None]:
    """Point the engine at the test database for one test."""
    url = get_settings().dev.test_database_url
    assert url is not None  # guarded by the module-level skipif
    await init_db(url)
    await create_schema()
    try:
        yield
    finally:
        await close_db()
