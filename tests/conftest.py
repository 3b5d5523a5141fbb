"""
Pytest configuration for sqlite3po.

Provides fixtures for:
- Settings override for tests
- An in-memory database per test function
- A ``Dummy`` entity bound to the ``dummy`` table
"""

from __future__ import annotations

from typing import AsyncIterator

import pytest
import pytest_asyncio

from sqlite3po.config import Settings
from sqlite3po.database import Database
from sqlite3po.orm.repository import Repository
from sample_entities import Dummy


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        database_path=":memory:",
        connect_attempts=1,
        connect_timeout=1.0,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def db(test_settings: Settings) -> AsyncIterator[Database]:
    """
    Provide a fresh in-memory database, closed after the test.
    """
    database = await Database.open(settings=test_settings)
    try:
        yield database
    finally:
        await database.close()


@pytest_asyncio.fixture
async def dummies(db: Database) -> Repository[Dummy]:
    """
    Bind ``Dummy`` to the ``dummy`` table.
    """
    return await db.bind_schema(Dummy, "dummy", {"text": "varchar(255)"})

