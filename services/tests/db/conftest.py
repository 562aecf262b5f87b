"""
Shared fixtures for target database tests.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from dbcreds.db.session import ensure_async_driver


@pytest.fixture
def postgres_url() -> str:
    """PostgreSQL URL for integration tests, or "" when none is configured."""
    return os.environ.get("DBCREDS_TEST_DATABASE_URL", "")


@pytest_asyncio.fixture
async def pg_engine(postgres_url: str) -> AsyncGenerator[AsyncEngine]:
    """Single-connection engine against a live PostgreSQL server.

    Skips unless DBCREDS_TEST_DATABASE_URL is set AND the server answers.
    """
    if not postgres_url:
        pytest.skip("DBCREDS_TEST_DATABASE_URL not set")

    engine = create_async_engine(ensure_async_driver(postgres_url), pool_size=1, max_overflow=0)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    yield engine
    await engine.dispose()
