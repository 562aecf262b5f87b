"""
Shared fixtures for API tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
import pytest_asyncio
from fastapi import FastAPI

from dbcreds.api.app import create_application
from dbcreds.db.session import get_preparer
from dbcreds.storage import set_storage
from dbcreds.storage.memory import MemoryStore


@pytest_asyncio.fixture
async def app(memory_storage: MemoryStore, fake_db) -> AsyncGenerator[FastAPI]:
    """Application wired to in-memory storage and the fake database."""
    test_app = create_application()
    set_storage(memory_storage)
    test_app.dependency_overrides[get_preparer] = lambda: fake_db
    yield test_app
    set_storage(None)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
