"""
Shared fixtures for storage tests.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from dbcreds.storage.filesystem import FilesystemStore


@pytest_asyncio.fixture
async def fs_store() -> AsyncGenerator[FilesystemStore]:
    """Create a FilesystemStore with a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FilesystemStore(root_dir=tmpdir)
        yield store
        await store.close()


@pytest.fixture
def redis_test_url() -> str:
    """Redis URL for integration tests, or "" when none is configured."""
    return os.environ.get("DBCREDS_TEST_REDIS_URL", "")
