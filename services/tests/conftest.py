"""
Top-level test configuration for dbcreds.
"""

import os

# Ensure test-friendly defaults
os.environ.setdefault("DBCREDS_STORAGE__BACKEND", "memory")
os.environ.setdefault("DBCREDS_JSON_LOGS", "false")
os.environ.setdefault("DBCREDS_LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402

from dbcreds.db.protocol import DatabaseUnavailableError, StatementPrepareError  # noqa: E402
from dbcreds.roles.store import RoleStore  # noqa: E402
from dbcreds.storage.memory import MemoryStore  # noqa: E402


class FakePreparedStatement:
    def __init__(self, preparer: "FakePreparer", sql: str) -> None:
        self._preparer = preparer
        self.sql = sql

    async def close(self) -> None:
        self._preparer.closed.append(self.sql)


class FakePreparer:
    """Stands in for a database: accepts statements that start with a known
    command and reports a PostgreSQL-style syntax error for anything else.

    Nothing is ever executed; ``prepared`` and ``closed`` record the calls.
    """

    COMMANDS = ("CREATE ROLE", "CREATE USER", "ALTER ROLE", "GRANT", "SELECT")

    def __init__(self) -> None:
        self.prepared: list[str] = []
        self.closed: list[str] = []
        self.unavailable = False

    async def prepare(self, sql: str) -> FakePreparedStatement:
        if self.unavailable:
            raise DatabaseUnavailableError("connection refused")

        self.prepared.append(sql)
        words = sql.split()
        if not words:
            raise StatementPrepareError("syntax error at end of input")
        if not " ".join(words).upper().startswith(self.COMMANDS):
            near = words[1] if len(words) > 1 else words[0]
            raise StatementPrepareError(f'syntax error at or near "{near}"')
        return FakePreparedStatement(self, sql)


@pytest.fixture
def fake_db() -> FakePreparer:
    return FakePreparer()


@pytest.fixture
def memory_storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def role_store(memory_storage: MemoryStore) -> RoleStore:
    return RoleStore(memory_storage)
