"""
Statement preparation protocol for dbcreds.

The only thing role validation needs from a database is the ability to
parse a statement without running it. This module defines that interface
and the exceptions shared by its implementations.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol, runtime_checkable

# --- Exceptions ---


class StatementPrepareError(Exception):
    """The database rejected a statement while preparing it.

    ``diagnostic`` carries the database's own message unchanged.
    """

    def __init__(self, diagnostic: str) -> None:
        self.diagnostic = diagnostic
        super().__init__(diagnostic)


class DatabaseUnavailableError(Exception):
    """The database could not be reached, or the call timed out."""


# --- Protocol ---


@runtime_checkable
class PreparedStatementHandle(Protocol):
    """A server-side prepared statement that has not been executed."""

    async def close(self) -> None:
        """Release the prepared statement and its connection."""
        ...


@runtime_checkable
class StatementPreparer(Protocol):
    """Anything that can ask a database to parse SQL without executing it."""

    async def prepare(self, sql: str) -> PreparedStatementHandle:
        """Prepare a statement.

        Raises:
            StatementPrepareError: The database reported an error for ``sql``.
            DatabaseUnavailableError: The database could not be reached.
        """
        ...


@asynccontextmanager
async def prepared(preparer: StatementPreparer, sql: str) -> AsyncIterator[PreparedStatementHandle]:
    """Prepare ``sql`` and release the handle on every exit path."""
    handle = await preparer.prepare(sql)
    try:
        yield handle
    finally:
        await handle.close()
