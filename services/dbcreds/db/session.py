"""
Target database management for dbcreds.

Provides the async SQLAlchemy engine for the database that role definitions
are validated against, and a StatementPreparer backed by it. Preparation uses
the raw asyncpg connection so the server parses the statement (protocol-level
Parse) without ever executing it.
"""

import secrets

import asyncpg
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from dbcreds.config import settings
from dbcreds.db.protocol import DatabaseUnavailableError, StatementPrepareError
from dbcreds.logging_config import get_logger

logger = get_logger(__name__)

# Errors that mean "could not talk to the database" rather than "bad SQL"
_TRANSPORT_ERRORS = (
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.OperatorInterventionError,
    asyncpg.InterfaceError,
    SQLAlchemyError,
    OSError,
    TimeoutError,
)

_STATEMENT_NAME_PREFIX = "dbcreds_validate_"

# Created in init_db(), swapped by reset_db()
_engine: AsyncEngine | None = None
_preparer: "AsyncpgPreparer | None" = None


def ensure_async_driver(url: str) -> str:
    """Rewrite a plain postgresql:// URL to use the asyncpg driver."""
    for plain in ("postgresql://", "postgres://"):
        if url.startswith(plain):
            return "postgresql+asyncpg://" + url[len(plain) :]
    return url


def create_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        ensure_async_driver(url),
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


class AsyncpgPreparedStatement:
    """A named server-side prepared statement held on a pooled connection."""

    def __init__(self, conn: AsyncConnection, driver_conn: asyncpg.Connection, name: str) -> None:
        self._conn = conn
        self._driver_conn = driver_conn
        self.name = name

    async def close(self) -> None:
        try:
            await self._driver_conn.execute(f'DEALLOCATE "{self.name}"')
        except (asyncpg.PostgresError, *_TRANSPORT_ERRORS) as e:
            # Dropping the connection frees its prepared statements server-side
            logger.warning("Failed to deallocate prepared statement", error=str(e))
            await self._conn.invalidate()
        finally:
            await self._conn.close()


class AsyncpgPreparer:
    """StatementPreparer for PostgreSQL via SQLAlchemy + asyncpg."""

    def __init__(self, engine: AsyncEngine, timeout: float | None = None) -> None:
        self._engine = engine
        self._timeout = timeout

    async def prepare(self, sql: str) -> AsyncpgPreparedStatement:
        try:
            conn = await self._engine.connect()
        except _TRANSPORT_ERRORS as e:
            raise DatabaseUnavailableError(f"Could not connect to database: {e}") from e

        name = _STATEMENT_NAME_PREFIX + secrets.token_hex(8)
        try:
            raw = await conn.get_raw_connection()
            driver_conn = raw.driver_connection
            await driver_conn.prepare(sql, name=name, timeout=self._timeout)
        except _TRANSPORT_ERRORS as e:
            await conn.invalidate()
            await conn.close()
            raise DatabaseUnavailableError(f"Database error while preparing statement: {e}") from e
        except asyncpg.PostgresError as e:
            await conn.close()
            raise StatementPrepareError(str(e)) from e
        except BaseException:
            await conn.close()
            raise

        return AsyncpgPreparedStatement(conn, driver_conn, name)


async def init_db(url: str | None = None) -> None:
    """Create the target database engine.

    Connections are opened lazily, so an unreachable database does not
    block startup; it shows up in readiness and in validation errors.
    """
    global _engine, _preparer  # noqa: PLW0603
    target = url or str(settings.database.url)
    logger.info("Initializing target database engine")

    _engine = create_engine(target)
    _preparer = AsyncpgPreparer(_engine, timeout=settings.database.prepare_timeout_seconds)


async def close_db() -> None:
    """Dispose of the target database engine."""
    global _engine, _preparer  # noqa: PLW0603
    if _engine is not None:
        logger.info("Closing target database connection pool")
        await _engine.dispose()
        _engine = None
        _preparer = None


async def reset_db(url: str) -> None:
    """Point the service at a different target database."""
    await close_db()
    await init_db(url)
    logger.info("Target database connection replaced")


def get_preparer() -> AsyncpgPreparer:
    """FastAPI dependency that returns the statement preparer.

    Raises RuntimeError if the engine has not been initialized.
    """
    if _preparer is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    return _preparer


async def verify_connection(url: str) -> None:
    """Open a throwaway connection to ``url`` and run SELECT 1.

    Raises:
        DatabaseUnavailableError: If the database cannot be reached.
    """
    engine = create_engine(url)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (asyncpg.PostgresError, *_TRANSPORT_ERRORS) as e:
        raise DatabaseUnavailableError(f"Could not connect to database: {e}") from e
    finally:
        await engine.dispose()


async def get_db_health() -> bool:
    """Check database health for readiness probe."""
    try:
        if _engine is None:
            return False
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False
