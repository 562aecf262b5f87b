"""Runtime-configurable connection to the target database.

The connection written through the API is persisted under
``config/connection`` and takes precedence over the configured
``database.url`` setting, across restarts.
"""

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from dbcreds.db.session import ensure_async_driver, reset_db, verify_connection
from dbcreds.logging_config import get_logger
from dbcreds.storage.keys import CONNECTION_CONFIG_KEY
from dbcreds.storage.protocol import KeyValueStore, ObjectNotFoundError, StorageError

logger = get_logger(__name__)


class ConnectionConfigDecodeError(StorageError):
    """The stored connection configuration could not be decoded."""


class ConnectionConfig(BaseModel):
    """Connection settings for the target database."""

    connection_url: str = Field(min_length=1, description="PostgreSQL connection URL")

    @field_validator("connection_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return parse_connection_url(value)

    def driver_url(self) -> str:
        return ensure_async_driver(self.connection_url)


def parse_connection_url(url: str) -> str:
    """Validate that ``url`` is a PostgreSQL URL and return it unchanged.

    Raises:
        ValueError: If the URL is malformed or names another database.
    """
    try:
        parsed = make_url(ensure_async_driver(url))
    except ArgumentError as e:
        raise ValueError(f"Invalid connection URL: {e}") from None
    if parsed.get_backend_name() != "postgresql":
        raise ValueError(f"Unsupported database: {parsed.get_backend_name()}")
    return url


def redact_url(url: str) -> str:
    """Return ``url`` with any password masked."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid>"


async def read_connection_config(storage: KeyValueStore) -> ConnectionConfig | None:
    try:
        raw = await storage.get(CONNECTION_CONFIG_KEY)
    except ObjectNotFoundError:
        return None

    try:
        return ConnectionConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConnectionConfigDecodeError(f"Corrupt connection configuration: {e}") from e


async def write_connection_config(storage: KeyValueStore, config: ConnectionConfig) -> None:
    """Verify, persist and activate a new target database connection.

    Nothing is stored if the database cannot be reached.

    Raises:
        DatabaseUnavailableError: If the connection check fails.
        StorageError: If the configuration cannot be stored.
    """
    await verify_connection(config.driver_url())
    await storage.put(CONNECTION_CONFIG_KEY, config.model_dump_json().encode())
    await reset_db(config.driver_url())
    logger.info("Target database configured", url=redact_url(config.driver_url()))


async def resolve_connection_url(storage: KeyValueStore) -> str | None:
    """URL from stored configuration, or None to fall back to settings."""
    config = await read_connection_config(storage)
    return config.driver_url() if config is not None else None
