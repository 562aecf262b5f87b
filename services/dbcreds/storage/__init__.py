"""
Durable storage abstraction layer for dbcreds.

Provides init_storage() / close_storage() for app lifespan and
get_storage() as a FastAPI dependency.
"""

from __future__ import annotations

from dbcreds.config import StorageBackend, settings
from dbcreds.logging_config import get_logger
from dbcreds.storage.protocol import KeyValueStore

logger = get_logger(__name__)

# Module-level storage instance
_store: KeyValueStore | None = None


async def init_storage() -> None:
    """Initialize the storage backend based on configuration.

    Called during app startup (lifespan).
    """
    global _store  # noqa: PLW0603
    cfg = settings.storage

    match cfg.backend:
        case StorageBackend.FILESYSTEM:
            from dbcreds.storage.filesystem import FilesystemStore

            _store = FilesystemStore(root_dir=cfg.filesystem.root_dir)
            logger.info(
                "Storage initialized", backend="filesystem", root_dir=cfg.filesystem.root_dir
            )

        case StorageBackend.REDIS:
            from dbcreds.storage.redis import RedisStore

            _store = RedisStore.from_url(str(cfg.redis.url), prefix=cfg.redis.prefix)
            logger.info("Storage initialized", backend="redis")

        case StorageBackend.MEMORY:
            from dbcreds.storage.memory import MemoryStore

            _store = MemoryStore()
            logger.warning("Storage initialized with non-durable backend", backend="memory")


async def close_storage() -> None:
    """Close the storage backend and release resources.

    Called during app shutdown (lifespan).
    """
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.close()
        _store = None
        logger.info("Storage closed")


def set_storage(store: KeyValueStore | None) -> None:
    """Install a storage backend directly, bypassing configuration."""
    global _store  # noqa: PLW0603
    _store = store


def get_storage() -> KeyValueStore:
    """FastAPI dependency that returns the storage backend.

    Raises RuntimeError if storage has not been initialized.
    """
    if _store is None:
        raise RuntimeError("Storage not initialized; call init_storage() first")
    return _store


def get_storage_or_none() -> KeyValueStore | None:
    """Return the storage backend if initialized, otherwise None."""
    return _store


async def get_storage_health() -> bool:
    """Check storage health for readiness probe."""
    if _store is None:
        return False
    return await _store.ping()
