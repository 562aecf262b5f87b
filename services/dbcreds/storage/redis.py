"""
Redis storage backend for dbcreds.

Every key is stored as a plain Redis string under a configurable prefix.
SET replaces a value in a single command, which gives atomic puts.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from dbcreds.logging_config import get_logger
from dbcreds.storage.protocol import ObjectNotFoundError, StorageError

logger = get_logger(__name__)


class RedisStore:
    """Key-value store backed by Redis."""

    def __init__(self, client: aioredis.Redis, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> RedisStore:
        """Create a store with its own connection pool."""
        client = aioredis.from_url(url, decode_responses=False)
        logger.info("Redis store initialized", prefix=prefix)
        return cls(client, prefix=prefix)

    def _full_key(self, key: str) -> str:
        return self._prefix + key

    async def put(self, key: str, data: bytes) -> None:
        try:
            await self._client.set(self._full_key(key), data)
        except RedisError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def get(self, key: str) -> bytes:
        try:
            value = await self._client.get(self._full_key(key))
        except RedisError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        if value is None:
            raise ObjectNotFoundError(key)
        return value

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._full_key(key))
        except RedisError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(self._full_key(key)))
        except RedisError as e:
            raise StorageError(f"Failed to check {key}: {e}") from e

    async def list_prefix(self, prefix: str) -> list[str]:
        pattern = _escape_glob(self._full_key(prefix)) + "*"
        keys: list[str] = []
        try:
            async for raw in self._client.scan_iter(match=pattern):
                full_key = raw.decode() if isinstance(raw, bytes) else raw
                keys.append(full_key[len(self._prefix) :])
        except RedisError as e:
            raise StorageError(f"Failed to list {prefix}: {e}") from e
        return sorted(keys)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error("Redis health check failed", error=str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()


def _escape_glob(value: str) -> str:
    """Escape Redis MATCH glob metacharacters."""
    for ch in ("\\", "*", "?", "[", "]"):
        value = value.replace(ch, "\\" + ch)
    return value
