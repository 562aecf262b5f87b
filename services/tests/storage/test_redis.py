"""Tests for the Redis storage backend against a mocked client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from dbcreds.storage.protocol import ObjectNotFoundError, StorageError
from dbcreds.storage.redis import RedisStore


def _async_iter(items):
    async def gen(*args, **kwargs):
        for item in items:
            yield item

    return gen


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock()
    mock.set = AsyncMock()
    mock.get = AsyncMock()
    mock.delete = AsyncMock()
    mock.exists = AsyncMock()
    mock.ping = AsyncMock(return_value=True)
    mock.aclose = AsyncMock()
    return mock


class TestRedisStore:
    async def test_put_uses_prefix(self, client: MagicMock) -> None:
        store = RedisStore(client, prefix="dbcreds:")
        await store.put("role/readonly", b"data")
        client.set.assert_awaited_once_with("dbcreds:role/readonly", b"data")

    async def test_get_returns_bytes(self, client: MagicMock) -> None:
        client.get.return_value = b"data"
        store = RedisStore(client, prefix="dbcreds:")
        assert await store.get("role/readonly") == b"data"
        client.get.assert_awaited_once_with("dbcreds:role/readonly")

    async def test_get_missing_raises_not_found(self, client: MagicMock) -> None:
        client.get.return_value = None
        with pytest.raises(ObjectNotFoundError):
            await RedisStore(client).get("role/nope")

    async def test_driver_errors_become_storage_errors(self, client: MagicMock) -> None:
        client.get.side_effect = RedisConnectionError("connection refused")
        client.set.side_effect = RedisConnectionError("connection refused")
        client.delete.side_effect = RedisConnectionError("connection refused")
        store = RedisStore(client)

        with pytest.raises(StorageError):
            await store.get("role/a")
        with pytest.raises(StorageError):
            await store.put("role/a", b"x")
        with pytest.raises(StorageError):
            await store.delete("role/a")

    async def test_not_found_is_not_a_driver_error(self, client: MagicMock) -> None:
        client.get.return_value = None
        with pytest.raises(ObjectNotFoundError) as exc_info:
            await RedisStore(client).get("role/a")
        assert exc_info.value.key == "role/a"

    async def test_list_prefix_strips_store_prefix(self, client: MagicMock) -> None:
        client.scan_iter = MagicMock(
            side_effect=_async_iter([b"dbcreds:role/b", b"dbcreds:role/a"])
        )
        store = RedisStore(client, prefix="dbcreds:")

        assert await store.list_prefix("role/") == ["role/a", "role/b"]
        client.scan_iter.assert_called_once_with(match="dbcreds:role/*")

    async def test_list_prefix_escapes_glob_characters(self, client: MagicMock) -> None:
        client.scan_iter = MagicMock(side_effect=_async_iter([]))
        store = RedisStore(client, prefix="app[1]:")

        await store.list_prefix("role/")
        client.scan_iter.assert_called_once_with(match="app\\[1\\]:role/*")

    async def test_ping_failure_reports_unhealthy(self, client: MagicMock) -> None:
        client.ping.side_effect = RedisConnectionError("down")
        assert await RedisStore(client).ping() is False

    async def test_close(self, client: MagicMock) -> None:
        await RedisStore(client).close()
        client.aclose.assert_awaited_once()
