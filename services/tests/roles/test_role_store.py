"""Tests for the role store."""

from unittest.mock import AsyncMock

import pytest

from dbcreds.roles.store import RoleDecodeError, RoleStore
from dbcreds.storage.memory import MemoryStore
from dbcreds.storage.protocol import StorageError

READONLY_SQL = (
    "CREATE ROLE \"{{name}}\" WITH LOGIN PASSWORD '{{password}}' VALID UNTIL '{{expiration}}';"
)


class TestRoleStore:
    async def test_get_missing_returns_none(self, role_store: RoleStore):
        assert await role_store.get("nope") is None

    async def test_put_then_get_returns_template_verbatim(self, role_store: RoleStore):
        await role_store.put("readonly", READONLY_SQL)
        role = await role_store.get("readonly")
        assert role is not None
        assert role.sql == READONLY_SQL

    async def test_record_format(self, role_store: RoleStore, memory_storage: MemoryStore):
        await role_store.put("readonly", "SELECT 1")
        assert await memory_storage.get("role/readonly") == b'{"sql":"SELECT 1"}'

    async def test_reads_records_with_extra_fields(
        self, role_store: RoleStore, memory_storage: MemoryStore
    ):
        await memory_storage.put("role/legacy", b'{"sql": "SELECT 1", "other": true}')
        role = await role_store.get("legacy")
        assert role is not None
        assert role.sql == "SELECT 1"

    async def test_put_overwrites(self, role_store: RoleStore):
        await role_store.put("r", "SELECT 1")
        await role_store.put("r", "SELECT 2")
        role = await role_store.get("r")
        assert role is not None
        assert role.sql == "SELECT 2"

    async def test_delete_then_get_is_none(self, role_store: RoleStore):
        await role_store.put("r", "SELECT 1")
        await role_store.delete("r")
        assert await role_store.get("r") is None

    async def test_delete_missing_is_not_an_error(self, role_store: RoleStore):
        await role_store.delete("never-existed")
        assert await role_store.get("never-existed") is None

    async def test_list_names(self, role_store: RoleStore, memory_storage: MemoryStore):
        await role_store.put("writer", "SELECT 1")
        await role_store.put("reader", "SELECT 1")
        await memory_storage.put("config/connection", b"{}")

        assert await role_store.list_names() == ["reader", "writer"]

    @pytest.mark.parametrize(
        "payload",
        [b"not json", b"[]", b'{"query": "SELECT 1"}', b'{"sql": 42}', b""],
    )
    async def test_malformed_record_is_an_error_not_absent(
        self, role_store: RoleStore, memory_storage: MemoryStore, payload: bytes
    ):
        await memory_storage.put("role/broken", payload)
        with pytest.raises(RoleDecodeError):
            await role_store.get("broken")

    async def test_decode_error_is_a_storage_error(self):
        assert issubclass(RoleDecodeError, StorageError)

    async def test_storage_failure_propagates(self):
        storage = AsyncMock()
        storage.get.side_effect = StorageError("medium unreachable")
        storage.put.side_effect = StorageError("medium unreachable")
        storage.delete.side_effect = StorageError("medium unreachable")
        store = RoleStore(storage)

        with pytest.raises(StorageError):
            await store.get("r")
        with pytest.raises(StorageError):
            await store.put("r", "SELECT 1")
        with pytest.raises(StorageError):
            await store.delete("r")
