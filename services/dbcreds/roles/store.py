"""Durable CRUD for role definitions.

Records live under ``role/<name>`` in the configured key-value store. The
store never validates SQL; that happens on the create path before put().
"""

from pydantic import ValidationError

from dbcreds.logging_config import get_logger
from dbcreds.roles.models import RoleEntry
from dbcreds.storage.keys import ROLE_PREFIX, role_key, role_name_from_key
from dbcreds.storage.protocol import KeyValueStore, ObjectNotFoundError, StorageError

logger = get_logger(__name__)


class RoleDecodeError(StorageError):
    """A stored role record exists but cannot be decoded."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Corrupt role record '{name}': {reason}")


class RoleStore:
    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage

    async def get(self, name: str) -> RoleEntry | None:
        """Return the stored role, or None if there is none.

        Raises:
            RoleDecodeError: The stored payload is malformed.
            StorageError: The storage medium failed.
        """
        try:
            raw = await self._storage.get(role_key(name))
        except ObjectNotFoundError:
            return None

        try:
            return RoleEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Undecodable role record", role=name)
            raise RoleDecodeError(name, str(e)) from e

    async def put(self, name: str, sql: str) -> None:
        entry = RoleEntry(sql=sql)
        await self._storage.put(role_key(name), entry.model_dump_json().encode())

    async def delete(self, name: str) -> None:
        await self._storage.delete(role_key(name))

    async def list_names(self) -> list[str]:
        keys = await self._storage.list_prefix(ROLE_PREFIX)
        return sorted(role_name_from_key(k) for k in keys)
