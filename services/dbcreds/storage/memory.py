"""
In-process storage backend for dbcreds.

Nothing survives a restart. Intended for local development and tests.
"""

from dbcreds.storage.protocol import ObjectNotFoundError


class MemoryStore:
    """Key-value store held in a plain dict."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    async def get(self, key: str) -> bytes:
        try:
            return self._data[key]
        except KeyError:
            raise ObjectNotFoundError(key) from None

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._data

    async def list_prefix(self, prefix: str) -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()
