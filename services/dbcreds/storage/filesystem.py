"""
Filesystem storage backend for dbcreds.

Uses aiofiles for async I/O against a local directory. Each key maps to one
file below the root. Writes go to a temporary sibling file that is renamed
into place, so readers see either the old value or the new one.
This is the default backend and needs no external services for dev/CI.
"""

from __future__ import annotations

import contextlib
import secrets
import stat
from pathlib import Path

import aiofiles
import aiofiles.os

from dbcreds.logging_config import get_logger
from dbcreds.storage.protocol import InvalidKeyError, ObjectNotFoundError, StorageError

logger = get_logger(__name__)

_TMP_SUFFIX = ".tmp"

# A key whose path is missing, or runs through or onto the wrong kind of entry
_ABSENT_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError)


class FilesystemStore:
    """Key-value store backed by the local filesystem."""

    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir)

        # Ensure root directory exists
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("Filesystem store initialized", root_dir=str(self._root))

    def _full_path(self, key: str) -> Path:
        """Resolve key to a full filesystem path, preventing path traversal."""
        clean = Path(key)
        if not key or clean.is_absolute() or ".." in clean.parts:
            raise InvalidKeyError(key)
        if clean.name.endswith(_TMP_SUFFIX):
            raise InvalidKeyError(key)
        return self._root / clean

    def _key_from_path(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    async def put(self, key: str, data: bytes) -> None:
        path = self._full_path(key)
        tmp_path = path.with_name(f".{path.name}.{secrets.token_hex(4)}{_TMP_SUFFIX}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
                await f.flush()
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def get(self, key: str) -> bytes:
        path = self._full_path(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except _ABSENT_ERRORS:
            raise ObjectNotFoundError(key) from None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._full_path(key)
        try:
            await aiofiles.os.remove(path)
        except _ABSENT_ERRORS:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    async def exists(self, key: str) -> bool:
        path = self._full_path(key)
        try:
            st = await aiofiles.os.stat(path)
        except _ABSENT_ERRORS:
            return False
        except OSError as e:
            raise StorageError(f"Failed to check {key}: {e}") from e
        return stat.S_ISREG(st.st_mode)

    async def list_prefix(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            for path in self._root.rglob("*"):
                if path.name.endswith(_TMP_SUFFIX) or not path.is_file():
                    continue
                key = self._key_from_path(path)
                if key.startswith(prefix):
                    keys.append(key)
        except OSError as e:
            raise StorageError(f"Failed to list {prefix}: {e}") from e
        return sorted(keys)

    async def ping(self) -> bool:
        try:
            st = await aiofiles.os.stat(self._root)
        except OSError as e:
            logger.error("Filesystem health check failed", error=str(e))
            return False
        return stat.S_ISDIR(st.st_mode)

    async def close(self) -> None:
        """No resources to release for filesystem backend."""
