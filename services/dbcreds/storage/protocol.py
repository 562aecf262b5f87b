"""
Key-value storage protocol for dbcreds.

Defines the KeyValueStore Protocol that all storage backends must satisfy,
along with the shared exceptions.
"""

from typing import Protocol, runtime_checkable

# --- Exceptions ---


class StorageError(Exception):
    """Base exception for storage operations.

    Raised when the storage medium is unreachable or fails an operation.
    """


class ObjectNotFoundError(StorageError):
    """Raised when a requested key does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object not found: {key}")


class InvalidKeyError(StorageError):
    """Raised when a key cannot be mapped onto the storage medium."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Invalid key: {key}")


# --- Protocol ---


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol defining the durable key-value storage interface.

    All methods are async. Implementations must satisfy this interface
    structurally (duck typing), no inheritance required.
    """

    async def put(self, key: str, data: bytes) -> None:
        """Store a value, replacing any previous value for the key.

        Readers never observe a partially written value.

        Args:
            key: Storage key.
            data: Value content.
        """
        ...

    async def get(self, key: str) -> bytes:
        """Retrieve a value.

        Args:
            key: Storage key.

        Returns:
            Stored content as bytes.

        Raises:
            ObjectNotFoundError: If the key does not exist.
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete a value.

        Idempotent: does not raise if the key does not exist.

        Args:
            key: Storage key.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Check if a key exists.

        Args:
            key: Storage key.

        Returns:
            True if the key exists.
        """
        ...

    async def list_prefix(self, prefix: str) -> list[str]:
        """List keys starting with a prefix.

        Args:
            prefix: Key prefix to filter by.

        Returns:
            Sorted list of matching keys.
        """
        ...

    async def ping(self) -> bool:
        """Check that the storage medium is reachable.

        Returns:
            True if the backend can serve requests. Never raises.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the backend."""
        ...
