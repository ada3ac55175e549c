"""Key-value storage capability used by the persistence gateway."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorage(Protocol):
    """Asynchronous string key-value store.

    Every call may fail; implementations raise StorageError.
    """

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def clear(self) -> None:
        """Remove every key."""
        ...
