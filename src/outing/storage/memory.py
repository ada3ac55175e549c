"""In-memory key-value storage.

Used when persistence is disabled and as a test double. Reads and writes can
be switched to fail so callers' error handling can be exercised.
"""

from __future__ import annotations

import asyncio
import logging

from outing.errors import StorageError

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Dict-backed implementation of the KeyValueStorage protocol.

    Args:
        initial: Optional initial contents
        latency: Seconds each call waits before completing (default: 0)

    Example:
        >>> storage = MemoryStorage({"greeting": "hello"})
        >>> await storage.get("greeting")
        'hello'
    """

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        latency: float = 0.0,
    ) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.latency = latency
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[tuple[str, str]] = []

    async def _wait(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""
        await self._wait()
        if self.fail_reads:
            msg = f"Simulated read failure for key {key!r}"
            raise StorageError(msg, key=key)
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        await self._wait()
        if self.fail_writes:
            msg = f"Simulated write failure for key {key!r}"
            raise StorageError(msg, key=key)
        self.data[key] = value
        self.writes.append((key, value))

    async def clear(self) -> None:
        """Remove every key."""
        await self._wait()
        if self.fail_writes:
            msg = "Simulated clear failure"
            raise StorageError(msg)
        self.data.clear()
        logger.debug("Cleared in-memory storage")
