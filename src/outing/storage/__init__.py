"""Key-value storage backends for the persistence gateway.

Usage:
    from outing.config import load_config
    from outing.storage import open_storage

    storage = await open_storage(load_config().storage)
    await storage.set("key", "value")
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from outing.config.schema import StorageBackend
from outing.storage.base import KeyValueStorage
from outing.storage.memory import MemoryStorage
from outing.storage.sqlite import SqliteStorage

if TYPE_CHECKING:
    from outing.config.schema import StorageConfig

logger = logging.getLogger(__name__)


async def open_storage(config: StorageConfig) -> KeyValueStorage:
    """Open the storage backend selected by configuration.

    The SQLite backend is constructed in a worker thread, off the event loop.

    Args:
        config: Storage configuration

    Returns:
        A ready-to-use KeyValueStorage

    Raises:
        StorageError: If the SQLite file cannot be opened
    """
    if config.backend == StorageBackend.MEMORY:
        logger.debug("Using in-memory storage")
        return MemoryStorage()

    path = config.get_path()
    logger.debug("Using SQLite storage at %s", path)
    return await asyncio.to_thread(SqliteStorage, path)


__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "SqliteStorage",
    "open_storage",
]
