"""SQLite-file key-value storage.

A single database file holds a ``kv`` table. The file is created with
chmod 600, uses WAL journaling, and is migrated on open. Blocking SQLite
calls run in a worker thread; an asyncio.Lock keeps them one at a time.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from outing.errors import StorageError
from outing.paths import ensure_data_dir
from outing.storage.migrations import migrate_database

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class SqliteStorage:
    """SQLite implementation of the KeyValueStorage protocol.

    Args:
        db_path: Path to the SQLite database file

    Example:
        >>> from outing.paths import get_default_store_path
        >>> storage = SqliteStorage(get_default_store_path())
        >>> await storage.set("key", "value")
        >>> await storage.get("key")
        'value'
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self._conn: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

        self._ensure_database()

    def _ensure_database(self) -> None:
        """Create the directory and file if needed, set permissions, and migrate."""
        ensure_data_dir(self.db_path.parent)

        is_new = not self.db_path.exists()

        try:
            conn = self._get_connection()
            migrate_database(conn)
        except sqlite3.Error as e:
            msg = f"Cannot open key-value store at {self.db_path}: {e}"
            raise StorageError(msg) from e

        if is_new and self.db_path.exists():
            try:
                os.chmod(self.db_path, 0o600)  # noqa: PTH101
                logger.debug("Set store permissions to 600: %s", self.db_path)
            except OSError as e:
                logger.warning("Could not set store permissions: %s", e)

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            # Calls arrive from worker threads, one at a time under self._lock
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for transactional operations.

        Yields:
            The database connection

        Raises:
            Exception: Re-raises any exception after rollback
        """
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -------------------------------------------------------------------------
    # Blocking operations (run in a worker thread)
    # -------------------------------------------------------------------------

    def _get_sync(self, key: str) -> str | None:
        cursor = self._get_connection().execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None

    def _set_sync(self, key: str, value: str) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO kv (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                """,
                (key, value),
            )

    def _clear_sync(self) -> int:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM kv")
            return cursor.rowcount

    # -------------------------------------------------------------------------
    # KeyValueStorage protocol
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent.

        Raises:
            StorageError: If the read fails
        """
        async with self._lock:
            try:
                return await asyncio.to_thread(self._get_sync, key)
            except sqlite3.Error as e:
                msg = f"Read failed for key {key!r}: {e}"
                raise StorageError(msg, key=key) from e

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageError: If the write fails
        """
        async with self._lock:
            try:
                await asyncio.to_thread(self._set_sync, key, value)
            except sqlite3.Error as e:
                msg = f"Write failed for key {key!r}: {e}"
                raise StorageError(msg, key=key) from e
        logger.debug("Stored key %s (%d bytes)", key, len(value))

    async def clear(self) -> None:
        """Remove every key.

        Raises:
            StorageError: If the delete fails
        """
        async with self._lock:
            try:
                count = await asyncio.to_thread(self._clear_sync)
            except sqlite3.Error as e:
                msg = f"Clear failed: {e}"
                raise StorageError(msg) from e
        logger.info("Cleared %d key(s) from %s", count, self.db_path)
