"""Schema migrations for the SQLite key-value store.

This module handles the table layout of the storage file only:
- Tracks current schema version
- Applies migrations in order
- Supports fresh database initialization

The JSON blobs stored in the table are not versioned or migrated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Callable

    MigrationFunc = Callable[[sqlite3.Connection], None]

logger = logging.getLogger(__name__)

# Current schema version - increment when adding migrations
CURRENT_SCHEMA_VERSION = 1


def _migration_v1(conn: sqlite3.Connection) -> None:
    """Initial schema: v0 -> v1.

    Creates:
    - schema_version: Migration tracking
    - kv: Key-value pairs with last write time
    """
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    cursor.execute(
        "INSERT OR REPLACE INTO schema_version (version, applied_at) VALUES (?, datetime('now'))",
        (1,),
    )

    conn.commit()
    logger.info("Applied migration v1: key-value table")


# Registry of migrations keyed by target version
MIGRATIONS: dict[int, MigrationFunc] = {
    1: _migration_v1,
}


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get the current schema version from the database.

    Args:
        conn: SQLite database connection

    Returns:
        Current schema version, or 0 if not initialized
    """
    cursor = conn.cursor()
    cursor.execute("""
        SELECT name FROM sqlite_master
        WHERE type='table' AND name='schema_version'
    """)

    if cursor.fetchone() is None:
        return 0

    cursor.execute("SELECT MAX(version) FROM schema_version")
    row = cursor.fetchone()
    return row[0] if row[0] is not None else 0


def migrate_database(
    conn: sqlite3.Connection,
    target_version: int | None = None,
) -> int:
    """Apply all pending migrations to reach the target version.

    Args:
        conn: SQLite database connection
        target_version: Version to migrate to (default: CURRENT_SCHEMA_VERSION)

    Returns:
        The final schema version after migrations

    Raises:
        ValueError: If target_version is invalid or a migration is missing
    """
    if target_version is None:
        target_version = CURRENT_SCHEMA_VERSION

    if target_version < 0 or target_version > CURRENT_SCHEMA_VERSION:
        msg = f"Invalid target version: {target_version} (current max: {CURRENT_SCHEMA_VERSION})"
        raise ValueError(msg)

    current_version = get_schema_version(conn)

    if current_version >= target_version:
        logger.debug(
            "Database already at version %d (target: %d)",
            current_version,
            target_version,
        )
        return current_version

    logger.info("Migrating database from v%d to v%d", current_version, target_version)

    for version in range(current_version + 1, target_version + 1):
        migration = MIGRATIONS.get(version)
        if migration is None:
            msg = f"No migration found for version {version}"
            raise ValueError(msg)

        logger.debug("Applying migration to v%d", version)
        migration(conn)

    return target_version
