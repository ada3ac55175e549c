"""Persistence gateway between the store and key-value storage.

The whole AppState is stored as one JSON blob under a fixed, versionless
key. Loading never fails: a missing blob yields the default dataset, and an
unreadable or mismatched blob is logged and replaced by the default dataset.
Writes never fail either: errors are logged and the write is dropped, while
the in-memory state stays authoritative.

Writes requested by the store go through a single-slot queue served by one
writer task. Each request is stamped with an increasing sequence number; a
pending state that is superseded before the writer picks it up is dropped,
so the newest state always wins and writes never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from outing.logging import (
    log_load_fallback,
    log_save_failed,
    log_state_loaded,
    log_state_saved,
)
from outing.state.defaults import default_state
from outing.state.models import AppState

if TYPE_CHECKING:
    from outing.clock import TimeProvider
    from outing.storage.base import KeyValueStorage

logger = logging.getLogger(__name__)

# Fixed storage key of the serialized state
STORAGE_KEY = "@outing_checklist_data"


def serialize_state(state: AppState) -> str:
    """Serialize a state to JSON text using the camelCase wire names."""
    return state.model_dump_json(by_alias=True)


def deserialize_state(blob: str) -> AppState:
    """Parse JSON text into a state.

    Raises:
        pydantic.ValidationError: If the text is not JSON or not a valid AppState
    """
    return AppState.model_validate_json(blob)


class PersistenceGateway:
    """Loads and saves the application state through a KeyValueStorage.

    Args:
        storage: Key-value storage backend
        key: Storage key of the state blob (default: STORAGE_KEY)
        clock: Time source for the default dataset's timestamps

    Example:
        >>> gateway = PersistenceGateway(MemoryStorage())
        >>> state = await gateway.load()
        >>> gateway.schedule_save(state)
        >>> await gateway.flush()
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        clock: TimeProvider | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock

        self._sequence = 0
        self._pending: tuple[int, AppState] | None = None
        self._writer: asyncio.Task[None] | None = None

        self.last_written_sequence = 0
        self.superseded_writes = 0
        self.failed_writes = 0

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    async def load(self) -> AppState:
        """Read the state blob, falling back to the default dataset.

        Returns:
            The persisted state, or a fresh default state when the blob is
            absent, unreadable or invalid
        """
        try:
            blob = await self.storage.get(self.key)
        except Exception as e:  # noqa: BLE001
            log_load_fallback(self.key, "read_failed", str(e))
            return default_state(self._clock)

        if blob is None:
            state = default_state(self._clock)
            log_state_loaded("defaults", len(state.checklists), 0)
            return state

        try:
            state = deserialize_state(blob)
        except ValidationError as e:
            log_load_fallback(self.key, "corrupt", f"{e.error_count()} validation error(s)")
            logger.debug("Rejected state blob: %s", e)
            return default_state(self._clock)

        log_state_loaded("storage", len(state.checklists), len(state.history))
        return state

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    async def save(self, state: AppState) -> None:
        """Serialize and write a state immediately. Failures are logged, not raised."""
        self._sequence += 1
        await self._write(self._sequence, state)

    async def _write(self, sequence: int, state: AppState) -> bool:
        blob = serialize_state(state)
        try:
            await self.storage.set(self.key, blob)
        except Exception as e:  # noqa: BLE001
            self.failed_writes += 1
            log_save_failed(self.key, sequence, str(e))
            return False

        self.last_written_sequence = sequence
        log_state_saved(self.key, sequence, len(blob))
        return True

    def schedule_save(self, state: AppState) -> int:
        """Queue a state for writing without waiting for it.

        Replaces any state still waiting in the queue. When no event loop
        is running the write stays pending until ``flush()`` is awaited.

        Args:
            state: State to persist

        Returns:
            Sequence stamp of the queued write
        """
        self._sequence += 1
        if self._pending is not None:
            self.superseded_writes += 1
            logger.debug("Superseding pending write %d", self._pending[0])
        self._pending = (self._sequence, state)
        self._ensure_writer()
        return self._sequence

    @property
    def has_pending_write(self) -> bool:
        """True when a queued write has not been picked up yet."""
        return self._pending is not None

    def _ensure_writer(self) -> None:
        if self._writer is not None and not self._writer.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, write %d deferred", self._sequence)
            return
        self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            sequence, state = self._pending
            self._pending = None
            await self._write(sequence, state)

    async def flush(self) -> None:
        """Wait until every queued write has completed or failed."""
        while True:
            if self._writer is not None and not self._writer.done():
                await self._writer
            elif self._pending is not None:
                await self._drain()
            else:
                return

    # -------------------------------------------------------------------------
    # Clear
    # -------------------------------------------------------------------------

    async def clear(self) -> None:
        """Clear the backing storage. Failures are logged, not raised."""
        try:
            await self.storage.clear()
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to clear storage: %s", e)
