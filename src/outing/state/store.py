"""Application store: the single owner of the live AppState.

The store applies actions through the pure reducer, notifies listeners of
every change, and hands each settled state to the persistence gateway
without waiting for the write. Until the one-shot startup load resolves the
store is "loading" and writes are suppressed, so the empty pre-load state
never overwrites persisted data.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from outing.clock import get_time_provider
from outing.logging import log_action_dispatched
from outing.state.actions import LoadData
from outing.state.defaults import default_state
from outing.state.models import AppState
from outing.state.reducer import reduce

if TYPE_CHECKING:
    from collections.abc import Callable

    from outing.clock import TimeProvider
    from outing.state.persistence import PersistenceGateway

    Listener = Callable[[AppState, AppState], None]

logger = logging.getLogger(__name__)


class AppStore:
    """Owns the application state and routes every change through ``reduce``.

    Args:
        gateway: Persistence gateway (None keeps the state in memory only)
        clock: Time source for timestamps (default: global time provider)

    Example:
        >>> store = AppStore(PersistenceGateway(MemoryStorage()))
        >>> await store.initialize()
        >>> store.dispatch(ToggleItem(checklist_id=cid, item_id=iid))
        >>> await store.flush()
    """

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        *,
        clock: TimeProvider | None = None,
    ) -> None:
        self._gateway = gateway
        self._clock = clock
        self._state = AppState()
        self._is_loading = True
        self._init_lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        """The current state."""
        return self._state

    @property
    def is_loading(self) -> bool:
        """True until the startup load has resolved."""
        return self._is_loading

    @property
    def clock(self) -> TimeProvider:
        """Time source used for this store's timestamps."""
        return self._clock or get_time_provider()

    @property
    def gateway(self) -> PersistenceGateway | None:
        """The persistence gateway, if any."""
        return self._gateway

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with (new_state, previous_state) on change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: object) -> AppState:
        """Apply an action synchronously.

        Listeners run and a write is scheduled only when the state changed
        and the store has finished loading.

        Args:
            action: Action model; unrecognized objects are ignored

        Returns:
            The state after the action
        """
        previous = self._state
        state = reduce(previous, action, clock=self.clock)
        changed = state is not previous

        log_action_dispatched(
            getattr(action, "type", type(action).__name__),
            changed,
            len(state.checklists),
            len(state.history),
        )

        if not changed:
            return state

        self._state = state
        for listener in list(self._listeners):
            listener(state, previous)

        if not self._is_loading and self._gateway is not None:
            self._gateway.schedule_save(state)
        return state

    async def initialize(self) -> AppState:
        """Load the persisted state once and start persisting changes.

        Later calls, including ones overlapping the first, return the
        current state without reloading.

        Returns:
            The loaded state
        """
        if not self._is_loading:
            return self._state

        # Concurrent callers wait for the first load instead of loading again
        async with self._init_lock:
            if not self._is_loading:
                return self._state

            if self._gateway is None:
                loaded = default_state(self.clock)
            else:
                loaded = await self._gateway.load()

            self.dispatch(LoadData(state=loaded))
            self._is_loading = False

        logger.debug(
            "Store initialized with %d checklist(s), %d history entries",
            len(self._state.checklists),
            len(self._state.history),
        )

        if self._gateway is not None:
            self._gateway.schedule_save(self._state)
        return self._state

    async def flush(self) -> None:
        """Wait for queued writes to finish."""
        if self._gateway is not None:
            await self._gateway.flush()
