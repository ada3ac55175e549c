"""State management module for Outing Checklist.

This module provides the application state and its lifecycle:
- Immutable state models (checklists, history, settings)
- Closed set of actions and the pure reducer applying them
- AppStore with listeners and a startup loading gate
- Persistence gateway with a latest-wins write queue

Usage:
    from outing.state import AppStore, PersistenceGateway, store_context
    from outing.storage import MemoryStorage

    store = AppStore(PersistenceGateway(MemoryStorage()))
    await store.initialize()
    with store_context(store):
        ...
"""

from outing.state.actions import Action, parse_action
from outing.state.context import current_store, resolve_store, store_context
from outing.state.defaults import create_default_checklists, default_state
from outing.state.models import (
    AppSettings,
    AppState,
    CheckHistory,
    Checklist,
    ChecklistItem,
    ReminderSettings,
    Statistics,
)
from outing.state.persistence import STORAGE_KEY, PersistenceGateway
from outing.state.reducer import reduce
from outing.state.store import AppStore

__all__ = [
    "STORAGE_KEY",
    "Action",
    "AppSettings",
    "AppState",
    "AppStore",
    "CheckHistory",
    "Checklist",
    "ChecklistItem",
    "PersistenceGateway",
    "ReminderSettings",
    "Statistics",
    "create_default_checklists",
    "current_store",
    "default_state",
    "parse_action",
    "reduce",
    "resolve_store",
    "store_context",
]
