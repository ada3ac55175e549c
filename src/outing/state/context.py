"""Binding of a store to the current execution context.

Presentation code can bind its store once and let accessor factories find
it. Asking for the store outside a binding is a wiring defect and fails
hard with StoreContextError.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from outing.errors import StoreContextError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from outing.state.store import AppStore

_current_store: ContextVar[AppStore | None] = ContextVar("outing_store", default=None)


@contextmanager
def store_context(store: AppStore) -> Iterator[AppStore]:
    """Bind ``store`` for the duration of the ``with`` block.

    Example:
        >>> with store_context(store):
        ...     use_settings().update_settings(haptic_feedback=False)
    """
    token = _current_store.set(store)
    try:
        yield store
    finally:
        _current_store.reset(token)


def current_store() -> AppStore:
    """Return the bound store.

    Raises:
        StoreContextError: If no store is bound
    """
    store = _current_store.get()
    if store is None:
        msg = "No store is bound: use the store API inside store_context()"
        raise StoreContextError(msg)
    return store


def resolve_store(store: AppStore | None) -> AppStore:
    """Return ``store`` when given, otherwise the bound store."""
    return store if store is not None else current_store()
