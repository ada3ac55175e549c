"""Pure state transition function.

``reduce(state, action)`` maps the current AppState and an action to the
next AppState. It never mutates its inputs: modified subtrees are rebuilt
with ``model_copy`` and untouched checklists, items and history records are
shared with the previous state.

When an action refers to a checklist or item that does not exist the very
same state object is returned, so callers can detect "nothing changed" with
an identity check.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from outing.clock import get_time_provider
from outing.state.actions import (
    AddChecklist,
    AddItem,
    DeleteChecklist,
    DeleteItem,
    LoadData,
    RecordForgottenItem,
    ReorderItems,
    ResetChecklist,
    SaveCheckHistory,
    ToggleItem,
    UpdateChecklist,
    UpdateItem,
    UpdateSettings,
)
from outing.state.models import (
    HISTORY_LIMIT,
    AppSettings,
    AppState,
    Checklist,
    ChecklistItem,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from outing.clock import TimeProvider

    Handler = Callable[[AppState, Any, TimeProvider], AppState]

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Structural helpers
# -----------------------------------------------------------------------------


def _replace_checklist(
    state: AppState,
    checklist_id: str,
    update: Callable[[Checklist], Checklist],
) -> AppState:
    """Apply ``update`` to the matching checklist.

    Returns ``state`` itself when no checklist matches or ``update`` returned
    its argument unchanged.
    """
    changed = False
    checklists: list[Checklist] = []
    for checklist in state.checklists:
        if checklist.id == checklist_id:
            updated = update(checklist)
            changed = changed or updated is not checklist
            checklists.append(updated)
        else:
            checklists.append(checklist)

    if not changed:
        return state
    return state.model_copy(update={"checklists": tuple(checklists)})


def _replace_item(
    checklist: Checklist,
    item_id: str,
    update: Callable[[ChecklistItem], ChecklistItem],
) -> tuple[ChecklistItem, ...] | None:
    """Return the checklist's items with ``update`` applied to the matching item.

    Returns None when no item matches.
    """
    found = False
    items: list[ChecklistItem] = []
    for item in checklist.items:
        if item.id == item_id:
            found = True
            items.append(update(item))
        else:
            items.append(item)
    return tuple(items) if found else None


def _with_items(
    checklist: Checklist,
    items: tuple[ChecklistItem, ...],
    clock: TimeProvider,
) -> Checklist:
    """Copy a checklist with a new item list and a refreshed ``updated_at``."""
    return checklist.model_copy(update={"items": items, "updated_at": clock.now()})


# -----------------------------------------------------------------------------
# Checklist-level transitions
# -----------------------------------------------------------------------------


def _load_data(state: AppState, action: LoadData, clock: TimeProvider) -> AppState:  # noqa: ARG001
    return action.state


def _add_checklist(state: AppState, action: AddChecklist, clock: TimeProvider) -> AppState:  # noqa: ARG001
    return state.model_copy(update={"checklists": (*state.checklists, action.checklist)})


def _update_checklist(
    state: AppState,
    action: UpdateChecklist,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    return _replace_checklist(state, action.checklist.id, lambda _c: action.checklist)


def _delete_checklist(
    state: AppState,
    action: DeleteChecklist,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    remaining = tuple(c for c in state.checklists if c.id != action.checklist_id)
    if len(remaining) == len(state.checklists):
        return state
    return state.model_copy(update={"checklists": remaining})


def _reset_checklist(
    state: AppState,
    action: ResetChecklist,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    def reset(checklist: Checklist) -> Checklist:
        if not any(item.is_checked for item in checklist.items):
            return checklist
        items = tuple(
            item.model_copy(update={"is_checked": False}) if item.is_checked else item
            for item in checklist.items
        )
        return checklist.model_copy(update={"items": items})

    return _replace_checklist(state, action.checklist_id, reset)


# -----------------------------------------------------------------------------
# Item-level transitions
# -----------------------------------------------------------------------------


def _toggle_item(state: AppState, action: ToggleItem, clock: TimeProvider) -> AppState:  # noqa: ARG001
    def toggle(item: ChecklistItem) -> ChecklistItem:
        checked = not item.is_checked
        return item.model_copy(
            update={
                "is_checked": checked,
                "checked_count": item.checked_count + 1 if checked else item.checked_count,
            }
        )

    def update(checklist: Checklist) -> Checklist:
        items = _replace_item(checklist, action.item_id, toggle)
        if items is None:
            return checklist
        return checklist.model_copy(update={"items": items})

    return _replace_checklist(state, action.checklist_id, update)


def _record_forgotten_item(
    state: AppState,
    action: RecordForgottenItem,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    def record(item: ChecklistItem) -> ChecklistItem:
        return item.model_copy(update={"forgot_count": item.forgot_count + 1})

    def update(checklist: Checklist) -> Checklist:
        items = _replace_item(checklist, action.item_id, record)
        if items is None:
            return checklist
        return checklist.model_copy(update={"items": items})

    return _replace_checklist(state, action.checklist_id, update)


def _add_item(state: AppState, action: AddItem, clock: TimeProvider) -> AppState:
    return _replace_checklist(
        state,
        action.checklist_id,
        lambda c: _with_items(c, (*c.items, action.item), clock),
    )


def _update_item(state: AppState, action: UpdateItem, clock: TimeProvider) -> AppState:
    def update(checklist: Checklist) -> Checklist:
        items = _replace_item(checklist, action.item.id, lambda _i: action.item)
        if items is None:
            return checklist
        return _with_items(checklist, items, clock)

    return _replace_checklist(state, action.checklist_id, update)


def _delete_item(state: AppState, action: DeleteItem, clock: TimeProvider) -> AppState:
    return _replace_checklist(
        state,
        action.checklist_id,
        lambda c: _with_items(
            c, tuple(item for item in c.items if item.id != action.item_id), clock
        ),
    )


def _reorder_items(state: AppState, action: ReorderItems, clock: TimeProvider) -> AppState:
    return _replace_checklist(
        state,
        action.checklist_id,
        lambda c: _with_items(c, action.items, clock),
    )


# -----------------------------------------------------------------------------
# History and settings transitions
# -----------------------------------------------------------------------------


def _save_check_history(
    state: AppState,
    action: SaveCheckHistory,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    history = (action.record, *state.history)
    if len(history) > HISTORY_LIMIT:
        logger.debug(
            "Truncating history to %d entries (dropped %d)",
            HISTORY_LIMIT,
            len(history) - HISTORY_LIMIT,
        )
    return state.model_copy(update={"history": history[:HISTORY_LIMIT]})


def _update_settings(
    state: AppState,
    action: UpdateSettings,
    clock: TimeProvider,  # noqa: ARG001
) -> AppState:
    changes = action.settings.changes()
    if not changes:
        return state
    # The merged record is validated as a whole
    settings = AppSettings.model_validate({**state.settings.model_dump(), **changes})
    return state.model_copy(update={"settings": settings})


# Registry of transitions keyed by action class
HANDLERS: dict[type, Handler] = {
    LoadData: _load_data,
    AddChecklist: _add_checklist,
    UpdateChecklist: _update_checklist,
    DeleteChecklist: _delete_checklist,
    ToggleItem: _toggle_item,
    ResetChecklist: _reset_checklist,
    AddItem: _add_item,
    UpdateItem: _update_item,
    DeleteItem: _delete_item,
    ReorderItems: _reorder_items,
    SaveCheckHistory: _save_check_history,
    UpdateSettings: _update_settings,
    RecordForgottenItem: _record_forgotten_item,
}


def reduce(
    state: AppState,
    action: object,
    *,
    clock: TimeProvider | None = None,
) -> AppState:
    """Compute the state that results from applying ``action`` to ``state``.

    Args:
        state: Current state (never modified)
        action: One of the action models; anything else is ignored
        clock: Time source for ``updated_at`` stamps (default: global provider)

    Returns:
        The next state, or ``state`` itself when the action changes nothing
    """
    handler = HANDLERS.get(type(action))
    if handler is None:
        logger.debug("Ignoring unrecognized action: %r", action)
        return state
    return handler(state, action, clock or get_time_provider())
