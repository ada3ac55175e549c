"""Accessor layer exposed to presentation code.

Accessors are thin synchronous wrappers around ``AppStore.dispatch``: they
read from the store's latest state on every access and never expose action
models to callers.

Usage:
    with store_context(store):
        checklist = use_checklist(checklist_id)
        if checklist.checklist is not None:
            checklist.toggle_item(item_id)
            record = checklist.complete()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from outing.errors import BuiltInChecklistError
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
    SettingsPatch,
    ToggleItem,
    UpdateChecklist,
    UpdateItem,
    UpdateSettings,
)
from outing.state.builders import build_history
from outing.state.context import resolve_store
from outing.state.defaults import default_state
from outing.statistics import compute_statistics

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime, tzinfo

    from outing.state.models import (
        AppSettings,
        Checklist,
        ChecklistItem,
        CheckHistory,
        Statistics,
    )
    from outing.state.store import AppStore

logger = logging.getLogger(__name__)

MoveDirection = Literal["up", "down"]


class ChecklistsAccessor:
    """List-level view: all checklists plus add/update/delete."""

    def __init__(self, store: AppStore) -> None:
        self._store = store

    @property
    def checklists(self) -> tuple[Checklist, ...]:
        return self._store.state.checklists

    @property
    def built_in(self) -> list[Checklist]:
        """Seeded lists, in stored order."""
        return [c for c in self.checklists if not c.is_custom]

    @property
    def custom(self) -> list[Checklist]:
        """User-created lists, in stored order."""
        return [c for c in self.checklists if c.is_custom]

    def add_checklist(self, checklist: Checklist) -> None:
        self._store.dispatch(AddChecklist(checklist=checklist))

    def update_checklist(self, checklist: Checklist) -> None:
        self._store.dispatch(UpdateChecklist(checklist=checklist))

    def delete_checklist(self, checklist_id: str) -> None:
        self._store.dispatch(DeleteChecklist(checklist_id=checklist_id))

    def delete_custom_checklist(self, checklist_id: str) -> bool:
        """Delete a user-created list, refusing built-in ones.

        Returns:
            True if a checklist was deleted, False if none had that id

        Raises:
            BuiltInChecklistError: If the checklist is built-in
        """
        checklist = self._store.state.find_checklist(checklist_id)
        if checklist is None:
            return False
        if not checklist.is_deletable:
            raise BuiltInChecklistError(checklist_id)
        self.delete_checklist(checklist_id)
        return True


class ChecklistAccessor:
    """Single-checklist view with item operations bound to one checklist id.

    ``checklist`` is None when no checklist has the id; operations on a
    missing checklist are no-ops.
    """

    def __init__(self, store: AppStore, checklist_id: str) -> None:
        self._store = store
        self.checklist_id = checklist_id

    @property
    def checklist(self) -> Checklist | None:
        return self._store.state.find_checklist(self.checklist_id)

    @property
    def checked_count(self) -> int:
        checklist = self.checklist
        return checklist.checked_count if checklist else 0

    @property
    def total_count(self) -> int:
        checklist = self.checklist
        return checklist.total_count if checklist else 0

    @property
    def progress(self) -> float:
        checklist = self.checklist
        return checklist.progress if checklist else 0.0

    @property
    def is_complete(self) -> bool:
        checklist = self.checklist
        return checklist.is_complete if checklist else False

    def toggle_item(self, item_id: str) -> None:
        self._store.dispatch(ToggleItem(checklist_id=self.checklist_id, item_id=item_id))

    def reset_checklist(self) -> None:
        self._store.dispatch(ResetChecklist(checklist_id=self.checklist_id))

    def add_item(self, item: ChecklistItem) -> None:
        self._store.dispatch(AddItem(checklist_id=self.checklist_id, item=item))

    def update_item(self, item: ChecklistItem) -> None:
        self._store.dispatch(UpdateItem(checklist_id=self.checklist_id, item=item))

    def delete_item(self, item_id: str) -> None:
        self._store.dispatch(DeleteItem(checklist_id=self.checklist_id, item_id=item_id))

    def reorder_items(self, items: Iterable[ChecklistItem]) -> None:
        """Replace the item list. Callers set the ``order`` values themselves."""
        self._store.dispatch(ReorderItems(checklist_id=self.checklist_id, items=tuple(items)))

    def move_item(self, item_id: str, direction: MoveDirection) -> bool:
        """Swap an item with its neighbour in display order.

        Items are renumbered ``order = index`` afterwards, which also
        collapses any duplicate ``order`` values.

        Args:
            item_id: Item to move
            direction: "up" (towards the start) or "down"

        Returns:
            True if the item moved, False at either end or when the
            checklist or item does not exist
        """
        checklist = self.checklist
        if checklist is None:
            return False

        items = checklist.sorted_items()
        index = next((i for i, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            return False

        target = index - 1 if direction == "up" else index + 1
        if not 0 <= target < len(items):
            return False

        items[index], items[target] = items[target], items[index]
        self.reorder_items(
            item.model_copy(update={"order": position}) for position, item in enumerate(items)
        )
        return True

    def record_forgotten_item(self, item_id: str) -> None:
        self._store.dispatch(
            RecordForgottenItem(checklist_id=self.checklist_id, item_id=item_id)
        )

    def complete(self, *, reset: bool = False) -> CheckHistory | None:
        """Finish a run of this checklist.

        Saves a history snapshot, counts each unchecked item as forgotten
        (matched by name, first item with that name) and optionally unchecks
        everything afterwards.

        Args:
            reset: Uncheck all items after recording the run

        Returns:
            The saved history record, or None if the checklist does not exist
        """
        checklist = self.checklist
        if checklist is None:
            logger.debug("Cannot complete missing checklist %s", self.checklist_id)
            return None

        record = build_history(checklist, clock=self._store.clock)
        self._store.dispatch(SaveCheckHistory(record=record))

        for name in record.forgotten_items:
            item = checklist.find_item_by_name(name)
            if item is not None:
                self.record_forgotten_item(item.id)

        if reset:
            self.reset_checklist()
        return record


class HistoryAccessor:
    """History view: newest-first entries plus append and clear."""

    def __init__(self, store: AppStore) -> None:
        self._store = store

    @property
    def history(self) -> tuple[CheckHistory, ...]:
        return self._store.state.history

    def save_history(self, record: CheckHistory) -> None:
        self._store.dispatch(SaveCheckHistory(record=record))

    def clear_history(self) -> None:
        """Drop all history, keeping checklists and settings."""
        state = self._store.state
        self._store.dispatch(LoadData(state=state.model_copy(update={"history": ()})))


class SettingsAccessor:
    """Settings view with partial updates."""

    def __init__(self, store: AppStore) -> None:
        self._store = store

    @property
    def settings(self) -> AppSettings:
        return self._store.state.settings

    def update_settings(self, **changes: Any) -> None:
        """Merge the given fields into the settings.

        Raises:
            pydantic.ValidationError: If a field is unknown or has an invalid value
        """
        self._store.dispatch(UpdateSettings(settings=SettingsPatch(**changes)))


def reset_to_defaults(store: AppStore | None = None) -> None:
    """Reload the built-in checklists with an empty history, keeping settings."""
    resolved = resolve_store(store)
    resolved.dispatch(
        LoadData(state=default_state(resolved.clock, settings=resolved.state.settings))
    )


def use_checklists(store: AppStore | None = None) -> ChecklistsAccessor:
    return ChecklistsAccessor(resolve_store(store))


def use_checklist(checklist_id: str, store: AppStore | None = None) -> ChecklistAccessor:
    return ChecklistAccessor(resolve_store(store), checklist_id)


def use_history(store: AppStore | None = None) -> HistoryAccessor:
    return HistoryAccessor(resolve_store(store))


def use_settings(store: AppStore | None = None) -> SettingsAccessor:
    return SettingsAccessor(resolve_store(store))


def use_statistics(
    store: AppStore | None = None,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Statistics:
    """Compute statistics over the store's current history.

    Args:
        store: Store to read (default: the bound store)
        now: Reference moment (default: the store's clock)
        tz: Zone defining calendar days (default: system local zone)
    """
    resolved = resolve_store(store)
    return compute_statistics(
        resolved.state.history,
        now if now is not None else resolved.clock.now(),
        tz,
    )
