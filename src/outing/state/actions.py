"""Actions accepted by the state transition function.

Actions form a closed tagged union discriminated on ``type``; each variant
is a frozen model carrying exactly the payload its transition needs.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, get_args

from pydantic import Field, TypeAdapter, field_validator, model_validator

from outing.state.models import (
    AppState,
    Checklist,
    ChecklistItem,
    CheckHistory,
    Record,
    Theme,
    validate_clock_time,
)

logger = logging.getLogger(__name__)


class SettingsPatch(Record):
    """Partial settings update. Only explicitly set fields are merged."""

    default_reminder_time: str | None = None
    notifications_enabled: bool | None = None
    haptic_feedback: bool | None = None
    theme: Theme | None = None

    @field_validator("default_reminder_time")
    @classmethod
    def validate_default_reminder_time(cls, v: str | None) -> str | None:
        """Validate the reminder time is a 24-hour 'HH:mm' string."""
        if v is None:
            return v
        return validate_clock_time(v)

    @model_validator(mode="after")
    def validate_no_explicit_none(self) -> SettingsPatch:
        """Reject fields that are set but None; settings are never nullable."""
        nulled = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None
        )
        if nulled:
            msg = f"Settings cannot be set to None: {', '.join(nulled)}"
            raise ValueError(msg)
        return self

    def changes(self) -> dict[str, Any]:
        """Return the explicitly set fields, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class LoadData(Record):
    """Replace the entire state."""

    type: Literal["LOAD_DATA"] = "LOAD_DATA"
    state: AppState


class AddChecklist(Record):
    """Append a checklist. Duplicate ids are the caller's responsibility."""

    type: Literal["ADD_CHECKLIST"] = "ADD_CHECKLIST"
    checklist: Checklist


class UpdateChecklist(Record):
    """Replace the checklist with the same id."""

    type: Literal["UPDATE_CHECKLIST"] = "UPDATE_CHECKLIST"
    checklist: Checklist


class DeleteChecklist(Record):
    type: Literal["DELETE_CHECKLIST"] = "DELETE_CHECKLIST"
    checklist_id: str


class ToggleItem(Record):
    """Flip an item's checked state, counting unchecked->checked transitions."""

    type: Literal["TOGGLE_ITEM"] = "TOGGLE_ITEM"
    checklist_id: str
    item_id: str


class ResetChecklist(Record):
    """Uncheck every item of a checklist. Counters are untouched."""

    type: Literal["RESET_CHECKLIST"] = "RESET_CHECKLIST"
    checklist_id: str


class AddItem(Record):
    type: Literal["ADD_ITEM"] = "ADD_ITEM"
    checklist_id: str
    item: ChecklistItem


class UpdateItem(Record):
    type: Literal["UPDATE_ITEM"] = "UPDATE_ITEM"
    checklist_id: str
    item: ChecklistItem


class DeleteItem(Record):
    type: Literal["DELETE_ITEM"] = "DELETE_ITEM"
    checklist_id: str
    item_id: str


class ReorderItems(Record):
    """Replace the whole item list; the caller supplies the ``order`` values."""

    type: Literal["REORDER_ITEMS"] = "REORDER_ITEMS"
    checklist_id: str
    items: tuple[ChecklistItem, ...]


class SaveCheckHistory(Record):
    """Prepend a history record, dropping the oldest beyond the limit."""

    type: Literal["SAVE_CHECK_HISTORY"] = "SAVE_CHECK_HISTORY"
    record: CheckHistory


class UpdateSettings(Record):
    type: Literal["UPDATE_SETTINGS"] = "UPDATE_SETTINGS"
    settings: SettingsPatch


class RecordForgottenItem(Record):
    """Count one more time an item was forgotten, whatever its checked state."""

    type: Literal["RECORD_FORGOTTEN_ITEM"] = "RECORD_FORGOTTEN_ITEM"
    checklist_id: str
    item_id: str


Action = Annotated[
    LoadData
    | AddChecklist
    | UpdateChecklist
    | DeleteChecklist
    | ToggleItem
    | ResetChecklist
    | AddItem
    | UpdateItem
    | DeleteItem
    | ReorderItems
    | SaveCheckHistory
    | UpdateSettings
    | RecordForgottenItem,
    Field(discriminator="type"),
]

ACTION_CLASSES: tuple[type[Record], ...] = get_args(get_args(Action)[0])

ACTION_TYPES: frozenset[str] = frozenset(
    cls.model_fields["type"].default for cls in ACTION_CLASSES
)

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(raw: dict[str, Any]) -> Action | None:
    """Parse a raw mapping into an action.

    Args:
        raw: Mapping with a ``type`` tag and the variant's fields
             (camelCase or snake_case keys)

    Returns:
        The parsed action, or None when the tag is not a known action

    Raises:
        pydantic.ValidationError: If the tag is known but the payload is invalid
    """
    action_type = raw.get("type")
    if action_type not in ACTION_TYPES:
        logger.debug("Ignoring unknown action type: %r", action_type)
        return None
    return _action_adapter.validate_python(raw)
