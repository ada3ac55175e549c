"""Immutable data model for the application state.

Every record is a frozen pydantic model, and sequences inside records are
tuples, so a state tree can be shared freely between old and new states.
Attribute names are snake_case in Python; the persisted JSON uses the
camelCase names of the original schema (``isChecked``, ``forgotCount`` ...).

Invariants:
    - AppState.history holds at most HISTORY_LIMIT entries, newest first
    - ChecklistItem.checked_count and forgot_count never decrease
"""

from __future__ import annotations

import re
from datetime import datetime  # noqa: TC003 - pydantic needs it at runtime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Maximum number of history entries kept in the state
HISTORY_LIMIT = 100

Theme = Literal["light", "dark", "system"]

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Record(BaseModel):
    """Base class for persisted records: frozen, strict, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def validate_clock_time(v: str) -> str:
    if not _TIME_PATTERN.match(v):
        msg = "time must be formatted as 'HH:mm' (24-hour clock)"
        raise ValueError(msg)
    return v


class ChecklistItem(Record):
    """A single trackable object within a checklist.

    Attributes:
        id: Unique item identifier
        name: Display name (history records refer to items by this name)
        emoji: Optional emoji shown next to the name
        is_checked: Whether the item is currently checked
        order: Display position within the checklist (not deduplicated)
        forgot_count: Times the item was recorded as forgotten
        checked_count: Times the item went from unchecked to checked
    """

    id: str
    name: str
    emoji: str | None = None
    is_checked: bool = False
    order: int = 0
    forgot_count: Annotated[int, Field(ge=0)] = 0
    checked_count: Annotated[int, Field(ge=0)] = 0


class ReminderSettings(Record):
    """Reminder schedule attached to a checklist.

    Scheduling the notification itself is up to the presentation layer;
    the state core only stores the settings.

    Attributes:
        enabled: Whether the reminder is active
        time: Time of day as 'HH:mm'
        days: Weekdays, 0 (Sunday) to 6 (Saturday)
        notification_id: Identifier of the scheduled notification, if any
    """

    enabled: bool = False
    time: str = "08:00"
    days: tuple[Annotated[int, Field(ge=0, le=6)], ...] = ()
    notification_id: str | None = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time is a 24-hour 'HH:mm' string."""
        return validate_clock_time(v)


class Checklist(Record):
    """A named, colored collection of items for one outing scenario.

    Attributes:
        id: Unique checklist identifier
        name: Display name
        emoji: Emoji shown with the name
        color: Hex color string
        items: Items in stored order
        is_custom: True for user-created lists, False for built-in lists
        created_at: When the checklist was created
        updated_at: When the item list was last edited
        reminder: Optional reminder settings
    """

    id: str
    name: str
    emoji: str
    color: str
    items: tuple[ChecklistItem, ...] = ()
    is_custom: bool = False
    created_at: datetime
    updated_at: datetime
    reminder: ReminderSettings | None = None

    def find_item(self, item_id: str) -> ChecklistItem | None:
        """Return the item with the given id, or None."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find_item_by_name(self, name: str) -> ChecklistItem | None:
        """Return the first item with the given name, or None."""
        for item in self.items:
            if item.name == name:
                return item
        return None

    def sorted_items(self) -> list[ChecklistItem]:
        """Return items sorted by ``order``.

        Items sharing an ``order`` value keep their stored relative position.
        """
        return sorted(self.items, key=lambda item: item.order)

    @property
    def checked_count(self) -> int:
        """Number of currently checked items."""
        return sum(1 for item in self.items if item.is_checked)

    @property
    def total_count(self) -> int:
        """Number of items."""
        return len(self.items)

    @property
    def progress(self) -> float:
        """Fraction of checked items (0.0 for an empty list)."""
        if not self.items:
            return 0.0
        return self.checked_count / len(self.items)

    @property
    def is_complete(self) -> bool:
        """True when the list has items and all of them are checked."""
        return bool(self.items) and self.checked_count == len(self.items)

    @property
    def is_deletable(self) -> bool:
        """Only user-created lists may be deleted by the user."""
        return self.is_custom


class CheckHistory(Record):
    """Immutable snapshot of one completed checklist run.

    ``forgotten_items`` stores item names, not ids, so it keeps showing the
    name the item had at completion time even after a later rename.
    """

    id: str
    checklist_id: str
    checklist_name: str
    date: datetime
    total_items: Annotated[int, Field(ge=0)]
    checked_items: Annotated[int, Field(ge=0)]
    forgotten_items: tuple[str, ...] = ()

    @property
    def is_perfect(self) -> bool:
        """True when nothing was forgotten."""
        return not self.forgotten_items


class AppSettings(Record):
    """Flat application settings record. Updates are partial merges."""

    default_reminder_time: str = "08:00"
    notifications_enabled: bool = True
    haptic_feedback: bool = True
    theme: Theme = "system"

    @field_validator("default_reminder_time")
    @classmethod
    def validate_default_reminder_time(cls, v: str) -> str:
        """Validate the reminder time is a 24-hour 'HH:mm' string."""
        return validate_clock_time(v)


class AppState(Record):
    """Root aggregate owned by the store."""

    checklists: tuple[Checklist, ...] = ()
    history: tuple[CheckHistory, ...] = ()
    settings: AppSettings = Field(default_factory=AppSettings)

    @field_validator("history")
    @classmethod
    def cap_history(cls, v: tuple[CheckHistory, ...]) -> tuple[CheckHistory, ...]:
        """Keep only the newest HISTORY_LIMIT entries."""
        return v[:HISTORY_LIMIT]

    def find_checklist(self, checklist_id: str) -> Checklist | None:
        """Return the checklist with the given id, or None."""
        for checklist in self.checklists:
            if checklist.id == checklist_id:
                return checklist
        return None


# -----------------------------------------------------------------------------
# Statistics views
# -----------------------------------------------------------------------------


class ForgottenItemCount(Record):
    """How many times an item name was forgotten."""

    item_name: str
    count: int


class ChecklistUsage(Record):
    """How many times a checklist was completed."""

    checklist_id: str
    checklist_name: str
    count: int


class DailyChecks(Record):
    """Checks completed on one calendar day.

    Attributes:
        date: ISO calendar date ('YYYY-MM-DD')
        label: Short display label ('M/d')
        checks: Number of history entries on that day
        perfect_rate: Rounded percentage of perfect checks (0 when no checks)
    """

    date: str
    label: str
    checks: int
    perfect_rate: int


class Statistics(Record):
    """Aggregate summaries derived from the check history."""

    total_checks: int = 0
    perfect_checks: int = 0
    forgotten_items_ranking: tuple[ForgottenItemCount, ...] = ()
    checklist_usage_ranking: tuple[ChecklistUsage, ...] = ()
    weekly_data: tuple[DailyChecks, ...] = ()
