"""Validated constructors for new checklists, items and history records.

Names are trimmed and must not be blank. Items of a new checklist are
numbered by position; an item appended to an existing checklist takes the
next position after the current items.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from outing.clock import get_time_provider
from outing.errors import ChecklistValidationError
from outing.state.defaults import SceneColor, new_id
from outing.state.models import Checklist, ChecklistItem, CheckHistory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from outing.clock import TimeProvider

DEFAULT_CHECKLIST_EMOJI = "🎒"
DEFAULT_ITEM_EMOJI = "📦"


def clean_name(name: str, field: str = "name") -> str:
    """Trim a user-supplied name and reject blank values.

    Raises:
        ChecklistValidationError: If the name is empty after trimming
    """
    cleaned = name.strip()
    if not cleaned:
        msg = f"{field} must not be blank"
        raise ChecklistValidationError(msg, field=field)
    return cleaned


def build_item(
    name: str,
    *,
    order: int,
    emoji: str | None = DEFAULT_ITEM_EMOJI,
) -> ChecklistItem:
    """Build a new unchecked item with zeroed counters."""
    return ChecklistItem(
        id=new_id(),
        name=clean_name(name, "item name"),
        emoji=emoji,
        is_checked=False,
        order=order,
    )


def build_next_item(
    checklist: Checklist,
    name: str,
    *,
    emoji: str | None = DEFAULT_ITEM_EMOJI,
) -> ChecklistItem:
    """Build an item to append to an existing checklist (``order = len(items)``)."""
    return build_item(name, order=len(checklist.items), emoji=emoji)


def build_checklist(
    name: str,
    *,
    emoji: str = DEFAULT_CHECKLIST_EMOJI,
    color: str = SceneColor.CUSTOM.value,
    items: Iterable[str | tuple[str, str | None]] = (),
    clock: TimeProvider | None = None,
) -> Checklist:
    """Build a new user-created checklist.

    Args:
        name: Checklist name (trimmed, must not be blank)
        emoji: Emoji shown with the name
        color: Hex color string
        items: Item names, or (name, emoji) pairs, in display order
        clock: Time source for the timestamps (default: global provider)

    Returns:
        A custom Checklist whose items are ordered 0..n-1

    Raises:
        ChecklistValidationError: If the name or any item name is blank
    """
    checklist_name = clean_name(name)
    built: list[ChecklistItem] = []
    for index, entry in enumerate(items):
        if isinstance(entry, str):
            built.append(build_item(entry, order=index))
        else:
            item_name, item_emoji = entry
            built.append(build_item(item_name, order=index, emoji=item_emoji))

    now = (clock or get_time_provider()).now()
    return Checklist(
        id=new_id(),
        name=checklist_name,
        emoji=emoji,
        color=color,
        items=tuple(built),
        is_custom=True,
        created_at=now,
        updated_at=now,
    )


def build_history(checklist: Checklist, *, clock: TimeProvider | None = None) -> CheckHistory:
    """Snapshot a checklist run into a history record.

    Unchecked items are recorded as forgotten, by name.
    """
    forgotten = tuple(item.name for item in checklist.items if not item.is_checked)
    return CheckHistory(
        id=new_id(),
        checklist_id=checklist.id,
        checklist_name=checklist.name,
        date=(clock or get_time_provider()).now(),
        total_items=checklist.total_count,
        checked_items=checklist.checked_count,
        forgotten_items=forgotten,
    )
