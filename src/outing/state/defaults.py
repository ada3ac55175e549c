"""Built-in seed checklists and default settings.

The default dataset is used whenever no persisted state exists or the
persisted blob is unreadable. Each call generates fresh ids.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import TYPE_CHECKING

from outing.clock import get_time_provider
from outing.state.models import AppSettings, AppState, Checklist, ChecklistItem

if TYPE_CHECKING:
    from collections.abc import Sequence

    from outing.clock import TimeProvider


class SceneColor(str, Enum):
    """Colors of the built-in scenes and of custom lists."""

    COMMUTE = "#4ECDC4"
    TRAVEL = "#FF6B6B"
    GYM = "#45B7D1"
    DATE = "#F8B500"
    BUSINESS = "#2C3E50"
    OUTDOOR = "#2ECC71"
    CUSTOM = "#9B59B6"


# (name, emoji, color, [(item name, item emoji), ...])
DEFAULT_SCENES: list[tuple[str, str, SceneColor, list[tuple[str, str]]]] = [
    (
        "Commute",
        "🏃",
        SceneColor.COMMUTE,
        [
            ("Smartphone", "📱"),
            ("Wallet", "👛"),
            ("Keys", "🔑"),
            ("Transit pass", "💳"),
            ("Earphones", "🎧"),
            ("Handkerchief", "🧻"),
        ],
    ),
    (
        "Travel",
        "✈️",
        SceneColor.TRAVEL,
        [
            ("Passport", "🛂"),
            ("Smartphone", "📱"),
            ("Charger", "🔌"),
            ("Wallet", "👛"),
            ("Change of clothes", "👕"),
            ("Toiletries", "🪥"),
            ("Medicine", "💊"),
            ("Tickets", "🎫"),
        ],
    ),
    (
        "Gym",
        "💪",
        SceneColor.GYM,
        [
            ("Training wear", "👕"),
            ("Shoes", "👟"),
            ("Towel", "🧴"),
            ("Water bottle", "🚰"),
            ("Membership card", "💳"),
        ],
    ),
    (
        "Date",
        "💝",
        SceneColor.DATE,
        [
            ("Smartphone", "📱"),
            ("Wallet", "👛"),
            ("Perfume", "🌸"),
            ("Mints", "🍬"),
            ("Handkerchief", "🧻"),
        ],
    ),
    (
        "Business trip",
        "💼",
        SceneColor.BUSINESS,
        [
            ("Laptop", "💻"),
            ("Business cards", "📇"),
            ("Documents", "📝"),
            ("Charger", "🔌"),
            ("Smartphone", "📱"),
            ("Wallet", "👛"),
        ],
    ),
    (
        "Outdoor",
        "🏕️",
        SceneColor.OUTDOOR,
        [
            ("Hat", "🧢"),
            ("Sunscreen", "🧴"),
            ("Water bottle", "🚰"),
            ("Rain jacket", "🧥"),
            ("First aid kit", "🩹"),
            ("Snacks", "🍙"),
        ],
    ),
]

DEFAULT_SETTINGS = AppSettings()


def new_id() -> str:
    """Generate a new random record identifier."""
    return str(uuid.uuid4())


def _seed_items(entries: Sequence[tuple[str, str]]) -> tuple[ChecklistItem, ...]:
    return tuple(
        ChecklistItem(id=new_id(), name=name, emoji=emoji, order=index)
        for index, (name, emoji) in enumerate(entries)
    )


def create_default_checklists(clock: TimeProvider | None = None) -> list[Checklist]:
    """Create the built-in checklists.

    Args:
        clock: Time source for ``created_at``/``updated_at`` (default: global provider)

    Returns:
        Fresh built-in (non-custom) checklists with unchecked, zero-count items
    """
    now = (clock or get_time_provider()).now()
    return [
        Checklist(
            id=new_id(),
            name=name,
            emoji=emoji,
            color=color.value,
            items=_seed_items(items),
            is_custom=False,
            created_at=now,
            updated_at=now,
        )
        for name, emoji, color, items in DEFAULT_SCENES
    ]


def default_state(
    clock: TimeProvider | None = None,
    settings: AppSettings | None = None,
) -> AppState:
    """Create a fresh state: default checklists, empty history.

    Args:
        clock: Time source for the seeded checklists
        settings: Settings to keep (default: DEFAULT_SETTINGS)

    Returns:
        New AppState
    """
    return AppState(
        checklists=tuple(create_default_checklists(clock)),
        history=(),
        settings=settings if settings is not None else DEFAULT_SETTINGS,
    )
