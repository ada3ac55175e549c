"""Statistics engine: pure aggregation over the check history.

Rankings are sorted by count, descending; entries with equal counts keep
the order in which they were first encountered in the (newest-first)
history. Weekly buckets use calendar days in a given zone, the system
local zone by default.
"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import TYPE_CHECKING

from outing.clock import get_time_provider
from outing.state.models import (
    ChecklistUsage,
    DailyChecks,
    ForgottenItemCount,
    Statistics,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from outing.state.models import CheckHistory

# Number of entries kept in the forgotten-items ranking
FORGOTTEN_RANKING_SIZE = 10

# Number of calendar days covered by the weekly view
WEEK_DAYS = 7


def _local_date(moment: datetime, tz: tzinfo | None) -> date:
    return moment.astimezone(tz).date()


def percent(part: int, whole: int) -> int:
    """Percentage rounded half up (0 when ``whole`` is 0)."""
    if whole == 0:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def rank_forgotten_items(
    history: Sequence[CheckHistory],
    limit: int = FORGOTTEN_RANKING_SIZE,
) -> tuple[ForgottenItemCount, ...]:
    """Count forgotten item names across all history entries."""
    counts: Counter[str] = Counter()
    for entry in history:
        counts.update(entry.forgotten_items)
    return tuple(
        ForgottenItemCount(item_name=name, count=count)
        for name, count in counts.most_common(limit)
    )


def rank_checklist_usage(history: Sequence[CheckHistory]) -> tuple[ChecklistUsage, ...]:
    """Count completed runs per checklist.

    The name reported for a checklist is the one of its most recent entry,
    which comes first in the newest-first history.
    """
    counts: Counter[str] = Counter()
    names: dict[str, str] = {}
    for entry in history:
        counts[entry.checklist_id] += 1
        names.setdefault(entry.checklist_id, entry.checklist_name)
    return tuple(
        ChecklistUsage(checklist_id=checklist_id, checklist_name=names[checklist_id], count=count)
        for checklist_id, count in counts.most_common()
    )


def weekly_checks(
    history: Sequence[CheckHistory],
    now: datetime,
    tz: tzinfo | None = None,
) -> tuple[DailyChecks, ...]:
    """Bucket history entries into the 7 calendar days ending on ``now``'s day.

    Args:
        history: History entries
        now: Reference moment; its calendar day is the last bucket
        tz: Zone defining calendar days (default: system local zone)

    Returns:
        Seven DailyChecks, oldest first
    """
    by_day: dict[date, list[CheckHistory]] = defaultdict(list)
    for entry in history:
        by_day[_local_date(entry.date, tz)].append(entry)

    today = _local_date(now, tz)
    days: list[DailyChecks] = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        entries = by_day.get(day, [])
        perfect = sum(1 for entry in entries if entry.is_perfect)
        days.append(
            DailyChecks(
                date=day.isoformat(),
                label=f"{day.month}/{day.day}",
                checks=len(entries),
                perfect_rate=percent(perfect, len(entries)),
            )
        )
    return tuple(days)


def compute_statistics(
    history: Sequence[CheckHistory],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Statistics:
    """Aggregate the check history into display statistics.

    Args:
        history: History entries, newest first
        now: Reference moment for the weekly view (default: global time provider)
        tz: Zone defining calendar days (default: system local zone)

    Returns:
        Statistics with totals, rankings and the weekly view
    """
    if now is None:
        now = get_time_provider().now()

    return Statistics(
        total_checks=len(history),
        perfect_checks=sum(1 for entry in history if entry.is_perfect),
        forgotten_items_ranking=rank_forgotten_items(history),
        checklist_usage_ranking=rank_checklist_usage(history),
        weekly_data=weekly_checks(history, now, tz),
    )
