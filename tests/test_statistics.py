"""Tests for the statistics engine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

import pytest
from freezegun import freeze_time

from outing.statistics import (
    FORGOTTEN_RANKING_SIZE,
    compute_statistics,
    percent,
    rank_checklist_usage,
    rank_forgotten_items,
    weekly_checks,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from outing.state.models import CheckHistory


class TestTotals:
    """Tests for total and perfect counts."""

    def test_empty_history(self, frozen_time: datetime) -> None:
        """No history: zeros, empty rankings, seven empty days."""
        stats = compute_statistics((), frozen_time, UTC)

        assert stats.total_checks == 0
        assert stats.perfect_checks == 0
        assert stats.forgotten_items_ranking == ()
        assert stats.checklist_usage_ranking == ()
        assert len(stats.weekly_data) == 7
        assert all(day.checks == 0 and day.perfect_rate == 0 for day in stats.weekly_data)

    def test_perfect_means_nothing_forgotten(
        self,
        frozen_time: datetime,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """Perfect checks are those with an empty forgotten list."""
        history = (
            make_history("h3"),
            make_history("h2", forgotten_items=("Wallet",)),
            make_history("h1"),
        )
        stats = compute_statistics(history, frozen_time, UTC)

        assert stats.total_checks == 3
        assert stats.perfect_checks == 2

    @freeze_time("2026-01-10T15:30:00Z")
    def test_now_defaults_to_current_time(
        self,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """Without an explicit now, the last bucket is today."""
        stats = compute_statistics((make_history("h1"),), tz=UTC)
        assert stats.weekly_data[-1].date == "2026-01-10"
        assert stats.weekly_data[-1].checks == 1


class TestRankings:
    """Tests for forgotten-item and checklist-usage rankings."""

    def test_forgotten_ranking_counts_by_name(
        self,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """Counts aggregate across entries, most forgotten first."""
        history = (
            make_history("h1", forgotten_items=("Keys", "Wallet")),
            make_history("h2", forgotten_items=("Wallet",)),
            make_history("h3", forgotten_items=("Phone", "Wallet")),
        )

        ranking = rank_forgotten_items(history)

        assert [(r.item_name, r.count) for r in ranking] == [
            ("Wallet", 3),
            ("Keys", 1),
            ("Phone", 1),
        ]

    def test_forgotten_ranking_is_truncated(
        self,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """Only the top entries are kept."""
        names = tuple(f"item-{n}" for n in range(FORGOTTEN_RANKING_SIZE + 5))
        ranking = rank_forgotten_items((make_history("h1", forgotten_items=names),))
        assert len(ranking) == FORGOTTEN_RANKING_SIZE

    def test_usage_ranking_uses_most_recent_name(
        self,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """A renamed checklist is reported under its newest name."""
        history = (
            make_history("h3", checklist_id="c1", checklist_name="Holiday"),
            make_history("h2", checklist_id="c2", checklist_name="Gym"),
            make_history("h1", checklist_id="c1", checklist_name="Trip"),
        )

        ranking = rank_checklist_usage(history)

        assert [(u.checklist_id, u.checklist_name, u.count) for u in ranking] == [
            ("c1", "Holiday", 2),
            ("c2", "Gym", 1),
        ]


class TestWeekly:
    """Tests for the seven-day view."""

    def test_days_are_oldest_first_with_labels(self, frozen_time: datetime) -> None:
        """Seven consecutive calendar days ending today."""
        days = weekly_checks((), frozen_time, UTC)

        assert [d.date for d in days] == [
            "2026-01-04",
            "2026-01-05",
            "2026-01-06",
            "2026-01-07",
            "2026-01-08",
            "2026-01-09",
            "2026-01-10",
        ]
        assert days[0].label == "1/4"
        assert days[-1].label == "1/10"

    def test_entries_bucket_by_calendar_day(
        self,
        frozen_time: datetime,
        make_history: Callable[..., CheckHistory],
    ) -> None:
        """Entries land on their day; older entries are ignored."""
        history = (
            make_history("h1", date=frozen_time),
            make_history("h2", date=frozen_time - timedelta(hours=3), forgotten_items=("Keys",)),
            make_history("h3", date=frozen_time - timedelta(days=1)),
            make_history("h4", date=frozen_time - timedelta(days=7)),
        )

        days = weekly_checks(history, frozen_time, UTC)

        assert days[-1].checks == 2
        assert days[-1].perfect_rate == 50
        assert days[-2].checks == 1
        assert days[-2].perfect_rate == 100
        assert sum(d.checks for d in days) == 3

    def test_timezone_defines_the_day(self, make_history: Callable[..., CheckHistory]) -> None:
        """The same instant falls on different days in different zones."""
        now = datetime(2026, 1, 10, 23, 30, tzinfo=UTC)
        history = (make_history("h1", date=now),)

        in_utc = weekly_checks(history, now, UTC)
        in_tokyo = weekly_checks(history, now, ZoneInfo("Asia/Tokyo"))

        assert in_utc[-1].date == "2026-01-10"
        assert in_utc[-1].checks == 1
        assert in_tokyo[-1].date == "2026-01-11"
        assert in_tokyo[-1].checks == 1

    def test_fixed_offset_zone(self, make_history: Callable[..., CheckHistory]) -> None:
        """Any tzinfo works, not only IANA zones."""
        now = datetime(2026, 1, 10, 1, 0, tzinfo=UTC)
        minus_five = timezone(timedelta(hours=-5))

        days = weekly_checks((make_history("h1", date=now),), now, minus_five)

        assert days[-1].date == "2026-01-09"
        assert days[-1].checks == 1


class TestPercent:
    """Tests for percentage rounding."""

    @pytest.mark.parametrize(
        ("part", "whole", "expected"),
        [
            (0, 0, 0),
            (0, 3, 0),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),
            (1, 2, 50),
            (3, 3, 100),
        ],
    )
    def test_rounds_half_up(self, part: int, whole: int, expected: int) -> None:
        """Percentages round to the nearest integer, halves upward."""
        assert percent(part, whole) == expected
