"""Injectable clock for timestamps and calendar-day statistics.

The reducer stamps ``updated_at`` and the selectors stamp history records
through a TimeProvider so tests can pin time deterministically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class TimeProvider(Protocol):
    """Protocol for providing current time."""

    def now(self) -> datetime:
        """Get the current UTC time.

        Returns:
            Current timezone-aware datetime.
        """
        ...


class SystemTimeProvider:
    """Default time provider using system clock."""

    def now(self) -> datetime:
        """Get current UTC time from system clock."""
        return datetime.now(UTC)


class FixedTimeProvider:
    """Time provider with a settable time (for testing).

    Example:
        >>> provider = FixedTimeProvider(datetime(2026, 1, 10, 12, 0, 0, tzinfo=UTC))
        >>> provider.now()
        datetime.datetime(2026, 1, 10, 12, 0, tzinfo=datetime.timezone.utc)
    """

    def __init__(self, fixed_time: datetime) -> None:
        self._fixed_time = fixed_time

    def now(self) -> datetime:
        """Return the fixed time."""
        return self._fixed_time

    def set(self, fixed_time: datetime) -> None:
        """Move the fixed time."""
        self._fixed_time = fixed_time


# Global default time provider (can be replaced for testing)
_default_time_provider: TimeProvider = SystemTimeProvider()


def get_time_provider() -> TimeProvider:
    """Get the current default time provider."""
    return _default_time_provider


def set_time_provider(provider: TimeProvider) -> None:
    """Set the default time provider (for testing)."""
    global _default_time_provider  # noqa: PLW0603
    _default_time_provider = provider


def reset_time_provider() -> None:
    """Reset to the default system time provider."""
    global _default_time_provider  # noqa: PLW0603
    _default_time_provider = SystemTimeProvider()
