"""Shared pytest fixtures for outing tests.

This module provides common fixtures for:
- Temporary config files
- A fixed clock (FixedTimeProvider) and mock time via freezegun
- In-memory and SQLite storage instances
- Sample checklists, items and history records
"""

from __future__ import annotations

import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog
import yaml

from outing.clock import FixedTimeProvider, reset_time_provider, set_time_provider
from outing.state import AppState, AppStore, Checklist, ChecklistItem, PersistenceGateway
from outing.state.models import CheckHistory
from outing.storage import MemoryStorage, SqliteStorage

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# ============================================================================
# Logging Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    """Drop any structlog configuration bound to a test's captured stream."""
    yield
    structlog.reset_defaults()


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def frozen_time() -> datetime:
    """Return a fixed datetime for deterministic tests.

    Use with freezegun's freeze_time decorator:

        @freeze_time("2026-01-10T15:30:00Z")
        def test_something(frozen_time):
            assert datetime.now(UTC) == frozen_time
    """
    return datetime(2026, 1, 10, 15, 30, 0, tzinfo=UTC)


@pytest.fixture
def clock(frozen_time: datetime) -> Generator[FixedTimeProvider, None, None]:
    """Install a FixedTimeProvider as the global time provider.

    Yields:
        The provider (call ``.set()`` to move time)
    """
    provider = FixedTimeProvider(frozen_time)
    set_time_provider(provider)
    yield provider
    reset_time_provider()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_env(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG dirs and the working directory at a temp dir.

    Ensures no real config file or data file is discovered.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(temp_dir / "data"))
    monkeypatch.delenv("OUTING_CONFIG", raising=False)
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid configuration dictionary."""
    return {"version": 1}


@pytest.fixture
def sample_config(temp_dir: Path) -> dict[str, Any]:
    """Return a sample configuration with every section set."""
    return {
        "version": 1,
        "storage": {
            "backend": "sqlite",
            "directory": str(temp_dir / "store"),
            "filename": "test.db",
        },
        "logging": {
            "verbose": True,
            "json_output": False,
        },
        "statistics": {
            "timezone": "Asia/Tokyo",
        },
    }


@pytest.fixture
def write_config(temp_dir: Path) -> Callable[..., Path]:
    """Factory fixture to write config files.

    Args:
        config: Configuration dictionary
        filename: Name of the config file (default: config.yaml)

    Returns:
        Path to the written config file
    """

    def _write(config: dict[str, Any], filename: str = "config.yaml") -> Path:
        path = temp_dir / filename
        with path.open("w") as f:
            yaml.safe_dump(config, f)
        return path

    return _write


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Return an empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def test_db_path(temp_dir: Path) -> Path:
    """Return path for a test database file."""
    return temp_dir / "test_store.db"


@pytest.fixture
def sqlite_storage(test_db_path: Path) -> Generator[SqliteStorage, None, None]:
    """Create a SqliteStorage for testing.

    Yields:
        Initialized SqliteStorage instance (closed after test)
    """
    storage = SqliteStorage(test_db_path)
    yield storage
    storage.close()


@pytest.fixture
def gateway(memory_storage: MemoryStorage, clock: FixedTimeProvider) -> PersistenceGateway:
    """Return a persistence gateway over the in-memory storage."""
    return PersistenceGateway(memory_storage, clock=clock)


@pytest.fixture
def store(gateway: PersistenceGateway, clock: FixedTimeProvider) -> AppStore:
    """Return a store that has not been initialized yet."""
    return AppStore(gateway, clock=clock)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_item() -> Callable[..., ChecklistItem]:
    """Factory fixture for checklist items."""

    def _make(item_id: str, name: str | None = None, **fields: Any) -> ChecklistItem:
        return ChecklistItem(id=item_id, name=name or item_id.title(), **fields)

    return _make


@pytest.fixture
def sample_checklist(
    frozen_time: datetime,
    make_item: Callable[..., ChecklistItem],
) -> Checklist:
    """Return a custom checklist 'c1' with items a (Wallet), b (Keys), c (Phone)."""
    return Checklist(
        id="c1",
        name="Trip",
        emoji="✈️",
        color="#FF6B6B",
        items=(
            make_item("a", "Wallet", order=0),
            make_item("b", "Keys", order=1),
            make_item("c", "Phone", order=2),
        ),
        is_custom=True,
        created_at=frozen_time,
        updated_at=frozen_time,
    )


@pytest.fixture
def sample_state(sample_checklist: Checklist) -> AppState:
    """Return a state holding only the sample checklist."""
    return AppState(checklists=(sample_checklist,))


@pytest.fixture
def make_history(frozen_time: datetime) -> Callable[..., CheckHistory]:
    """Factory fixture for history records."""

    def _make(
        history_id: str,
        *,
        checklist_id: str = "c1",
        checklist_name: str = "Trip",
        date: datetime | None = None,
        total_items: int = 3,
        forgotten_items: tuple[str, ...] = (),
    ) -> CheckHistory:
        return CheckHistory(
            id=history_id,
            checklist_id=checklist_id,
            checklist_name=checklist_name,
            date=date or frozen_time,
            total_items=total_items,
            checked_items=total_items - len(forgotten_items),
            forgotten_items=forgotten_items,
        )

    return _make
