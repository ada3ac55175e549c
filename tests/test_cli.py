"""Tests for the outing CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from outing import __version__
from outing.cli import ExitCode, app

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from click.testing import Result

runner = CliRunner()


@pytest.fixture
def invoke(isolated_env: Path) -> Callable[..., Result]:
    """Invoke the CLI against a throwaway data directory."""
    state_dir = isolated_env / "state"

    def _invoke(*args: str, input: str | None = None) -> Result:  # noqa: A002
        return runner.invoke(app, ["--state-dir", str(state_dir), *args], input=input)

    return _invoke


class TestGlobalOptions:
    """Tests for global options and configuration handling."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_validate_defaults(self, isolated_env: Path) -> None:
        """With no config file, validation passes on defaults."""
        result = runner.invoke(app, ["--verbose", "validate"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Configuration is valid" in result.stdout
        assert "Storage: sqlite" in result.stdout

    def test_validate_bad_config(
        self,
        isolated_env: Path,
        write_config: Callable[..., Path],
    ) -> None:
        """An invalid config exits with the configuration error code."""
        path = write_config({"version": 1, "storage": {"backend": "redis"}})
        result = runner.invoke(app, ["--config", str(path), "validate"])
        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_missing_config_file(self, isolated_env: Path) -> None:
        """An explicit config that does not exist is a configuration error."""
        result = runner.invoke(app, ["--config", str(isolated_env / "nope.yaml"), "lists"])
        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_memory_backend(
        self,
        isolated_env: Path,
        write_config: Callable[..., Path],
    ) -> None:
        """The memory backend works but keeps nothing between runs."""
        path = write_config({"version": 1, "storage": {"backend": "memory"}})

        first = runner.invoke(app, ["--config", str(path), "create", "Beach"])
        second = runner.invoke(app, ["--config", str(path), "lists"])

        assert first.exit_code == 0
        assert second.exit_code == 0
        assert "Beach" not in second.stdout


class TestChecklistCommands:
    """Tests for browsing and editing checklists."""

    def test_lists_shows_built_in_checklists(self, invoke: Callable[..., Result]) -> None:
        """The default dataset is listed on first run."""
        result = invoke("lists")
        assert result.exit_code == 0
        assert "Built-in:" in result.stdout
        assert "Commute" in result.stdout
        assert "Custom:" not in result.stdout

    def test_show_by_name(self, invoke: Callable[..., Result]) -> None:
        """Checklists can be addressed by name."""
        result = invoke("show", "commute")
        assert result.exit_code == 0
        assert "Wallet" in result.stdout
        assert "[ ]" in result.stdout

    def test_show_unknown_checklist(self, invoke: Callable[..., Result]) -> None:
        """Unknown checklists exit with the not-found code."""
        result = invoke("show", "Moon base")
        assert result.exit_code == ExitCode.NOT_FOUND

    def test_toggle_persists(self, invoke: Callable[..., Result]) -> None:
        """A toggled item stays checked in the next run."""
        assert invoke("toggle", "Commute", "Wallet").exit_code == 0

        result = invoke("show", "Commute")

        assert "(1/" in result.stdout
        assert "[x]" in result.stdout

    def test_toggle_unknown_item(self, invoke: Callable[..., Result]) -> None:
        """Unknown items exit with the not-found code."""
        result = invoke("toggle", "Commute", "Jetpack")
        assert result.exit_code == ExitCode.NOT_FOUND

    def test_add_and_remove_item(self, invoke: Callable[..., Result]) -> None:
        """Items can be added and removed."""
        added = invoke("add-item", "Gym", "Padlock", "--emoji", "🔒")
        assert added.exit_code == 0
        assert "Padlock" in invoke("show", "Gym").stdout

        removed = invoke("remove-item", "Gym", "Padlock")
        assert removed.exit_code == 0
        assert "Padlock" not in invoke("show", "Gym").stdout

    def test_add_blank_item(self, invoke: Callable[..., Result]) -> None:
        """Blank item names are invalid input."""
        result = invoke("add-item", "Gym", "   ")
        assert result.exit_code == ExitCode.INVALID_INPUT

    def test_move_item(self, invoke: Callable[..., Result]) -> None:
        """move swaps an item with its neighbour and persists the order."""
        result = invoke("move", "Commute", "Wallet", "up")
        assert result.exit_code == 0
        assert "Moved 'Wallet' up" in result.stdout

        shown = invoke("show", "Commute").stdout
        assert shown.index("Wallet") < shown.index("Smartphone")

    @pytest.mark.parametrize(
        ("item", "direction", "end"),
        [("Smartphone", "up", "top"), ("Handkerchief", "down", "bottom")],
    )
    def test_move_item_at_end(
        self,
        invoke: Callable[..., Result],
        item: str,
        direction: str,
        end: str,
    ) -> None:
        """Moving past either end leaves the list unchanged."""
        before = invoke("show", "Commute").stdout

        result = invoke("move", "Commute", item, direction)

        assert result.exit_code == 0
        assert f"already at the {end}" in result.stdout
        assert invoke("show", "Commute").stdout == before

    def test_move_bad_direction(self, invoke: Callable[..., Result]) -> None:
        """Only up and down are accepted."""
        assert invoke("move", "Commute", "Wallet", "sideways").exit_code != 0

    def test_reset(self, invoke: Callable[..., Result]) -> None:
        """reset unchecks everything."""
        invoke("toggle", "Commute", "Wallet")
        assert invoke("reset", "Commute").exit_code == 0
        assert "[x]" not in invoke("show", "Commute").stdout


class TestCustomChecklists:
    """Tests for create and delete."""

    def test_create_and_delete(self, invoke: Callable[..., Result]) -> None:
        """Custom lists can be created with items and deleted again."""
        created = invoke("create", "Beach", "--emoji", "🏖️", "--item", "Towel", "--item", "Hat")
        assert created.exit_code == 0

        listing = invoke("lists")
        assert "Custom:" in listing.stdout
        assert "Beach (0/2)" in listing.stdout

        assert invoke("delete", "Beach").exit_code == 0
        assert "Beach" not in invoke("lists").stdout

    def test_create_blank_name(self, invoke: Callable[..., Result]) -> None:
        """Blank names are invalid input."""
        assert invoke("create", " ").exit_code == ExitCode.INVALID_INPUT

    def test_delete_built_in(self, invoke: Callable[..., Result]) -> None:
        """Built-in lists are protected."""
        result = invoke("delete", "Commute")
        assert result.exit_code == ExitCode.INVALID_INPUT
        assert "Commute" in invoke("lists").stdout


class TestHistoryCommands:
    """Tests for complete, history and stats."""

    def test_complete_records_history(self, invoke: Callable[..., Result]) -> None:
        """Completing a list adds a history entry and resets it."""
        invoke("toggle", "Gym", "Shoes")

        completed = invoke("complete", "Gym")

        assert completed.exit_code == 0
        assert "Forgotten:" in completed.stdout
        assert "[x]" not in invoke("show", "Gym").stdout

        history = invoke("history")
        assert history.exit_code == 0
        assert "Gym" in history.stdout
        assert "1/5" in history.stdout

    def test_complete_no_reset(self, invoke: Callable[..., Result]) -> None:
        """--no-reset keeps the checked items."""
        invoke("toggle", "Gym", "Shoes")
        invoke("complete", "Gym", "--no-reset")
        assert "[x]" in invoke("show", "Gym").stdout

    def test_empty_history(self, invoke: Callable[..., Result]) -> None:
        """A fresh store has no history."""
        result = invoke("history")
        assert result.exit_code == 0
        assert "No history yet." in result.stdout

    def test_stats(self, invoke: Callable[..., Result]) -> None:
        """stats summarizes completed runs."""
        invoke("complete", "Commute")

        result = invoke("stats")

        assert result.exit_code == 0
        assert "Total checks: 1" in result.stdout
        assert "Perfect checks: 0 (0%)" in result.stdout
        assert "Most forgotten:" in result.stdout
        assert "Commute (1)" in result.stdout

    def test_clear_history(self, invoke: Callable[..., Result]) -> None:
        """clear-history empties the history only."""
        invoke("complete", "Commute")
        assert invoke("clear-history").exit_code == 0
        assert "No history yet." in invoke("history").stdout
        assert "Commute" in invoke("lists").stdout


class TestSettingsCommands:
    """Tests for settings and reset-data."""

    def test_show_defaults(self, invoke: Callable[..., Result]) -> None:
        """Settings are printed with their wire names."""
        result = invoke("settings")
        assert result.exit_code == 0
        assert "defaultReminderTime: 08:00" in result.stdout
        assert "hapticFeedback: true" in result.stdout

    def test_update(self, invoke: Callable[..., Result]) -> None:
        """KEY=VALUE pairs are merged into the settings."""
        result = invoke("settings", "hapticFeedback=false", "theme=dark")

        assert result.exit_code == 0
        assert "hapticFeedback: false" in result.stdout
        assert "theme: dark" in result.stdout
        assert "notificationsEnabled: true" in invoke("settings").stdout

    @pytest.mark.parametrize(
        "assignment",
        ["theme=sepia", "volume=11", "defaultReminderTime=9am", "novalue"],
    )
    def test_invalid_update(self, invoke: Callable[..., Result], assignment: str) -> None:
        """Bad keys or values are invalid input."""
        assert invoke("settings", assignment).exit_code == ExitCode.INVALID_INPUT

    def test_reset_data_keeps_settings(self, invoke: Callable[..., Result]) -> None:
        """reset-data restores defaults but keeps settings."""
        invoke("settings", "theme=light")
        invoke("create", "Beach")

        result = invoke("reset-data", input="y\n")

        assert result.exit_code == 0
        assert "Beach" not in invoke("lists").stdout
        assert "theme: light" in invoke("settings").stdout

    def test_reset_data_aborted(self, invoke: Callable[..., Result]) -> None:
        """Declining the confirmation changes nothing."""
        invoke("create", "Beach")
        result = invoke("reset-data", input="n\n")
        assert result.exit_code != 0
        assert "Beach" in invoke("lists").stdout
