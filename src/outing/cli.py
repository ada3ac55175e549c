"""CLI entry point for Outing Checklist.

This module provides the Typer-based CLI with commands:
- outing lists / show: Browse checklists and their items
- outing toggle / add-item / remove-item / move / reset: Edit a checklist
- outing complete: Record a run into the history
- outing create / delete: Manage custom checklists
- outing history / stats: Review past runs
- outing settings: Show or change application settings
- outing reset-data / clear-history: Start over
- outing validate: Validate configuration

Exit codes:
- 0: Success
- 1: Configuration error
- 2: Checklist or item not found
- 3: Invalid input
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, TypeVar

import typer
from pydantic import ValidationError

from outing import __version__
from outing.config import load_config
from outing.config.loader import ConfigError
from outing.config.schema import StorageBackend
from outing.errors import BuiltInChecklistError, ChecklistValidationError
from outing.logging import configure_logging, get_logger
from outing.selectors import (
    reset_to_defaults,
    use_checklist,
    use_checklists,
    use_history,
    use_settings,
    use_statistics,
)
from outing.state import AppStore, PersistenceGateway
from outing.state.builders import (
    DEFAULT_CHECKLIST_EMOJI,
    DEFAULT_ITEM_EMOJI,
    build_checklist,
    build_next_item,
)
from outing.state.defaults import SceneColor
from outing.statistics import percent
from outing.storage import SqliteStorage, open_storage

if TYPE_CHECKING:
    from collections.abc import Callable

    from outing.config.schema import Config
    from outing.state.models import AppState, Checklist, ChecklistItem

T = TypeVar("T")


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    NOT_FOUND = 2
    INVALID_INPUT = 3


class Direction(str, Enum):
    """Direction for the move command."""

    UP = "up"
    DOWN = "down"


@dataclass
class CliOptions:
    """Global options shared by every command."""

    config: Path | None = None
    state_dir: Path | None = None
    verbose: bool = False


app = typer.Typer(
    name="outing",
    help="Outing Checklist - never leave without your essentials.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"outing {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file.",
        ),
    ] = None,
    state_dir: Annotated[
        Path | None,
        typer.Option(
            "--state-dir",
            help="Data directory path (overrides storage.directory).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Outing Checklist - never leave without your essentials."""
    ctx.obj = CliOptions(config=config, state_dir=state_dir, verbose=verbose)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _error(message: str, code: ExitCode) -> typer.Exit:
    typer.echo(typer.style(f"✗ {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(code)


def _options(ctx: typer.Context) -> CliOptions:
    return ctx.obj if isinstance(ctx.obj, CliOptions) else CliOptions()


def _load_config(options: CliOptions) -> Config:
    """Load configuration, apply CLI overrides and configure logging."""
    try:
        cfg = load_config(options.config)
    except ConfigError as e:
        raise _error(f"Configuration error: {e}", ExitCode.CONFIG_ERROR) from e

    if options.state_dir is not None:
        storage = cfg.storage.model_copy(update={"directory": str(options.state_dir)})
        cfg = cfg.model_copy(update={"storage": storage})

    configure_logging(
        verbose=options.verbose or cfg.logging.verbose,
        json_output=cfg.logging.json_output,
    )
    return cfg


async def _session(cfg: Config, operation: Callable[[AppStore], T]) -> T:
    """Open the store, run ``operation`` against it, and flush pending writes."""
    storage = await open_storage(cfg.storage)
    store = AppStore(PersistenceGateway(storage))
    await store.initialize()
    try:
        return operation(store)
    finally:
        await store.flush()
        if isinstance(storage, SqliteStorage):
            storage.close()


def _run(ctx: typer.Context, operation: Callable[[AppStore], T]) -> T:
    cfg = _load_config(_options(ctx))
    log = get_logger("outing.cli")
    log.debug("Opening store", backend=cfg.storage.backend.value)
    return asyncio.run(_session(cfg, operation))


def _find_checklist(state: AppState, ref: str) -> Checklist:
    """Resolve a checklist by id, case-insensitive name, or unique id prefix."""
    checklist = state.find_checklist(ref)
    if checklist is not None:
        return checklist

    by_name = [c for c in state.checklists if c.name.casefold() == ref.casefold()]
    if len(by_name) == 1:
        return by_name[0]

    by_prefix = [c for c in state.checklists if c.id.startswith(ref)]
    if len(by_prefix) == 1:
        return by_prefix[0]

    raise _error(f"Checklist not found: {ref}", ExitCode.NOT_FOUND)


def _find_item(checklist: Checklist, ref: str) -> ChecklistItem:
    """Resolve an item by id, case-insensitive name, or unique id prefix."""
    item = checklist.find_item(ref)
    if item is not None:
        return item

    by_name = [i for i in checklist.items if i.name.casefold() == ref.casefold()]
    if len(by_name) == 1:
        return by_name[0]

    by_prefix = [i for i in checklist.items if i.id.startswith(ref)]
    if len(by_prefix) == 1:
        return by_prefix[0]

    raise _error(f"Item not found in '{checklist.name}': {ref}", ExitCode.NOT_FOUND)


def _short_id(record_id: str) -> str:
    return record_id[:8]


def _print_checklist(checklist: Checklist) -> None:
    typer.echo(
        typer.style(
            f"{checklist.emoji} {checklist.name} "
            f"({checklist.checked_count}/{checklist.total_count})",
            bold=True,
        )
    )
    typer.echo("─" * 40)
    if not checklist.items:
        typer.echo("  (no items)")
    for item in checklist.sorted_items():
        mark = typer.style("[x]", fg=typer.colors.GREEN) if item.is_checked else "[ ]"
        emoji = f"{item.emoji} " if item.emoji else ""
        typer.echo(f"  {mark} {emoji}{item.name}  ({_short_id(item.id)})")
    if checklist.is_complete:
        typer.echo(typer.style("✓ Ready to go!", fg=typer.colors.GREEN))


# -----------------------------------------------------------------------------
# Browsing
# -----------------------------------------------------------------------------


@app.command("lists")
def list_checklists(ctx: typer.Context) -> None:
    """List all checklists with their progress."""

    def operation(store: AppStore) -> None:
        checklists = use_checklists(store)
        for title, group in (("Built-in", checklists.built_in), ("Custom", checklists.custom)):
            if not group:
                continue
            typer.echo(typer.style(f"{title}:", bold=True))
            for checklist in group:
                typer.echo(
                    f"  {_short_id(checklist.id)}  {checklist.emoji} {checklist.name} "
                    f"({checklist.checked_count}/{checklist.total_count})"
                )

    _run(ctx, operation)


@app.command()
def show(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
) -> None:
    """Show the items of a checklist."""

    def operation(store: AppStore) -> None:
        _print_checklist(_find_checklist(store.state, checklist_ref))

    _run(ctx, operation)


# -----------------------------------------------------------------------------
# Editing
# -----------------------------------------------------------------------------


@app.command()
def toggle(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
    item_ref: Annotated[str, typer.Argument(help="Item id, id prefix, or name.")],
) -> None:
    """Check or uncheck an item."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        item = _find_item(checklist, item_ref)
        accessor = use_checklist(checklist.id, store)
        accessor.toggle_item(item.id)
        updated = accessor.checklist
        if updated is not None:
            _print_checklist(updated)

    _run(ctx, operation)


@app.command("add-item")
def add_item(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
    name: Annotated[str, typer.Argument(help="Item name.")],
    emoji: Annotated[
        str,
        typer.Option("--emoji", help="Emoji shown with the item."),
    ] = DEFAULT_ITEM_EMOJI,
) -> None:
    """Append a new item to a checklist."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        try:
            item = build_next_item(checklist, name, emoji=emoji)
        except ChecklistValidationError as e:
            raise _error(str(e), ExitCode.INVALID_INPUT) from e
        use_checklist(checklist.id, store).add_item(item)
        typer.echo(
            typer.style(f"✓ Added '{item.name}' to {checklist.name}", fg=typer.colors.GREEN)
        )

    _run(ctx, operation)


@app.command("remove-item")
def remove_item(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
    item_ref: Annotated[str, typer.Argument(help="Item id, id prefix, or name.")],
) -> None:
    """Remove an item from a checklist."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        item = _find_item(checklist, item_ref)
        use_checklist(checklist.id, store).delete_item(item.id)
        typer.echo(
            typer.style(f"✓ Removed '{item.name}' from {checklist.name}", fg=typer.colors.GREEN)
        )

    _run(ctx, operation)


@app.command()
def move(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
    item_ref: Annotated[str, typer.Argument(help="Item id, id prefix, or name.")],
    direction: Annotated[Direction, typer.Argument(help="Move the item up or down.")],
) -> None:
    """Move an item one position up or down."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        item = _find_item(checklist, item_ref)
        if use_checklist(checklist.id, store).move_item(item.id, direction.value):
            typer.echo(
                typer.style(
                    f"✓ Moved '{item.name}' {direction.value} in {checklist.name}",
                    fg=typer.colors.GREEN,
                )
            )
        else:
            end = "top" if direction is Direction.UP else "bottom"
            typer.echo(f"'{item.name}' is already at the {end} of {checklist.name}")

    _run(ctx, operation)


@app.command()
def reset(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
) -> None:
    """Uncheck every item of a checklist."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        use_checklist(checklist.id, store).reset_checklist()
        typer.echo(typer.style(f"✓ Reset {checklist.name}", fg=typer.colors.GREEN))

    _run(ctx, operation)


@app.command()
def complete(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
    reset_after: Annotated[
        bool,
        typer.Option(
            "--reset/--no-reset",
            help="Uncheck all items after recording the run.",
        ),
    ] = True,
) -> None:
    """Record a run of a checklist into the history."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        record = use_checklist(checklist.id, store).complete(reset=reset_after)
        if record is None:
            raise _error(f"Checklist not found: {checklist_ref}", ExitCode.NOT_FOUND)

        if record.is_perfect:
            typer.echo(
                typer.style(
                    f"✓ {record.checklist_name}: all {record.total_items} items packed",
                    fg=typer.colors.GREEN,
                )
            )
        else:
            typer.echo(
                typer.style(
                    f"⚠ {record.checklist_name}: {record.checked_items}/{record.total_items} "
                    "items packed",
                    fg=typer.colors.YELLOW,
                )
            )
            typer.echo(f"  Forgotten: {', '.join(record.forgotten_items)}")

    _run(ctx, operation)


# -----------------------------------------------------------------------------
# Custom checklists
# -----------------------------------------------------------------------------


@app.command()
def create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Checklist name.")],
    emoji: Annotated[
        str,
        typer.Option("--emoji", help="Emoji shown with the name."),
    ] = DEFAULT_CHECKLIST_EMOJI,
    color: Annotated[
        str,
        typer.Option("--color", help="Hex color."),
    ] = SceneColor.CUSTOM.value,
    items: Annotated[
        list[str] | None,
        typer.Option("--item", "-i", help="Item name (repeatable)."),
    ] = None,
) -> None:
    """Create a custom checklist."""

    def operation(store: AppStore) -> None:
        try:
            checklist = build_checklist(
                name,
                emoji=emoji,
                color=color,
                items=items or [],
                clock=store.clock,
            )
        except ChecklistValidationError as e:
            raise _error(str(e), ExitCode.INVALID_INPUT) from e
        use_checklists(store).add_checklist(checklist)
        typer.echo(
            typer.style(
                f"✓ Created {checklist.emoji} {checklist.name} ({_short_id(checklist.id)})",
                fg=typer.colors.GREEN,
            )
        )

    _run(ctx, operation)


@app.command()
def delete(
    ctx: typer.Context,
    checklist_ref: Annotated[str, typer.Argument(help="Checklist id, id prefix, or name.")],
) -> None:
    """Delete a custom checklist. Built-in checklists cannot be deleted."""

    def operation(store: AppStore) -> None:
        checklist = _find_checklist(store.state, checklist_ref)
        try:
            use_checklists(store).delete_custom_checklist(checklist.id)
        except BuiltInChecklistError as e:
            raise _error(str(e), ExitCode.INVALID_INPUT) from e
        typer.echo(typer.style(f"✓ Deleted {checklist.name}", fg=typer.colors.GREEN))

    _run(ctx, operation)


# -----------------------------------------------------------------------------
# History and statistics
# -----------------------------------------------------------------------------


@app.command()
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum entries to show.", min=1),
    ] = 10,
) -> None:
    """Show recent checklist runs, newest first."""

    def operation(store: AppStore) -> None:
        entries = use_history(store).history[:limit]
        if not entries:
            typer.echo("No history yet.")
            return

        typer.echo(typer.style(f"History ({len(entries)} entries)", bold=True))
        typer.echo("─" * 60)
        for entry in entries:
            mark = (
                typer.style("✓", fg=typer.colors.GREEN)
                if entry.is_perfect
                else typer.style("⚠", fg=typer.colors.YELLOW)
            )
            when = entry.date.astimezone().strftime("%Y-%m-%d %H:%M")
            typer.echo(
                f"{mark} {when}  {entry.checklist_name}  "
                f"{entry.checked_items}/{entry.total_items}"
            )
            if entry.forgotten_items:
                typer.echo(f"    Forgotten: {', '.join(entry.forgotten_items)}")

    _run(ctx, operation)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show statistics over the check history."""
    cfg = _load_config(_options(ctx))
    tz = cfg.statistics.get_tzinfo()

    def operation(store: AppStore) -> None:
        result = use_statistics(store, tz=tz)
        rate = percent(result.perfect_checks, result.total_checks)

        typer.echo(typer.style("Statistics", bold=True))
        typer.echo("─" * 40)
        typer.echo(f"  Total checks: {result.total_checks}")
        typer.echo(f"  Perfect checks: {result.perfect_checks} ({rate}%)")

        typer.echo()
        typer.echo(typer.style("Last 7 days:", bold=True))
        for day in result.weekly_data:
            bar = "█" * day.checks
            typer.echo(f"  {day.label:>5}  {bar:<10} {day.checks} ({day.perfect_rate}% perfect)")

        if result.forgotten_items_ranking:
            typer.echo()
            typer.echo(typer.style("Most forgotten:", bold=True))
            for rank, entry in enumerate(result.forgotten_items_ranking, start=1):
                typer.echo(f"  {rank:>2}. {entry.item_name} ({entry.count})")

        if result.checklist_usage_ranking:
            typer.echo()
            typer.echo(typer.style("Most used checklists:", bold=True))
            for rank, usage in enumerate(result.checklist_usage_ranking, start=1):
                typer.echo(f"  {rank:>2}. {usage.checklist_name} ({usage.count})")

    asyncio.run(_session(cfg, operation))


# -----------------------------------------------------------------------------
# Settings and data management
# -----------------------------------------------------------------------------


def _parse_assignments(assignments: list[str]) -> dict[str, str]:
    changes: dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise _error(f"Expected KEY=VALUE, got: {assignment}", ExitCode.INVALID_INPUT)
        changes[key.strip()] = value.strip()
    return changes


@app.command()
def settings(
    ctx: typer.Context,
    assignments: Annotated[
        list[str] | None,
        typer.Argument(
            help="Settings to change, e.g. hapticFeedback=false theme=dark.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Show settings, or change them with KEY=VALUE pairs."""
    changes = _parse_assignments(assignments or [])

    def operation(store: AppStore) -> None:
        accessor = use_settings(store)
        if changes:
            try:
                accessor.update_settings(**changes)
            except ValidationError as e:
                raise _error(f"Invalid settings: {e}", ExitCode.INVALID_INPUT) from e

        current = accessor.settings.model_dump(by_alias=True)
        typer.echo(typer.style("Settings:", bold=True))
        for key, value in current.items():
            shown = str(value).lower() if isinstance(value, bool) else value
            typer.echo(f"  {key}: {shown}")

    _run(ctx, operation)


@app.command("reset-data")
def reset_data(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Restore the built-in checklists and erase the history. Settings are kept."""
    if not yes:
        typer.confirm("Erase all checklists and history?", abort=True)

    def operation(store: AppStore) -> None:
        reset_to_defaults(store)
        typer.echo(typer.style("✓ Restored default checklists", fg=typer.colors.GREEN))

    _run(ctx, operation)


@app.command("clear-history")
def clear_history(ctx: typer.Context) -> None:
    """Erase the check history. Checklists and settings are kept."""

    def operation(store: AppStore) -> None:
        use_history(store).clear_history()
        typer.echo(typer.style("✓ History cleared", fg=typer.colors.GREEN))

    _run(ctx, operation)


@app.command()
def validate(ctx: typer.Context) -> None:
    """Validate configuration without opening the store.

    Loads the configuration file, expands environment variables,
    and validates against the schema. Exits with code 0 if valid,
    or code 1 if there are errors.
    """
    options = _options(ctx)
    cfg = _load_config(options)
    typer.echo(typer.style("✓ Configuration is valid", fg=typer.colors.GREEN))

    if options.verbose:
        typer.echo("\nConfiguration summary:")
        typer.echo(f"  Version: {cfg.version}")
        typer.echo(f"  Storage: {cfg.storage.backend.value}")
        if cfg.storage.backend == StorageBackend.SQLITE:
            typer.echo(f"  Database: {cfg.storage.get_path()}")
        typer.echo(f"  Timezone: {cfg.statistics.timezone or 'system'}")

    raise typer.Exit(ExitCode.SUCCESS)


if __name__ == "__main__":
    app()
