"""Structured logging configuration and store event helpers.

This module provides:
- structlog configuration for JSON or console logging to stderr
- Structured log events for the store lifecycle: loads, load fallbacks,
  dispatched actions, persisted writes and failed writes
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable


def configure_logging(
    verbose: bool = False,
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with output to stderr, including:
    - Timestamp in ISO format
    - Log level
    - Exception formatting

    Args:
        verbose: If True, enable DEBUG level. Otherwise INFO.
        json_output: If True, output JSON. Otherwise use console format.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Library modules log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )

    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def log_action_dispatched(
    action_type: str,
    changed: bool,
    checklists: int,
    history: int,
) -> None:
    """Log a dispatched action and the size of the resulting state.

    Args:
        action_type: Action tag (e.g., 'TOGGLE_ITEM')
        changed: Whether the transition produced a new state
        checklists: Number of checklists after the transition
        history: Number of history entries after the transition
    """
    log = get_logger("outing.store")
    log.debug(
        "action_dispatched",
        action_type=action_type,
        changed=changed,
        checklists=checklists,
        history=history,
    )


def log_state_loaded(
    source: str,
    checklists: int,
    history: int,
) -> None:
    """Log the outcome of the one-shot startup load.

    Args:
        source: Where the state came from ('storage' or 'defaults')
        checklists: Number of loaded checklists
        history: Number of loaded history entries
    """
    log = get_logger("outing.persistence")
    log.info(
        "state_loaded",
        source=source,
        checklists=checklists,
        history=history,
    )


def log_load_fallback(key: str, reason: str, error: str | None = None) -> None:
    """Log a load that fell back to the default dataset.

    Args:
        key: Storage key that was read
        reason: Short machine-readable reason ('corrupt', 'read_failed')
        error: Error message from the failed parse or read
    """
    log = get_logger("outing.persistence")
    log.warning(
        "load_fallback",
        key=key,
        reason=reason,
        error=error,
    )


def log_state_saved(key: str, sequence: int, size_bytes: int) -> None:
    """Log a completed write of the state blob.

    Args:
        key: Storage key written
        sequence: Write sequence stamp of the persisted state
        size_bytes: Size of the serialized blob
    """
    log = get_logger("outing.persistence")
    log.debug(
        "state_saved",
        key=key,
        sequence=sequence,
        size_bytes=size_bytes,
    )


def log_save_failed(key: str, sequence: int, error: str) -> None:
    """Log a failed write. The write is dropped and never retried.

    Args:
        key: Storage key that failed to write
        sequence: Write sequence stamp of the dropped state
        error: Error message from the storage backend
    """
    log = get_logger("outing.persistence")
    log.error(
        "save_failed",
        key=key,
        sequence=sequence,
        error=error,
    )
