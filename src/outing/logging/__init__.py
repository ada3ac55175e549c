"""Logging module for Outing Checklist.

This module provides structured logging with:
- structlog configuration for consistent log formatting
- Structured log events for the store and persistence lifecycle

Usage:
    from outing.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger("outing.cli")
"""

from outing.logging.events import (
    configure_logging,
    get_logger,
    log_action_dispatched,
    log_load_fallback,
    log_save_failed,
    log_state_loaded,
    log_state_saved,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_action_dispatched",
    "log_load_fallback",
    "log_save_failed",
    "log_state_loaded",
    "log_state_saved",
]
