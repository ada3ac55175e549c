"""XDG Base Directory Specification path utilities.

This module provides XDG-compliant paths for:
- Configuration files ($XDG_CONFIG_HOME/outing, default: ~/.config/outing)
- Persisted app data ($XDG_DATA_HOME/outing, default: ~/.local/share/outing)

Reference: https://specifications.freedesktop.org/basedir-spec/latest/
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# XDG environment variable names
XDG_CONFIG_HOME = "XDG_CONFIG_HOME"
XDG_DATA_HOME = "XDG_DATA_HOME"

# Application name used in XDG directories
APP_NAME = "outing"

# Default file name of the SQLite key-value store
DEFAULT_STORE_FILENAME = "outing.db"


def get_config_home() -> Path:
    """Get the XDG config home directory.

    Returns:
        Path from $XDG_CONFIG_HOME or ~/.config if not set
    """
    xdg_config = os.environ.get(XDG_CONFIG_HOME)
    if xdg_config:
        return Path(xdg_config).expanduser()
    return Path.home() / ".config"


def get_data_home() -> Path:
    """Get the XDG data home directory.

    Returns:
        Path from $XDG_DATA_HOME or ~/.local/share if not set
    """
    xdg_data = os.environ.get(XDG_DATA_HOME)
    if xdg_data:
        return Path(xdg_data).expanduser()
    return Path.home() / ".local" / "share"


def get_config_dir() -> Path:
    """Get the application config directory."""
    return get_config_home() / APP_NAME


def get_data_dir() -> Path:
    """Get the application data directory (where the key-value store lives)."""
    return get_data_home() / APP_NAME


def get_default_config_path() -> Path:
    """Get the default config file path.

    Returns:
        Path to config.yaml in the config directory
    """
    return get_config_dir() / "config.yaml"


def get_default_store_path() -> Path:
    """Get the default key-value store path.

    Returns:
        Path to outing.db in the data directory
    """
    return get_data_dir() / DEFAULT_STORE_FILENAME


def ensure_data_dir(directory: Path | None = None) -> Path:
    """Ensure the data directory exists and return its path.

    Args:
        directory: Explicit directory to create (default: XDG data dir)

    Returns:
        Path to the data directory
    """
    data_dir = directory if directory is not None else get_data_dir()
    if not data_dir.exists():
        logger.debug("Creating data directory: %s", data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
