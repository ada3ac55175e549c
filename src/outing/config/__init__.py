"""Configuration module for Outing Checklist.

This module provides configuration loading, validation, and schema definitions
for the outing application.

Usage:
    from outing.config import load_config, Config

    config = load_config()  # Auto-discovers config file, or defaults
    config = load_config("/path/to/config.yaml")  # Explicit path
"""

from outing.config.loader import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    EnvironmentVariableError,
    discover_config_path,
    load_config,
)
from outing.config.schema import (
    Config,
    LoggingConfig,
    StatisticsConfig,
    StorageBackend,
    StorageConfig,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "EnvironmentVariableError",
    "LoggingConfig",
    "StatisticsConfig",
    "StorageBackend",
    "StorageConfig",
    "discover_config_path",
    "load_config",
]
