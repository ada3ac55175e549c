"""Configuration file loading and environment variable expansion.

This module provides:
- Environment variable expansion for config values (${VAR} syntax)
- YAML config file loading with Pydantic validation
- Config file discovery (--config, $OUTING_CONFIG, ./outing.yaml, XDG config path)

Unlike an explicit --config path, a missing discovered config is not an
error: the application runs on built-in defaults.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from outing.config.schema import Config
from outing.errors import OutingError
from outing.paths import get_default_config_path

logger = logging.getLogger(__name__)

# Environment variable pointing at an explicit config file
CONFIG_ENV_VAR = "OUTING_CONFIG"


class ConfigError(OutingError):
    """Raised when configuration loading or validation fails."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize ConfigError with message and optional path.

        Args:
            message: Error description
            path: Path to the config file that caused the error
        """
        self.path = path
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""


class ConfigValidationError(ConfigError):
    """Raised when config validation fails."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error description
            path: Path to the config file
            validation_errors: List of Pydantic validation error dicts
        """
        self.validation_errors = validation_errors or []
        super().__init__(message, path)


class EnvironmentVariableError(ConfigError):
    """Raised when a referenced environment variable is not set."""

    def __init__(self, var_name: str, path: Path | None = None) -> None:
        self.var_name = var_name
        message = (
            f"Environment variable '{var_name}' is not set. "
            f"Set it or update your config to use a different value."
        )
        super().__init__(message, path)


# Pattern for environment variable references: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def expand_env_vars(value: Any, *, strict: bool = True) -> Any:
    """Expand environment variable references in a value.

    Supports the ${VAR_NAME} syntax inside strings, recursing into
    dicts and lists.

    Args:
        value: The value to expand. Can be a string, list, or dict.
        strict: If True, raise an error for undefined env vars.
                If False, leave the ${VAR} reference unchanged.

    Returns:
        The value with environment variables expanded.

    Raises:
        EnvironmentVariableError: If strict=True and an env var is not set.

    Examples:
        >>> os.environ["OUTING_HOME"] = "/srv/outing"
        >>> expand_env_vars({"storage": {"directory": "${OUTING_HOME}"}})
        {'storage': {'directory': '/srv/outing'}}
    """
    if isinstance(value, str):
        return _expand_string(value, strict=strict)
    if isinstance(value, dict):
        return {k: expand_env_vars(v, strict=strict) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item, strict=strict) for item in value]
    return value


def _expand_string(s: str, *, strict: bool) -> str:
    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            if strict:
                raise EnvironmentVariableError(var_name)
            return match.group(0)
        return value

    return ENV_VAR_PATTERN.sub(replace_match, s)


def discover_config_path(explicit_path: str | Path | None = None) -> Path | None:
    """Discover the config file path using priority order.

    Discovery order:
    1. explicit_path (from --config flag)
    2. $OUTING_CONFIG environment variable
    3. ./outing.yaml (current directory)
    4. XDG config path ($XDG_CONFIG_HOME/outing/config.yaml)

    Args:
        explicit_path: Optional explicit path from CLI --config flag

    Returns:
        Path to the config file, or None if no file exists at any
        discovered location

    Raises:
        ConfigNotFoundError: If an explicit path (flag or env var) is missing
    """
    if explicit_path:
        path = Path(explicit_path).expanduser().resolve()
        if path.exists():
            return path
        msg = f"Config file not found: {path}"
        raise ConfigNotFoundError(msg, path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser().resolve()
        if path.exists():
            return path
        msg = f"Config file from ${CONFIG_ENV_VAR} not found: {path}"
        raise ConfigNotFoundError(msg, path)

    cwd_path = Path.cwd() / "outing.yaml"
    if cwd_path.exists():
        return cwd_path

    default_path = get_default_config_path()
    if default_path.exists():
        return default_path

    logger.debug("No config file found, using defaults")
    return None


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read config file: {e}"
        raise ConfigError(msg, path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML syntax: {e}"
        raise ConfigError(msg, path) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        msg = "Config file must contain a YAML mapping (dictionary), not a list or scalar"
        raise ConfigError(msg, path)

    return data


def load_config(
    path: str | Path | None = None,
    *,
    expand_env: bool = True,
) -> Config:
    """Load and validate configuration from a YAML file.

    This function:
    1. Discovers the config file using the priority order
    2. Parses the YAML content
    3. Expands environment variable references (${VAR})
    4. Validates against the Config schema

    Args:
        path: Optional explicit path to config file. If None, uses discovery.
        expand_env: Whether to expand ${VAR} environment variable references.

    Returns:
        Validated Config object (defaults when no file was discovered)

    Raises:
        ConfigNotFoundError: If an explicitly requested file is missing
        ConfigError: If the file cannot be read or parsed
        EnvironmentVariableError: If a required env var is not set
        ConfigValidationError: If the config fails schema validation
    """
    config_path = discover_config_path(path)
    if config_path is None:
        return Config()

    raw_config = load_yaml(config_path)

    if expand_env:
        try:
            raw_config = expand_env_vars(raw_config, strict=True)
        except EnvironmentVariableError as e:
            e.path = config_path
            raise

    try:
        config = Config.model_validate(raw_config)
    except ValidationError as e:
        errors = e.errors()
        error_msgs: list[str] = []
        for err in errors:
            loc = ".".join(str(loc) for loc in err["loc"])
            error_msgs.append(f"  - {loc}: {err['msg']}")

        message = (
            f"Config validation failed ({len(errors)} error(s)):\n"
            + "\n".join(error_msgs)
        )
        validation_error_dicts = [dict(err) for err in errors]
        raise ConfigValidationError(
            message, path=config_path, validation_errors=validation_error_dicts
        ) from e

    logger.debug("Loaded config from %s", config_path)
    return config
