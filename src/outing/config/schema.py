"""Pydantic schema models for configuration.

This module defines the configuration models:
- Config: Top-level configuration container
- StorageConfig: Key-value storage backend settings
- LoggingConfig: Log verbosity and output format
- StatisticsConfig: Calendar settings for the statistics engine
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from outing.paths import DEFAULT_STORE_FILENAME, get_data_dir


class StorageBackend(str, Enum):
    """Key-value storage backend used by the persistence gateway."""

    SQLITE = "sqlite"
    MEMORY = "memory"


class StorageConfig(BaseModel):
    """Key-value storage configuration.

    Attributes:
        backend: Which storage backend to use (default: sqlite)
        directory: Data directory path (default: XDG data dir)
                   Uses $XDG_DATA_HOME/outing (~/.local/share/outing)
        filename: SQLite file name inside the directory
    """

    model_config = ConfigDict(extra="forbid")

    backend: StorageBackend = StorageBackend.SQLITE
    directory: str | None = None
    filename: Annotated[str, Field(min_length=1, max_length=255)] = DEFAULT_STORE_FILENAME

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Reject file names that would escape the data directory."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            msg = "filename must be a plain file name, not a path"
            raise ValueError(msg)
        return v

    def get_directory(self) -> Path:
        """Get the data directory path, expanding ~ if needed."""
        if self.directory:
            return Path(self.directory).expanduser()
        return get_data_dir()

    def get_path(self) -> Path:
        """Get the full path of the SQLite store file."""
        return self.get_directory() / self.filename


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        verbose: Enable DEBUG level logging
        json_output: Render log lines as JSON instead of console format
    """

    model_config = ConfigDict(extra="forbid")

    verbose: bool = False
    json_output: bool = False


class StatisticsConfig(BaseModel):
    """Statistics engine configuration.

    Attributes:
        timezone: IANA zone used to bucket checks into calendar days
                  (default: the system local zone)
    """

    model_config = ConfigDict(extra="forbid")

    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        """Validate the timezone is a known IANA zone name."""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"unknown timezone: {v}"
            raise ValueError(msg) from e
        return v

    def get_tzinfo(self) -> ZoneInfo | None:
        """Return the configured zone, or None for the system local zone."""
        if self.timezone is None:
            return None
        return ZoneInfo(self.timezone)


class Config(BaseModel):
    """Top-level configuration loaded from YAML.

    Attributes:
        version: Schema version (must be 1)
        storage: Key-value storage settings
        logging: Logging settings
        statistics: Statistics engine settings
    """

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    statistics: StatisticsConfig = Field(default_factory=StatisticsConfig)
