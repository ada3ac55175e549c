"""Tests for configuration loading and discovery."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import pytest

from outing.config import (
    Config,
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    EnvironmentVariableError,
    StorageBackend,
    discover_config_path,
    load_config,
)
from outing.config.loader import expand_env_vars
from outing.paths import get_default_config_path, get_default_store_path

if TYPE_CHECKING:
    from collections.abc import Callable


class TestDiscovery:
    """Tests for config file discovery order."""

    def test_nothing_found_uses_defaults(self, isolated_env: Path) -> None:
        """Without any config file the defaults apply."""
        assert discover_config_path() is None

        config = load_config()

        assert config == Config()
        assert config.storage.backend == StorageBackend.SQLITE
        assert config.storage.get_path() == get_default_store_path()
        assert config.storage.get_path() == isolated_env / "data" / "outing" / "outing.db"

    def test_explicit_path_wins(
        self,
        isolated_env: Path,
        write_config: Callable[..., Path],
        minimal_config: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """--config beats the environment variable and the cwd file."""
        explicit = write_config(minimal_config, "explicit.yaml")
        write_config(minimal_config, "outing.yaml")
        monkeypatch.setenv("OUTING_CONFIG", str(write_config(minimal_config, "env.yaml")))

        assert discover_config_path(explicit) == explicit.resolve()

    def test_env_var_beats_cwd(
        self,
        isolated_env: Path,
        write_config: Callable[..., Path],
        minimal_config: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """$OUTING_CONFIG is used before ./outing.yaml."""
        write_config(minimal_config, "outing.yaml")
        env_path = write_config(minimal_config, "env.yaml")
        monkeypatch.setenv("OUTING_CONFIG", str(env_path))

        assert discover_config_path() == env_path.resolve()

    def test_cwd_beats_xdg(
        self,
        isolated_env: Path,
        write_config: Callable[..., Path],
        minimal_config: dict[str, Any],
    ) -> None:
        """./outing.yaml is used before the XDG config file."""
        xdg_path = get_default_config_path()
        xdg_path.parent.mkdir(parents=True)
        xdg_path.write_text("version: 1\n")
        cwd_path = write_config(minimal_config, "outing.yaml")

        assert discover_config_path().resolve() == cwd_path.resolve()

        cwd_path.unlink()
        assert discover_config_path() == xdg_path

    def test_missing_explicit_path_raises(self, isolated_env: Path) -> None:
        """An explicitly requested file must exist."""
        with pytest.raises(ConfigNotFoundError):
            load_config(isolated_env / "missing.yaml")

    def test_missing_env_path_raises(
        self,
        isolated_env: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A file named by $OUTING_CONFIG must exist."""
        monkeypatch.setenv("OUTING_CONFIG", str(isolated_env / "missing.yaml"))
        with pytest.raises(ConfigNotFoundError):
            discover_config_path()


class TestLoading:
    """Tests for parsing and validation."""

    def test_sample_config(
        self,
        write_config: Callable[..., Path],
        sample_config: dict[str, Any],
        temp_dir: Path,
    ) -> None:
        """Every section is parsed."""
        config = load_config(write_config(sample_config))

        assert config.storage.get_path() == temp_dir / "store" / "test.db"
        assert config.logging.verbose is True
        assert config.statistics.get_tzinfo() == ZoneInfo("Asia/Tokyo")

    def test_empty_file_is_defaults(self, temp_dir: Path) -> None:
        """An empty YAML file yields the defaults."""
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(path) == Config()

    def test_env_vars_are_expanded(
        self,
        write_config: Callable[..., Path],
        monkeypatch: pytest.MonkeyPatch,
        temp_dir: Path,
    ) -> None:
        """${VAR} references are substituted."""
        monkeypatch.setenv("OUTING_TEST_DIR", str(temp_dir / "from-env"))
        path = write_config({"version": 1, "storage": {"directory": "${OUTING_TEST_DIR}"}})

        config = load_config(path)

        assert config.storage.get_directory() == temp_dir / "from-env"

    def test_missing_env_var_raises(
        self,
        write_config: Callable[..., Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """An unset variable is an error carrying the config path."""
        monkeypatch.delenv("OUTING_UNSET_VAR", raising=False)
        path = write_config({"version": 1, "storage": {"directory": "${OUTING_UNSET_VAR}"}})

        with pytest.raises(EnvironmentVariableError) as exc_info:
            load_config(path)

        assert exc_info.value.var_name == "OUTING_UNSET_VAR"
        assert exc_info.value.path == path.resolve()

    def test_non_strict_expansion_keeps_reference(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Non-strict expansion leaves unknown references alone."""
        monkeypatch.delenv("OUTING_UNSET_VAR", raising=False)
        value = expand_env_vars(["${OUTING_UNSET_VAR}"], strict=False)
        assert value == ["${OUTING_UNSET_VAR}"]

    @pytest.mark.parametrize(
        "config",
        [
            {"version": 2},
            {"version": 1, "unknown": True},
            {"version": 1, "storage": {"backend": "redis"}},
            {"version": 1, "storage": {"filename": "../escape.db"}},
            {"version": 1, "statistics": {"timezone": "Mars/Olympus_Mons"}},
        ],
    )
    def test_invalid_config_raises(
        self,
        write_config: Callable[..., Path],
        config: dict[str, Any],
    ) -> None:
        """Schema violations raise ConfigValidationError with details."""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(config))
        assert exc_info.value.validation_errors

    @pytest.mark.parametrize("content", ["- a\n- b\n", "key: [unclosed\n"])
    def test_bad_yaml_raises(self, temp_dir: Path, content: str) -> None:
        """Non-mapping or malformed YAML is a ConfigError."""
        path = temp_dir / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ConfigError):
            load_config(path)
