"""
File Configuration Provider - Load configuration from YAML or TOML files.

Supports:
- .clientsync.yaml / .clientsync.yml (YAML)
- .clientsync.toml (TOML)
- pyproject.toml [tool.clientsync] section

Search order (first found wins):
1. Explicit path passed to the provider
2. Current working directory
3. User's home directory
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml

from clientsync.core.exceptions import ConfigError, ConfigFileError
from clientsync.core.ports.config_provider import AppConfig, ConfigProviderPort

from .schema import apply_flat, apply_sections, get_dotted, set_dotted


CONFIG_FILE_NAMES = (
    ".clientsync.yaml",
    ".clientsync.yml",
    ".clientsync.toml",
)


class FileConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads from YAML or TOML files.

    Example YAML:

        sync:
          drift_tolerance_ms: 60000
          adapter_timeout: 30
          actor_id: SYSTEM
        audit:
          log_path: ~/.clientsync/audit.jsonl
        logging:
          level: INFO
          format: json
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ):
        """
        Initialize the file config provider.

        Args:
            config_path: Explicit path to config file (optional)
            cli_overrides: Flat overrides from command line arguments
        """
        self._explicit_path = Path(config_path) if config_path else None
        self._cli_overrides = cli_overrides or {}
        self._config_file: Path | None = None
        self._config: AppConfig | None = None
        self._errors: list[str] = []
        self.logger = logging.getLogger("FileConfigProvider")

    @property
    def name(self) -> str:
        if self._config_file:
            return f"file:{self._config_file}"
        return "file"

    @property
    def config_file_path(self) -> Path | None:
        """Path of the file that was loaded, if any."""
        if self._config is None and self._config_file is None:
            self._config_file = self._find_config_file()
        return self._config_file

    @property
    def load_errors(self) -> list[str]:
        """Problems found by the last load (unknown keys, bad values)."""
        return list(self._errors)

    def load(self) -> AppConfig:
        """
        Load configuration from file, then apply CLI overrides.

        Raises:
            ConfigFileError: If the file is missing or cannot be parsed
        """
        config = AppConfig()
        self._errors = []

        self._config_file = self._find_config_file()
        if self._config_file is not None:
            data = self.read_file(self._config_file)
            self._errors.extend(apply_sections(config, data, self._config_file.name))
            self.logger.debug(f"Loaded configuration from {self._config_file}")
        elif self._explicit_path is not None:
            raise ConfigFileError(
                f"Config file not found: {self._explicit_path}", path=str(self._explicit_path)
            )

        self._errors.extend(apply_flat(config, self._cli_overrides, "command line"))
        self._config = config
        return config

    def get(self, key: str, default: Any = None) -> Any:
        return get_dotted(self._ensure_loaded(), key, default)

    def set(self, key: str, value: Any) -> None:
        set_dotted(self._ensure_loaded(), key, value)

    def validate(self) -> list[str]:
        try:
            config = self.load()
        except ConfigError as e:
            return [str(e)]
        return self._errors + config.validate()

    # -------------------------------------------------------------------------
    # File handling
    # -------------------------------------------------------------------------

    def _ensure_loaded(self) -> AppConfig:
        if self._config is None:
            self.load()
        assert self._config is not None
        return self._config

    def _find_config_file(self) -> Path | None:
        if self._explicit_path is not None:
            return self._explicit_path if self._explicit_path.is_file() else None

        for directory in (Path.cwd(), Path.home()):
            for name in CONFIG_FILE_NAMES:
                candidate = directory / name
                if candidate.is_file():
                    return candidate
            pyproject = directory / "pyproject.toml"
            if directory == Path.cwd() and pyproject.is_file() and self._has_tool_section(pyproject):
                return pyproject
        return None

    def _has_tool_section(self, path: Path) -> bool:
        try:
            return "clientsync" in self._parse_toml(path).get("tool", {})
        except ConfigFileError:
            return False

    @classmethod
    def read_file(cls, path: Path) -> dict[str, Any]:
        """
        Parse a config file into its nested sections.

        Raises:
            ConfigFileError: On syntax errors
        """
        if path.suffix in (".yaml", ".yml"):
            data = cls._parse_yaml(path)
        else:
            data = cls._parse_toml(path)
            if path.name == "pyproject.toml":
                data = data.get("tool", {}).get("clientsync", {})

        if not isinstance(data, dict):
            raise ConfigFileError(f"Config file must contain a mapping: {path}", path=str(path))
        return data

    @staticmethod
    def _parse_yaml(path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Invalid YAML syntax in {path}", path=str(path), cause=e) from e
        except OSError as e:
            raise ConfigFileError(f"Cannot read {path}", path=str(path), cause=e) from e

    @staticmethod
    def _parse_toml(path: Path) -> dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(f"Invalid TOML syntax in {path}", path=str(path), cause=e) from e
        except OSError as e:
            raise ConfigFileError(f"Cannot read {path}", path=str(path), cause=e) from e
