"""
Environment Configuration Provider - Layered configuration.

Precedence, highest first:
1. CLI overrides
2. Environment variables (CLIENTSYNC_*)
3. .env file
4. Config file (.clientsync.yaml / .clientsync.toml)
5. Defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from clientsync.core.exceptions import ConfigError
from clientsync.core.ports.config_provider import AppConfig, ConfigProviderPort

from .file_provider import FileConfigProvider
from .schema import FLAT_KEYS, apply_flat, get_dotted, set_dotted


ENV_PREFIX = "CLIENTSYNC_"


def env_var_name(key: str) -> str:
    return f"{ENV_PREFIX}{key.upper()}"


def parse_env_file(path: Path) -> dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines.

    Blank lines, ``#`` comments and an optional ``export`` prefix are
    accepted; matching surrounding quotes are stripped.
    """
    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export ") :]
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            values[key.strip()] = value
    return values


class EnvironmentConfigProvider(ConfigProviderPort):
    """Configuration from file, .env, environment and CLI, in that order."""

    def __init__(
        self,
        config_file: str | Path | None = None,
        env_file: str | Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ):
        """
        Initialize the provider.

        Args:
            config_file: Explicit config file (auto-detected if omitted)
            env_file: Explicit .env file (``./.env`` if omitted)
            cli_overrides: Flat overrides from command line arguments
        """
        self._file_provider = FileConfigProvider(config_path=config_file)
        self._env_file = Path(env_file) if env_file else None
        self._cli_overrides = cli_overrides or {}
        self._config: AppConfig | None = None
        self._errors: list[str] = []
        self.logger = logging.getLogger("EnvironmentConfigProvider")

    @property
    def name(self) -> str:
        path = self._file_provider.config_file_path
        if path:
            return f"env+file:{path}"
        return "env"

    def load(self) -> AppConfig:
        config = self._file_provider.load()
        self._errors = self._file_provider.load_errors

        dotenv = self._read_dotenv()
        self._errors.extend(apply_flat(config, self._lookup(dotenv), ".env"))
        self._errors.extend(apply_flat(config, self._lookup(os.environ), "environment"))
        self._errors.extend(apply_flat(config, self._cli_overrides, "command line"))

        self._config = config
        return config

    def get(self, key: str, default: Any = None) -> Any:
        if self._config is None:
            self.load()
        return get_dotted(self._config, key, default)

    def set(self, key: str, value: Any) -> None:
        if self._config is None:
            self.load()
        set_dotted(self._config, key, value)

    def validate(self) -> list[str]:
        try:
            config = self.load()
        except ConfigError as e:
            return [f"{e} (set values in a config file or CLIENTSYNC_* environment variables)"]
        return self._errors + config.validate()

    def _read_dotenv(self) -> dict[str, str]:
        path = self._env_file or Path.cwd() / ".env"
        if not path.is_file():
            return {}
        self.logger.debug(f"Reading {path}")
        return parse_env_file(path)

    @staticmethod
    def _lookup(source: Any) -> dict[str, Any]:
        return {
            key: source[env_var_name(key)] for key in FLAT_KEYS if env_var_name(key) in source
        }
