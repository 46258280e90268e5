"""
Configuration Provider Port - Abstract interface for configuration.

Implementations:
- FileConfigProvider: Load from .clientsync.yaml / .clientsync.toml
- EnvironmentConfigProvider: Layer env vars, .env and CLI overrides on top
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SyncConfig:
    """Configuration for sync workflows."""

    # Conflict window for inbound reconciliation (strict >)
    drift_tolerance_ms: int = 60_000

    # Per adapter call, in seconds. None disables the timeout.
    adapter_timeout: float | None = 30.0

    # Identity written to audit records
    actor_id: str = "SYSTEM"
    actor_name: str = "Sync Orchestrator"

    # Used to build a tracker URL when the tracker does not return one
    tracker_base_url: str = "https://notion.so"


@dataclass
class AuditConfig:
    """Where audit records go."""

    log_path: str | None = None  # JSONL file; None = logging only


@dataclass
class LoggingConfig:
    """Logging output settings."""

    level: str = "INFO"
    format: str = "text"  # text | json
    file: str | None = None


@dataclass
class AppConfig:
    """Complete application configuration."""

    sync: SyncConfig = field(default_factory=SyncConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.sync.drift_tolerance_ms < 0:
            errors.append("drift_tolerance_ms must be >= 0")
        if self.sync.adapter_timeout is not None and self.sync.adapter_timeout <= 0:
            errors.append("adapter_timeout must be positive (or unset to disable)")
        if not self.sync.actor_id:
            errors.append("actor_id must not be empty")
        if not self.sync.tracker_base_url.startswith(("http://", "https://")):
            errors.append("tracker_base_url must be an http(s) URL")
        if self.logging.format not in ("text", "json"):
            errors.append(f"Unknown log format: {self.logging.format}")
        if self.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.logging.level}")

        return errors


class ConfigProviderPort(ABC):
    """
    Abstract interface for configuration providers.

    Configuration can come from various sources:
    - YAML/TOML config files
    - Environment variables and .env files
    - Command line arguments
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """Load configuration from source."""
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a specific configuration value.

        Args:
            key: Configuration key (dot notation supported, e.g. "sync.adapter_timeout")
            default: Default value if not found
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """
        Validate loaded configuration.

        Returns:
            List of validation errors
        """
        ...
