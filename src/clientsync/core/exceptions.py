"""
Centralized exception hierarchy for clientsync.

All exceptions raised by the sync core derive from ClientSyncError so callers
can catch the whole family with a single clause while still being able to
distinguish validation problems, adapter write failures and configuration
errors.

Hierarchy:
    ClientSyncError
    ├── ValidationError
    │   └── AggregateValidationError
    ├── AdapterWriteError
    │   ├── AdapterTimeoutError
    │   ├── MissingCorrelationDataError
    │   └── RowNotFoundError
    ├── RollbackFailure
    ├── ConflictAmbiguous
    ├── SyncCancelledError
    └── ConfigError
        ├── ConfigFileError
        └── ConfigValidationError
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .domain.enums import Platform, SyncAction


class ClientSyncError(Exception):
    """
    Base exception for all clientsync errors.

    Attributes:
        message: Human readable description.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


# =============================================================================
# Validation
# =============================================================================


class ValidationError(ClientSyncError):
    """A single field failed static validation."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "reason": self.reason}


class AggregateValidationError(ValidationError):
    """One or more fields failed validation; no adapter was called."""

    def __init__(self, errors: list[ValidationError]) -> None:
        fields = ", ".join(e.field for e in errors) or "<none>"
        reasons = "; ".join(e.reason for e in errors)
        super().__init__(fields, reasons)
        self.message = f"Validation failed: {reasons}"
        self.errors = list(errors)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Adapter errors
# =============================================================================


class AdapterWriteError(ClientSyncError):
    """
    A platform adapter call failed.

    Carries the platform and action so operators can tell which system
    rejected the write.
    """

    def __init__(
        self,
        message: str,
        platform: Platform | None = None,
        action: SyncAction | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.platform = platform
        self.action = action

    @property
    def context(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value if self.platform else None,
            "action": self.action.value if self.action else None,
            "message": self.message,
        }


class AdapterTimeoutError(AdapterWriteError):
    """An adapter call did not return within the configured timeout."""

    def __init__(
        self,
        message: str,
        platform: Platform | None = None,
        action: SyncAction | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(message, platform=platform, action=action)
        self.timeout = timeout


class MissingCorrelationDataError(AdapterWriteError):
    """An adapter reported success but omitted a handle the saga needs."""

    def __init__(
        self,
        message: str,
        platform: Platform | None = None,
        action: SyncAction | None = None,
        handle: str = "",
    ) -> None:
        super().__init__(message, platform=platform, action=action)
        self.handle = handle


class RowNotFoundError(AdapterWriteError):
    """The spreadsheet has no data at the requested row."""

    def __init__(self, row_number: int, platform: Platform | None = None) -> None:
        super().__init__(f"No spreadsheet data at row {row_number}", platform=platform)
        self.row_number = row_number


# =============================================================================
# Saga outcome errors
# =============================================================================


class RollbackFailure(ClientSyncError):
    """
    A compensating action failed.

    Never raised out of a workflow: it is logged and audited with
    manual-cleanup metadata while the original failure is reported.
    """

    def __init__(
        self,
        message: str,
        platform: Platform | None = None,
        action: SyncAction | None = None,
        handle: str | int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.platform = platform
        self.action = action
        self.handle = handle


class ConflictAmbiguous(ClientSyncError):
    """Both sides changed within the drift window; a human must review."""

    def __init__(
        self,
        row_number: int,
        app_timestamp: datetime,
        sheet_timestamp: datetime,
        drift_ms: int,
    ) -> None:
        delta_ms = int((sheet_timestamp - app_timestamp).total_seconds() * 1000)
        super().__init__(
            f"Row {row_number} edited on both sides within {drift_ms}ms "
            f"(sheet - app = {delta_ms}ms); manual review required"
        )
        self.row_number = row_number
        self.app_timestamp = app_timestamp
        self.sheet_timestamp = sheet_timestamp
        self.drift_ms = drift_ms


class SyncCancelledError(ClientSyncError):
    """The caller cancelled a workflow; completed steps were compensated."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ClientSyncError):
    """Base for configuration problems."""


class ConfigFileError(ConfigError):
    """A configuration file could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None, cause: BaseException | None = None):
        super().__init__(message, cause=cause)
        self.path = path


class ConfigValidationError(ConfigError):
    """Loaded configuration has invalid values."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid configuration: " + "; ".join(errors))
        self.errors = list(errors)


__all__ = [
    "AdapterTimeoutError",
    "AdapterWriteError",
    "AggregateValidationError",
    "ClientSyncError",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "ConflictAmbiguous",
    "MissingCorrelationDataError",
    "RollbackFailure",
    "RowNotFoundError",
    "SyncCancelledError",
    "ValidationError",
]
