"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .audit_sink import AuditRecord, AuditSinkPort
from .config_provider import (
    AppConfig,
    AuditConfig,
    ConfigProviderPort,
    LoggingConfig,
    SyncConfig,
)
from .platforms import (
    PlatformSet,
    PrimaryStorePort,
    ProjectTrackerPort,
    SpreadsheetPort,
    TrackerItem,
    WriteReceipt,
)


__all__ = [
    "AppConfig",
    "AuditConfig",
    "AuditRecord",
    "AuditSinkPort",
    "ConfigProviderPort",
    "LoggingConfig",
    "PlatformSet",
    "PrimaryStorePort",
    "ProjectTrackerPort",
    "SpreadsheetPort",
    "SyncConfig",
    "TrackerItem",
    "WriteReceipt",
]
