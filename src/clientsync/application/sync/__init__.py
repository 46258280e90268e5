"""
Sync Module - Saga orchestration of client writes across platforms.
"""

from .conflict import DEFAULT_DRIFT_TOLERANCE_MS, ConflictDecision, ConflictResolver, decide
from .execution import call_with_timeout, check_cancelled
from .ledger import (
    Compensation,
    DeleteSpreadsheetRow,
    ManualTrackerCleanup,
    OperationLedger,
    RestorePrimary,
    RestoreSpreadsheetRow,
    RestoreTrackerNames,
    RollbackOutcome,
    RollbackReport,
    SoftDeletePrimary,
    SyncOperation,
)
from .locks import EntityLockRegistry
from .orchestrator import FailedOperation, SyncOrchestrator, SyncResult
from .validation import EMAIL_PATTERN, is_valid_email, validate_client


__all__ = [
    "DEFAULT_DRIFT_TOLERANCE_MS",
    "EMAIL_PATTERN",
    "Compensation",
    "ConflictDecision",
    "ConflictResolver",
    "DeleteSpreadsheetRow",
    "EntityLockRegistry",
    "FailedOperation",
    "ManualTrackerCleanup",
    "OperationLedger",
    "RestorePrimary",
    "RestoreSpreadsheetRow",
    "RestoreTrackerNames",
    "RollbackOutcome",
    "RollbackReport",
    "SoftDeletePrimary",
    "SyncOperation",
    "SyncOrchestrator",
    "SyncResult",
    "call_with_timeout",
    "check_cancelled",
    "decide",
    "is_valid_email",
    "validate_client",
]
