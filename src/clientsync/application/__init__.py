"""
Application Layer - Use cases and orchestration.

This layer contains:
- sync/: Saga orchestrator, operation ledger and conflict resolution
"""

from .sync import (
    ConflictResolver,
    EntityLockRegistry,
    FailedOperation,
    OperationLedger,
    SyncOrchestrator,
    SyncResult,
)


__all__ = [
    "ConflictResolver",
    "EntityLockRegistry",
    "FailedOperation",
    "OperationLedger",
    "SyncOrchestrator",
    "SyncResult",
]
