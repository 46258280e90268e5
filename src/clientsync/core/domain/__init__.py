"""
Domain layer - entities and enums shared by every workflow.
"""

from .entities import (
    EPOCH,
    HANDLE_FIELDS,
    IDENTITY_FIELDS,
    REPLICATED_FIELDS,
    ClientRecord,
    detect_changes,
    parse_timestamp,
    touches_identity,
)
from .enums import Platform, Resolution, RollbackStatus, SyncAction, WorkflowKind


__all__ = [
    "EPOCH",
    "HANDLE_FIELDS",
    "IDENTITY_FIELDS",
    "REPLICATED_FIELDS",
    "ClientRecord",
    "Platform",
    "Resolution",
    "RollbackStatus",
    "SyncAction",
    "WorkflowKind",
    "detect_changes",
    "parse_timestamp",
    "touches_identity",
]
