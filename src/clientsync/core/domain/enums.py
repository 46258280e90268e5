"""
Domain enums - platforms, actions and reconciliation outcomes.
"""

from __future__ import annotations

from enum import Enum


class Platform(Enum):
    """External system of record that holds a copy of a client."""

    PRIMARY = "primary"
    SPREADSHEET = "spreadsheet"
    TRACKER = "tracker"

    @property
    def display_name(self) -> str:
        return {
            Platform.PRIMARY: "Primary store",
            Platform.SPREADSHEET: "Spreadsheet",
            Platform.TRACKER: "Project tracker",
        }[self]


class SyncAction(Enum):
    """Kind of write performed against a platform."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Resolution(Enum):
    """Outcome of reconciling an inbound spreadsheet edit."""

    IMPORTED = "imported"  # no app-side match; created in the primary store
    SHEET_WINS = "sheet_wins"
    APP_WINS = "app_wins"
    IN_SYNC = "in_sync"  # identical timestamps
    AMBIGUOUS = "ambiguous"  # both edited within the drift window


class RollbackStatus(Enum):
    """Outcome of one compensating action."""

    ROLLED_BACK = "rolled_back"
    FAILED = "failed"
    MANUAL = "manual"  # platform cannot undo; operator must clean up

    @property
    def needs_attention(self) -> bool:
        return self is not RollbackStatus.ROLLED_BACK


class WorkflowKind(Enum):
    """The three workflows exposed by the orchestrator."""

    CREATE = "create"
    UPDATE = "update"
    RECONCILE = "reconcile"

    @property
    def audit_action(self) -> str:
        return {
            WorkflowKind.CREATE: "CLIENT_CREATION_SYNC",
            WorkflowKind.UPDATE: "CLIENT_UPDATE_SYNC",
            WorkflowKind.RECONCILE: "SHEET_RECONCILE",
        }[self]
