"""
In-memory platforms - Local implementations of the three platform ports.

Used by the test suite and for dry runs; each platform records its calls
and can be told to fail a given method:

    >>> orchestrator = build_orchestrator()
    >>> orchestrator.tracker.fail_on["create_linked_item"] = RuntimeError("503")
    >>> result = orchestrator.create_client_workflow(ClientRecord(name="Acme"))
    >>> result.success
    False
"""

from clientsync.application.sync import SyncOrchestrator
from clientsync.core.ports.audit_sink import AuditSinkPort
from clientsync.core.ports.config_provider import SyncConfig

from .base import RecordingPlatform
from .primary import InMemoryPrimaryStore
from .spreadsheet import FIRST_DATA_ROW, InMemorySpreadsheet
from .tracker import InMemoryProjectTracker


def build_orchestrator(
    config: SyncConfig | None = None,
    audit_sink: AuditSinkPort | None = None,
) -> SyncOrchestrator:
    """
    Wire a SyncOrchestrator over fresh in-memory platforms.

    The platforms are reachable as ``orchestrator.primary``,
    ``orchestrator.spreadsheet`` and ``orchestrator.tracker``.
    """
    config = config or SyncConfig()
    return SyncOrchestrator(
        primary=InMemoryPrimaryStore(),
        spreadsheet=InMemorySpreadsheet(),
        tracker=InMemoryProjectTracker(base_url=config.tracker_base_url),
        config=config,
        audit_sink=audit_sink,
    )


__all__ = [
    "FIRST_DATA_ROW",
    "InMemoryPrimaryStore",
    "InMemoryProjectTracker",
    "InMemorySpreadsheet",
    "RecordingPlatform",
    "build_orchestrator",
]
