"""
clientsync - Keep client records consistent across a primary store,
a spreadsheet and a project tracker.

Writes run as sagas: each completed platform write is recorded with a
compensating action, and a failure undoes the recorded writes in reverse.
"""

from clientsync.application.sync import SyncOrchestrator, SyncResult
from clientsync.core.domain import ClientRecord, Platform, Resolution


__version__ = "1.0.0"

__all__ = [
    "ClientRecord",
    "Platform",
    "Resolution",
    "SyncOrchestrator",
    "SyncResult",
    "__version__",
]
