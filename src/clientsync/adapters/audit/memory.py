"""
In-memory audit sink.
"""

from __future__ import annotations

import threading

from clientsync.core.ports.audit_sink import AuditRecord, AuditSinkPort


class InMemoryAuditSink(AuditSinkPort):
    """Keeps every record in a list, in append order."""

    def __init__(self) -> None:
        self.records: list[AuditRecord] = []
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self.records.append(record)

    def by_action(self, action: str) -> list[AuditRecord]:
        with self._lock:
            return [r for r in self.records if r.action == action]

    def clear(self) -> None:
        with self._lock:
            self.records.clear()

    def __len__(self) -> int:
        return len(self.records)
