"""
Audit Sink Port - Where workflow outcomes are recorded.

The orchestrator appends one record per workflow completion and one per
failed rollback. Sinks are fire-and-forget: the orchestrator catches and
logs anything a sink raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


AUDIT_LEVELS = ("debug", "info", "warn", "error")


@dataclass(frozen=True)
class AuditRecord:
    """One audit log entry."""

    action: str
    level: str = "info"
    metadata: dict[str, Any] = field(default_factory=dict)
    actor_id: str = "SYSTEM"
    actor_name: str = "Sync Orchestrator"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    id: str = field(default_factory=lambda: f"sync_{uuid4().hex[:12]}")

    def __post_init__(self) -> None:
        if self.level not in AUDIT_LEVELS:
            raise ValueError(f"Unknown audit level: {self.level}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "action": self.action,
            "metadata": self.metadata,
            "level": self.level,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditRecord:
        return cls(
            action=data["action"],
            level=data.get("level", "info"),
            metadata=data.get("metadata", {}),
            actor_id=data.get("actor_id", "SYSTEM"),
            actor_name=data.get("actor_name", "Sync Orchestrator"),
            timestamp=data["timestamp"],
            id=data["id"],
        )


class AuditSinkPort(ABC):
    """Destination for audit records."""

    @abstractmethod
    def append(self, record: AuditRecord) -> None:
        ...
