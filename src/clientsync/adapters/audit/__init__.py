"""
Audit sinks - Destinations for workflow audit records.

- InMemoryAuditSink: list-backed, for tests
- JsonlAuditSink: append-only JSON Lines file
- LoggingAuditSink: records on the ``audit`` logger
"""

from clientsync.core.ports.audit_sink import AuditSinkPort
from clientsync.core.ports.config_provider import AuditConfig

from .jsonl import JsonlAuditSink
from .logging_sink import LoggingAuditSink
from .memory import InMemoryAuditSink


def create_audit_sink(config: AuditConfig) -> AuditSinkPort:
    """JSONL sink when a log path is configured, logging otherwise."""
    if config.log_path:
        return JsonlAuditSink(config.log_path)
    return LoggingAuditSink()


__all__ = ["InMemoryAuditSink", "JsonlAuditSink", "LoggingAuditSink", "create_audit_sink"]
