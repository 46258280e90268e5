"""
Audit sink that writes through the logging system.
"""

from __future__ import annotations

import logging

from clientsync.core.ports.audit_sink import AuditRecord, AuditSinkPort


LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingAuditSink(AuditSinkPort):
    """
    Emit each record on the ``audit`` logger at the record's level.

    With the JSON formatter the record fields land in the log line's
    context block.
    """

    def __init__(self, logger_name: str = "audit"):
        self.logger = logging.getLogger(logger_name)

    def append(self, record: AuditRecord) -> None:
        self.logger.log(
            LEVELS[record.level],
            f"{record.action} by {record.actor_name}",
            extra={
                "audit_id": record.id,
                "actor_id": record.actor_id,
                "audit_action": record.action,
                "metadata": record.metadata,
            },
        )
