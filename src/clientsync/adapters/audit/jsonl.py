"""
JSON Lines audit sink.

One audit record per line, appended. The file can be tailed while the
process runs and is what ``clientsync audit`` reads.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from pathlib import Path

from clientsync.core.ports.audit_sink import AuditRecord, AuditSinkPort


logger = logging.getLogger("JsonlAuditSink")


class JsonlAuditSink(AuditSinkPort):
    """
    Append audit records to a ``.jsonl`` file.

    Args:
        path: Log file; parent directories are created on first write.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        line = json.dumps(record.to_dict(), default=str, ensure_ascii=False)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    def __iter__(self) -> Iterator[AuditRecord]:
        return self.read(self.path)

    @staticmethod
    def read(path: str | Path) -> Iterator[AuditRecord]:
        """
        Iterate over the records in an audit log.

        Blank lines are skipped. Lines that are not valid records are logged
        and skipped so one torn write does not hide the rest of the log.
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield AuditRecord.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed audit line {path}:{line_no}: {e}")
