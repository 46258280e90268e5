"""
Structured logging for clientsync.

Two output formats:
- text: human-readable lines, optionally colored, with ``key=value`` context
- json: one JSON object per line for log aggregation

Anything passed through ``extra=`` ends up in
the ``context`` block of a JSON line. The ledger uses this for
``manual_cleanup_required`` on failed rollbacks.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any


# Attributes every LogRecord carries; everything else came from ``extra``.
RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

NOISY_LOGGERS = ("urllib3", "asyncio", "filelock")


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def __init__(
        self,
        static_fields: dict[str, Any] | None = None,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
    ):
        """
        Args:
            static_fields: Fields added to every line (service, version...).
            include_timestamp: Emit an ISO-8601 UTC ``timestamp``.
            include_level: Emit ``level``.
            include_logger: Emit ``logger``.
            include_location: Emit file, line and function.
        """
        super().__init__()
        self.static_fields = static_fields or {}
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {}

        if self.include_timestamp:
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
            data["timestamp"] = ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"
        if self.include_level:
            data["level"] = record.levelname
        if self.include_logger:
            data["logger"] = record.name

        data["message"] = record.getMessage()
        data.update(self.static_fields)

        if self.include_location:
            data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        context = _context_of(record)
        if context:
            data["context"] = context

        return json.dumps(data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable formatter: ``time LEVEL logger: message key=value``."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[36m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1m\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = True):
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname.ljust(8)
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        line = f"{self.formatTime(record, self.datefmt)} {level} {record.name}: {record.getMessage()}"

        if self.include_context:
            context = _context_of(record)
            if context:
                line += " " + " ".join(f"{k}={v!r}" for k, v in context.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    log_file: str | None = None,
    static_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure the root logger.

    Existing root handlers are replaced. Console output goes to stderr so it
    never mixes with command output on stdout.

    Args:
        level: Root log level.
        log_format: "text" or "json".
        log_file: Also write to this file (never colored).
        static_fields: Extra fields on every JSON line.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    def make_formatter(colors: bool) -> logging.Formatter:
        if log_format == "json":
            return JSONFormatter(static_fields=static_fields)
        return TextFormatter(use_colors=colors)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(make_formatter(sys.stderr.isatty()))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(make_formatter(False))
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
