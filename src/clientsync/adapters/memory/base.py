"""
Shared plumbing for the in-memory platforms: call recording, fault
injection and a single lock per platform.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordingPlatform:
    """
    Base for in-memory platforms.

    Attributes:
        calls: ``(method, args)`` tuples in the order the methods were called.
        fail_on: Method name to exception; a call to that method records
            itself and then raises the exception instead of writing.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_on: dict[str, BaseException] = {}
        self.clock = clock or utc_now
        self._lock = threading.RLock()

    def _enter(self, method: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((method, args))
            error = self.fail_on.get(method)
        if error is not None:
            raise error

    def call_names(self) -> list[str]:
        with self._lock:
            return [name for name, _ in self.calls]

    def reset_calls(self) -> None:
        with self._lock:
            self.calls.clear()
