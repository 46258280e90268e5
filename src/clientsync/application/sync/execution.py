"""
Execution guards for adapter calls: timeouts and cooperative cancellation.

Adapter calls are blocking. A timeout runs the call on a worker thread and
stops waiting once the deadline passes; the abandoned call may still finish
in the background, which is why a timed-out step is compensated like any
other failure.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from clientsync.core.domain.enums import Platform, SyncAction
from clientsync.core.exceptions import AdapterTimeoutError, SyncCancelledError


T = TypeVar("T")


def call_with_timeout(
    fn: Callable[[], T],
    timeout: float | None,
    platform: Platform | None = None,
    action: SyncAction | None = None,
) -> T:
    """
    Run fn, raising AdapterTimeoutError if it takes longer than timeout seconds.

    With ``timeout=None`` fn runs inline on the calling thread. Exceptions
    raised by fn propagate unchanged.
    """
    if timeout is None:
        return fn()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clientsync-adapter")
    try:
        future = executor.submit(fn)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            label = f"{platform.value} {action.value}" if platform and action else "adapter call"
            raise AdapterTimeoutError(
                f"{label} timed out after {timeout:g}s",
                platform=platform,
                action=action,
                timeout=timeout,
            ) from None
    finally:
        executor.shutdown(wait=False)


def check_cancelled(cancel_event: threading.Event | None, step: str = "") -> None:
    """Raise SyncCancelledError if the caller has set cancel_event."""
    if cancel_event is not None and cancel_event.is_set():
        where = f" before {step}" if step else ""
        raise SyncCancelledError(f"Workflow cancelled{where}")
