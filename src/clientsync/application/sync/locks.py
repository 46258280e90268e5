"""
Per-entity serialization for callers of the orchestrator.

The orchestrator does not synchronize concurrent workflows for the same
client; two racing updates would compensate against each other's writes.
Callers hold the client's lock around each workflow instead:

    >>> locks = EntityLockRegistry()
    >>> with locks.hold(client.primary_id):
    ...     orchestrator.update_client_workflow(old, new)
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class EntityLockRegistry:
    """
    One lock per entity key, created on demand.

    Locks are reference-counted and dropped once no thread holds or waits
    on them, so the registry does not grow with every client ever synced.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._refs: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str, timeout: float | None = None) -> Iterator[None]:
        """
        Hold the lock for key for the duration of the block.

        Args:
            key: Entity key, usually the primary id.
            timeout: Seconds to wait; None waits forever.

        Raises:
            TimeoutError: If the lock was not acquired in time.
        """
        lock = self._checkout(key)
        try:
            acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
            if not acquired:
                raise TimeoutError(f"Timed out waiting for lock on {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)

    def is_locked(self, key: str) -> bool:
        with self._guard:
            lock = self._locks.get(key)
            return lock is not None and lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._refs[key] = self._refs.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]
