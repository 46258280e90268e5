"""
In-memory primary store.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.ports.platforms import PrimaryStorePort, WriteReceipt

from .base import Clock, RecordingPlatform


class InMemoryPrimaryStore(RecordingPlatform, PrimaryStorePort):
    """
    Primary store backed by a dict keyed by primary id.

    Writes stamp ``last_synced_at`` with the store's clock. Soft-deleted
    clients stay in the store with ``is_archived`` set and are skipped by
    the finders.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._clients: dict[str, ClientRecord] = {}
        self.logger = logging.getLogger("InMemoryPrimaryStore")

    @property
    def name(self) -> str:
        return "memory-primary"

    def create(self, client: ClientRecord) -> WriteReceipt:
        self._enter("create", client)
        primary_id = str(uuid4())
        with self._lock:
            self._clients[primary_id] = replace(
                client, primary_id=primary_id, last_synced_at=self.clock()
            )
        self.logger.debug(f"Created client {primary_id}")
        return WriteReceipt(id=primary_id)

    def update(self, primary_id: str, client: ClientRecord) -> None:
        self._enter("update", primary_id, client)
        with self._lock:
            if primary_id not in self._clients:
                raise LookupError(f"No client with id {primary_id}")
            self._clients[primary_id] = replace(
                client, primary_id=primary_id, last_synced_at=self.clock()
            )

    def soft_delete(self, primary_id: str) -> None:
        self._enter("soft_delete", primary_id)
        with self._lock:
            if primary_id not in self._clients:
                raise LookupError(f"No client with id {primary_id}")
            self._clients[primary_id] = replace(self._clients[primary_id], is_archived=True)

    def find_by_spreadsheet_row(self, row_number: int) -> ClientRecord | None:
        self._enter("find_by_spreadsheet_row", row_number)
        with self._lock:
            return next(
                (
                    c
                    for c in self._clients.values()
                    if c.spreadsheet_row == row_number and not c.is_archived
                ),
                None,
            )

    def find_by_email(self, email: str) -> ClientRecord | None:
        self._enter("find_by_email", email)
        with self._lock:
            return next(
                (c for c in self._clients.values() if c.email == email and not c.is_archived),
                None,
            )

    # -------------------------------------------------------------------------
    # Inspection (not part of the port)
    # -------------------------------------------------------------------------

    def get(self, primary_id: str) -> ClientRecord | None:
        with self._lock:
            return self._clients.get(primary_id)

    def seed(self, client: ClientRecord) -> ClientRecord:
        """Store a client as-is, assigning an id if it has none. Not recorded."""
        stored = client if client.primary_id else replace(client, primary_id=str(uuid4()))
        with self._lock:
            self._clients[stored.primary_id] = stored
        return stored

    @property
    def clients(self) -> list[ClientRecord]:
        with self._lock:
            return list(self._clients.values())
