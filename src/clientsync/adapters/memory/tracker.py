"""
In-memory project tracker.

Like the real workspace it offers no delete: pages left behind by a failed
create have to be removed by an operator.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.ports.platforms import ProjectTrackerPort, TrackerItem, WriteReceipt

from .base import Clock, RecordingPlatform


class InMemoryProjectTracker(RecordingPlatform, ProjectTrackerPort):
    """Project items keyed by page id, linked to clients by primary id."""

    def __init__(self, base_url: str = "https://notion.so", clock: Clock | None = None) -> None:
        super().__init__(clock)
        self.base_url = base_url.rstrip("/")
        self._items: dict[str, TrackerItem] = {}
        self._links: dict[str, list[str]] = {}
        self.logger = logging.getLogger("InMemoryProjectTracker")

    @property
    def name(self) -> str:
        return "memory-tracker"

    def create_linked_item(self, client: ClientRecord) -> WriteReceipt:
        self._enter("create_linked_item", client)
        item = self._add(client.primary_id, client.display_name)
        self.logger.debug(f"Created page {item.page_id} for {client.primary_id}")
        return WriteReceipt(id=item.page_id, url=item.url)

    def list_linked_items(self, primary_id: str) -> list[TrackerItem]:
        self._enter("list_linked_items", primary_id)
        with self._lock:
            return [self._items[page_id] for page_id in self._links.get(primary_id, [])]

    def rename_item(self, page_id: str, client_name: str) -> None:
        self._enter("rename_item", page_id, client_name)
        with self._lock:
            if page_id not in self._items:
                raise LookupError(f"Page {page_id} does not exist")
            self._items[page_id] = replace(self._items[page_id], client_name=client_name)

    # -------------------------------------------------------------------------
    # Inspection (not part of the port)
    # -------------------------------------------------------------------------

    def link(self, primary_id: str | None, client_name: str) -> TrackerItem:
        """Add a linked item without recording a call."""
        return self._add(primary_id, client_name)

    def get(self, page_id: str) -> TrackerItem | None:
        with self._lock:
            return self._items.get(page_id)

    @property
    def items(self) -> list[TrackerItem]:
        with self._lock:
            return list(self._items.values())

    def _add(self, primary_id: str | None, client_name: str) -> TrackerItem:
        page_id = str(uuid4())
        item = TrackerItem(
            page_id=page_id,
            client_name=client_name,
            url=f"{self.base_url}/{page_id.replace('-', '')}",
        )
        with self._lock:
            self._items[page_id] = item
            if primary_id:
                self._links.setdefault(primary_id, []).append(page_id)
        return item
