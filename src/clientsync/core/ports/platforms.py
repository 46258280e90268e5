"""
Platform Ports - Abstract interfaces for the three systems of record.

Implementations:
- InMemoryPrimaryStore / InMemorySpreadsheet / InMemoryProjectTracker
- Network clients for the deployed platforms live outside this package.

Adapters own their network retry and backoff. The orchestrator treats every
call as one atomic unit that either returns or raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from clientsync.core.domain.entities import ClientRecord


@dataclass(frozen=True)
class WriteReceipt:
    """
    What a platform returns from a successful create.

    Only the handle relevant to the platform is expected to be set: ``id``
    for the primary store and tracker, ``row_number`` for the spreadsheet.
    """

    id: str | None = None
    row_number: int | None = None
    url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackerItem:
    """A project item in the tracker that is linked to a client."""

    page_id: str
    client_name: str
    url: str | None = None


class PrimaryStorePort(ABC):
    """Relational system of record for clients."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def create(self, client: ClientRecord) -> WriteReceipt:
        """
        Insert a client.

        Returns:
            Receipt whose ``id`` is the new primary id.
        """
        ...

    @abstractmethod
    def update(self, primary_id: str, client: ClientRecord) -> None:
        """Overwrite the stored client with ``client``."""
        ...

    @abstractmethod
    def soft_delete(self, primary_id: str) -> None:
        """Archive a client. Handles are never reused afterwards."""
        ...

    @abstractmethod
    def find_by_spreadsheet_row(self, row_number: int) -> ClientRecord | None:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> ClientRecord | None:
        ...


class SpreadsheetPort(ABC):
    """Row-addressed spreadsheet ledger."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def create(self, client: ClientRecord) -> WriteReceipt:
        """
        Append a row for the client.

        Returns:
            Receipt whose ``row_number`` addresses the new row.
        """
        ...

    @abstractmethod
    def update(self, row_number: int, client: ClientRecord) -> None:
        ...

    @abstractmethod
    def delete(self, row_number: int) -> None:
        ...

    @abstractmethod
    def read(self, row_number: int) -> ClientRecord | None:
        """
        Read a row back as a client.

        The returned record carries ``spreadsheet_row`` and
        ``last_synced_at`` but never the primary or tracker handles.
        """
        ...


class ProjectTrackerPort(ABC):
    """Project-tracking workspace holding items linked to clients."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def create_linked_item(self, client: ClientRecord) -> WriteReceipt:
        """
        Create a project item for the client.

        Returns:
            Receipt whose ``id`` is the page id and, when known, ``url``.
        """
        ...

    @abstractmethod
    def list_linked_items(self, primary_id: str) -> list[TrackerItem]:
        ...

    @abstractmethod
    def rename_item(self, page_id: str, client_name: str) -> None:
        """Set the client name shown on one item."""
        ...


@dataclass(frozen=True)
class PlatformSet:
    """The three ports a saga writes to, passed to compensations at run time."""

    primary: PrimaryStorePort
    spreadsheet: SpreadsheetPort
    tracker: ProjectTrackerPort
