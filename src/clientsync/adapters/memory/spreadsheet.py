"""
In-memory spreadsheet.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.ports.platforms import SpreadsheetPort, WriteReceipt

from .base import Clock, RecordingPlatform


# Row 1 holds the column headers.
FIRST_DATA_ROW = 2


class InMemorySpreadsheet(RecordingPlatform, SpreadsheetPort):
    """
    Row-addressed sheet.

    New rows are appended after the highest row ever issued, so a deleted
    row number is never handed out again.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._rows: dict[int, ClientRecord] = {}
        self._next_row = FIRST_DATA_ROW
        self.logger = logging.getLogger("InMemorySpreadsheet")

    @property
    def name(self) -> str:
        return "memory-spreadsheet"

    def create(self, client: ClientRecord) -> WriteReceipt:
        self._enter("create", client)
        with self._lock:
            row = self._next_row
            self._next_row += 1
            self._rows[row] = replace(client, spreadsheet_row=row, last_synced_at=self.clock())
        self.logger.debug(f"Appended row {row}")
        return WriteReceipt(row_number=row)

    def update(self, row_number: int, client: ClientRecord) -> None:
        self._enter("update", row_number, client)
        with self._lock:
            if row_number not in self._rows:
                raise LookupError(f"Row {row_number} does not exist")
            self._rows[row_number] = replace(
                client, spreadsheet_row=row_number, last_synced_at=self.clock()
            )

    def delete(self, row_number: int) -> None:
        self._enter("delete", row_number)
        with self._lock:
            if self._rows.pop(row_number, None) is None:
                raise LookupError(f"Row {row_number} does not exist")

    def read(self, row_number: int) -> ClientRecord | None:
        self._enter("read", row_number)
        with self._lock:
            return self._rows.get(row_number)

    # -------------------------------------------------------------------------
    # Inspection (not part of the port)
    # -------------------------------------------------------------------------

    def seed(self, client: ClientRecord, row_number: int | None = None) -> ClientRecord:
        """Place a client at a row without stamping it. Not recorded."""
        with self._lock:
            row = row_number or client.spreadsheet_row or self._next_row
            self._next_row = max(self._next_row, row + 1)
            stored = replace(client, spreadsheet_row=row)
            self._rows[row] = stored
        return stored

    @property
    def rows(self) -> dict[int, ClientRecord]:
        with self._lock:
            return dict(self._rows)
