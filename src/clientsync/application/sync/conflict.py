"""
Conflict Resolution - Last-writer-wins with a drift window.

Decides which side of an inbound spreadsheet edit wins by comparing the
``last_synced_at`` timestamps of the spreadsheet row and the app record.
Edits closer together than the drift window are never auto-resolved: there
is no field-level merge, a human reviews them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.domain.enums import Resolution


logger = logging.getLogger("ConflictResolver")

DEFAULT_DRIFT_TOLERANCE_MS = 60_000


def decide(app_timestamp: datetime, sheet_timestamp: datetime, drift_tolerance_ms: int) -> Resolution:
    """
    Pick a direction for two timestamped versions.

    The boundary is strict: a difference of exactly ``drift_tolerance_ms``
    is still inside the window.

    Returns:
        SHEET_WINS, APP_WINS, IN_SYNC (identical timestamps) or AMBIGUOUS.
    """
    window = timedelta(milliseconds=drift_tolerance_ms)
    if sheet_timestamp - app_timestamp > window:
        return Resolution.SHEET_WINS
    if app_timestamp - sheet_timestamp > window:
        return Resolution.APP_WINS
    if app_timestamp == sheet_timestamp:
        return Resolution.IN_SYNC
    return Resolution.AMBIGUOUS


@dataclass(frozen=True)
class ConflictDecision:
    """A resolution and the timestamps it was based on."""

    resolution: Resolution
    app_timestamp: datetime
    sheet_timestamp: datetime

    @property
    def delta_ms(self) -> int:
        """sheet - app, in milliseconds."""
        return int((self.sheet_timestamp - self.app_timestamp) / timedelta(milliseconds=1))


class ConflictResolver:
    """
    Resolves inbound spreadsheet edits against the app-side record.

    The drift window is a deployment policy, injected rather than hard-coded.
    """

    def __init__(self, drift_tolerance_ms: int = DEFAULT_DRIFT_TOLERANCE_MS):
        if drift_tolerance_ms < 0:
            raise ValueError("drift_tolerance_ms must be >= 0")
        self.drift_tolerance_ms = drift_tolerance_ms

    def resolve(self, app: ClientRecord, sheet: ClientRecord) -> ConflictDecision:
        """Compare the two versions; missing timestamps count as the epoch."""
        decision = ConflictDecision(
            resolution=decide(
                app.synced_at_or_epoch, sheet.synced_at_or_epoch, self.drift_tolerance_ms
            ),
            app_timestamp=app.synced_at_or_epoch,
            sheet_timestamp=sheet.synced_at_or_epoch,
        )
        logger.debug(
            f"Resolved {decision.resolution.value} (sheet - app = {decision.delta_ms}ms, "
            f"window {self.drift_tolerance_ms}ms)"
        )
        return decision

    @staticmethod
    def merge_sheet_into_app(app: ClientRecord, sheet: ClientRecord) -> ClientRecord:
        """
        Take the spreadsheet's values while keeping the app's handles.

        The primary id always comes from the app record. Other handles come
        from whichever side has one, app first, so a handle is never nulled.
        """
        return replace(
            sheet,
            primary_id=app.primary_id,
            tracker_page_id=app.tracker_page_id or sheet.tracker_page_id,
            tracker_project_url=sheet.tracker_project_url or app.tracker_project_url,
            spreadsheet_row=sheet.spreadsheet_row or app.spreadsheet_row,
        )
