"""
Tests for last-writer-wins conflict resolution.
"""

from datetime import datetime, timedelta, timezone

import pytest

from clientsync.application.sync.conflict import ConflictResolver, decide
from clientsync.core.domain import EPOCH, ClientRecord, Resolution


BASE = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def ms(n: int) -> timedelta:
    return timedelta(milliseconds=n)


# =============================================================================
# decide
# =============================================================================


class TestDecide:
    """Tests for the pure timestamp decision."""

    @pytest.mark.parametrize(
        ("delta_ms", "expected"),
        [
            (59_999, Resolution.AMBIGUOUS),
            (60_000, Resolution.AMBIGUOUS),
            (60_001, Resolution.SHEET_WINS),
            (-59_999, Resolution.AMBIGUOUS),
            (-60_000, Resolution.AMBIGUOUS),
            (-60_001, Resolution.APP_WINS),
        ],
    )
    def test_drift_boundary_is_strict(self, delta_ms, expected):
        assert decide(BASE, BASE + ms(delta_ms), 60_000) is expected

    def test_identical_timestamps_in_sync(self):
        assert decide(BASE, BASE, 60_000) is Resolution.IN_SYNC

    def test_zero_window(self):
        assert decide(BASE, BASE + ms(1), 0) is Resolution.SHEET_WINS
        assert decide(BASE, BASE, 0) is Resolution.IN_SYNC


# =============================================================================
# ConflictResolver
# =============================================================================


class TestConflictResolver:
    """Tests for ConflictResolver."""

    def test_rejects_negative_window(self):
        with pytest.raises(ValueError):
            ConflictResolver(-1)

    def test_window_is_injected(self):
        resolver = ConflictResolver(drift_tolerance_ms=1_000)
        app = ClientRecord(name="A", last_synced_at=BASE)
        sheet = ClientRecord(name="A", last_synced_at=BASE + ms(1_001))
        assert resolver.resolve(app, sheet).resolution is Resolution.SHEET_WINS

    def test_missing_timestamps_count_as_epoch(self):
        resolver = ConflictResolver()
        decision = resolver.resolve(
            ClientRecord(name="A"), ClientRecord(name="A", last_synced_at=BASE)
        )
        assert decision.resolution is Resolution.SHEET_WINS
        assert decision.app_timestamp == EPOCH

    def test_both_missing_in_sync(self):
        decision = ConflictResolver().resolve(ClientRecord(name="A"), ClientRecord(name="A"))
        assert decision.resolution is Resolution.IN_SYNC

    def test_delta_ms(self):
        decision = ConflictResolver().resolve(
            ClientRecord(last_synced_at=BASE), ClientRecord(last_synced_at=BASE - ms(2_500))
        )
        assert decision.delta_ms == -2_500


class TestMergeSheetIntoApp:
    """Handles survive a sheet-wins merge."""

    def test_keeps_app_handles(self):
        app = ClientRecord(
            name="Old",
            primary_id="client-1",
            spreadsheet_row=5,
            tracker_page_id="page-1",
            tracker_project_url="https://notion.so/page1",
        )
        sheet = ClientRecord(name="New", email="new@acme.io", spreadsheet_row=5)

        merged = ConflictResolver.merge_sheet_into_app(app, sheet)

        assert merged.name == "New"
        assert merged.email == "new@acme.io"
        assert merged.primary_id == "client-1"
        assert merged.tracker_page_id == "page-1"
        assert merged.tracker_project_url == "https://notion.so/page1"
        assert merged.spreadsheet_row == 5

    def test_never_nulls_a_handle(self):
        app = ClientRecord(name="A", primary_id="client-1")
        sheet = ClientRecord(name="A", tracker_page_id="page-9", spreadsheet_row=3)

        merged = ConflictResolver.merge_sheet_into_app(app, sheet)

        assert merged.primary_id == "client-1"
        assert merged.tracker_page_id == "page-9"
        assert merged.spreadsheet_row == 3
