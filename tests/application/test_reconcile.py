"""
Tests for inbound spreadsheet reconciliation.
"""

from dataclasses import replace
from datetime import timedelta
from unittest.mock import call

import pytest

from clientsync.application.sync import SyncOrchestrator
from clientsync.core.domain import ClientRecord, Platform, Resolution
from clientsync.core.exceptions import (
    AdapterWriteError,
    MissingCorrelationDataError,
    RowNotFoundError,
)
from clientsync.core.ports import SyncConfig


def sheet_version(app: ClientRecord, offset_ms: int, **changes) -> ClientRecord:
    """The row as the spreadsheet holds it, stamped offset_ms after the app record."""
    return replace(
        app,
        primary_id=None,
        tracker_page_id=None,
        tracker_project_url=None,
        last_synced_at=app.last_synced_at + timedelta(milliseconds=offset_ms),
        **changes,
    )


@pytest.fixture
def known_row(manager, synced_client):
    """Wire the mocks so row 5 matches synced_client; returns a setter for the sheet side."""

    def set_sheet(offset_ms: int, **changes) -> ClientRecord:
        sheet = sheet_version(synced_client, offset_ms, **changes)
        manager.spreadsheet.read.return_value = sheet
        return sheet

    manager.primary.find_by_spreadsheet_row.return_value = synced_client
    return set_sheet


# =============================================================================
# Lookup
# =============================================================================


class TestReconcileLookup:
    def test_missing_row(self, orchestrator, manager, audit_sink):
        result = orchestrator.reconcile_inbound(42)

        assert not result.success
        assert isinstance(result.error, RowNotFoundError)
        assert result.error.row_number == 42
        assert result.failed_operation.platform is Platform.SPREADSHEET
        assert manager.mock_calls == [call.spreadsheet.read(42)]
        assert audit_sink.records[0].action == "SHEET_RECONCILE"
        assert audit_sink.records[0].level == "error"

    def test_unknown_row_is_imported(self, orchestrator, manager):
        sheet = ClientRecord(name="New Lead", email="lead@example.com", spreadsheet_row=7)
        manager.spreadsheet.read.return_value = sheet

        result = orchestrator.reconcile_inbound(7)

        assert result.success
        assert result.resolution is Resolution.IMPORTED
        assert result.client.primary_id == "client-1"
        assert manager.mock_calls == [
            call.spreadsheet.read(7),
            call.primary.find_by_spreadsheet_row(7),
            call.primary.find_by_email("lead@example.com"),
            call.primary.create(sheet),
        ]

    def test_unknown_row_without_email(self, orchestrator, manager):
        sheet = ClientRecord(name="New Lead", spreadsheet_row=7)
        manager.spreadsheet.read.return_value = sheet

        orchestrator.reconcile_inbound(7)

        manager.primary.find_by_email.assert_not_called()
        manager.primary.create.assert_called_once_with(sheet)

    def test_row_number_comes_from_the_request(self, orchestrator, manager):
        manager.spreadsheet.read.return_value = ClientRecord(name="New Lead")

        result = orchestrator.reconcile_inbound(9)

        manager.primary.find_by_spreadsheet_row.assert_called_once_with(9)
        assert result.client.spreadsheet_row == 9

    def test_email_fallback_match(self, orchestrator, manager, synced_client):
        sheet = sheet_version(synced_client, 120_000, lead_status="hot")
        manager.spreadsheet.read.return_value = sheet
        manager.primary.find_by_email.return_value = synced_client

        result = orchestrator.reconcile_inbound(5)

        assert result.resolution is Resolution.SHEET_WINS
        manager.primary.create.assert_not_called()
        manager.primary.find_by_email.assert_called_once_with("jane@acme.io")

    def test_match_without_primary_id(self, orchestrator, manager, synced_client):
        manager.spreadsheet.read.return_value = sheet_version(synced_client, 120_000)
        manager.primary.find_by_email.return_value = replace(synced_client, primary_id=None)

        result = orchestrator.reconcile_inbound(5)

        assert isinstance(result.error, MissingCorrelationDataError)
        manager.primary.update.assert_not_called()


# =============================================================================
# Resolution
# =============================================================================


class TestReconcileResolution:
    @pytest.mark.parametrize(
        ("offset_ms", "expected"),
        [
            (60_001, Resolution.SHEET_WINS),
            (-60_001, Resolution.APP_WINS),
            (60_000, Resolution.AMBIGUOUS),
            (59_999, Resolution.AMBIGUOUS),
            (-60_000, Resolution.AMBIGUOUS),
            (1, Resolution.AMBIGUOUS),
            (0, Resolution.IN_SYNC),
        ],
    )
    def test_drift_window(self, orchestrator, known_row, offset_ms, expected):
        known_row(offset_ms)

        result = orchestrator.reconcile_inbound(5)

        assert result.success
        assert result.resolution is expected

    def test_sheet_wins_keeps_app_handles(self, orchestrator, manager, known_row, synced_client):
        known_row(60_001, lead_status="hot")

        result = orchestrator.reconcile_inbound(5)

        [update] = manager.primary.update.call_args_list
        primary_id, merged = update.args
        assert primary_id == "client-1"
        assert merged.lead_status == "hot"
        assert merged.primary_id == "client-1"
        assert merged.tracker_page_id == "1a2b-3c4d"
        assert merged.tracker_project_url == "https://notion.so/1a2b3c4d"
        assert merged.spreadsheet_row == 5
        assert result.client == merged
        manager.spreadsheet.update.assert_not_called()

    def test_app_wins_overwrites_row(self, orchestrator, manager, known_row, synced_client):
        known_row(-60_001, lead_status="stale")

        result = orchestrator.reconcile_inbound(5)

        manager.spreadsheet.update.assert_called_once_with(5, synced_client)
        manager.primary.update.assert_not_called()
        assert result.client == synced_client

    def test_ambiguous_writes_nothing_and_warns(
        self, orchestrator, manager, audit_sink, known_row, caplog
    ):
        known_row(30_000, lead_status="hot")

        with caplog.at_level("WARNING", logger="SyncOrchestrator"):
            result = orchestrator.reconcile_inbound(5)

        assert result.success
        assert result.resolution is Resolution.AMBIGUOUS
        assert result.warnings
        assert "manual review required" in result.warnings[0]
        assert "Row 5" in caplog.text
        manager.primary.update.assert_not_called()
        manager.spreadsheet.update.assert_not_called()

        [record] = audit_sink.records
        assert record.level == "warn"
        assert record.metadata["resolution"] == "ambiguous"

    def test_in_sync_writes_nothing(self, orchestrator, manager, audit_sink, known_row):
        known_row(0)

        result = orchestrator.reconcile_inbound(5)

        assert result.warnings == ()
        manager.primary.update.assert_not_called()
        manager.spreadsheet.update.assert_not_called()
        assert audit_sink.records[0].level == "info"

    def test_missing_timestamps_are_in_sync(self, orchestrator, manager, synced_client):
        manager.primary.find_by_spreadsheet_row.return_value = replace(
            synced_client, last_synced_at=None
        )
        manager.spreadsheet.read.return_value = replace(synced_client, last_synced_at=None)

        assert orchestrator.reconcile_inbound(5).resolution is Resolution.IN_SYNC

    def test_configured_drift_window(self, manager, known_row):
        orchestrator = SyncOrchestrator(
            manager.primary,
            manager.spreadsheet,
            manager.tracker,
            config=SyncConfig(adapter_timeout=None, drift_tolerance_ms=0),
        )
        known_row(1)

        assert orchestrator.reconcile_inbound(5).resolution is Resolution.SHEET_WINS

    def test_write_failure_has_nothing_to_roll_back(self, orchestrator, manager, known_row):
        known_row(-120_000)
        manager.spreadsheet.update.side_effect = RuntimeError("quota")

        result = orchestrator.reconcile_inbound(5)

        assert not result.success
        assert isinstance(result.error, AdapterWriteError)
        assert result.rollback.outcomes == ()
        assert result.completed_operations == ()
