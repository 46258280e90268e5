"""
Tests for ClientRecord and change detection.
"""

from datetime import datetime, timedelta, timezone

import pytest

from clientsync.core.domain.entities import (
    EPOCH,
    REPLICATED_FIELDS,
    ClientRecord,
    detect_changes,
    parse_timestamp,
    touches_identity,
)


# =============================================================================
# parse_timestamp
# =============================================================================


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_z_suffix(self):
        ts = parse_timestamp("2024-03-01T10:00:00Z")
        assert ts == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        ts = parse_timestamp("2024-03-01T10:00:00")
        assert ts.tzinfo == timezone.utc

    def test_offset_preserved_as_instant(self):
        ts = parse_timestamp("2024-03-01T12:00:00+02:00")
        assert ts == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert parse_timestamp(value) is None

    def test_datetime_passthrough(self):
        now = datetime.now(timezone.utc)
        assert parse_timestamp(now) is now


# =============================================================================
# ClientRecord
# =============================================================================


class TestClientRecord:
    """Tests for the ClientRecord entity."""

    def test_defaults(self):
        client = ClientRecord(name="Acme")
        assert client.primary_id is None
        assert client.spreadsheet_row is None
        assert client.tracker_page_id is None
        assert client.is_archived is False

    def test_rejects_non_positive_row(self):
        with pytest.raises(ValueError, match="spreadsheet_row"):
            ClientRecord(name="Acme", spreadsheet_row=0)

    def test_display_name_falls_back_to_company(self):
        assert ClientRecord(name="Jane").display_name == "Jane"
        assert ClientRecord(company_name="Acme Ltd").display_name == "Acme Ltd"

    def test_synced_at_or_epoch(self):
        assert ClientRecord().synced_at_or_epoch == EPOCH

    def test_with_handles_leaves_unset_handles(self):
        client = ClientRecord(name="Acme", primary_id="c-1", spreadsheet_row=4)
        updated = client.with_handles(tracker_page_id="p-1")
        assert updated.primary_id == "c-1"
        assert updated.spreadsheet_row == 4
        assert updated.tracker_page_id == "p-1"
        assert client.tracker_page_id is None

    def test_replicated_values(self):
        values = ClientRecord(name="Acme", email="a@b.co").replicated_values()
        assert tuple(values) == REPLICATED_FIELDS
        assert values["email"] == "a@b.co"

    def test_dict_round_trip(self):
        client = ClientRecord(
            name="Acme",
            email="ops@acme.io",
            primary_id="c-1",
            spreadsheet_row=9,
            last_synced_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        data = client.to_dict()
        assert data["last_synced_at"] == "2024-01-01T00:00:00+00:00"
        assert ClientRecord.from_dict(data) == client

    def test_from_dict_ignores_unknown_keys(self):
        client = ClientRecord.from_dict(
            {"name": "Acme", "spreadsheet_row": "3", "createdAt": "whenever"}
        )
        assert client.spreadsheet_row == 3


# =============================================================================
# Change detection
# =============================================================================


class TestDetectChanges:
    """Tests for field-level diffing."""

    def test_identical(self):
        client = ClientRecord(name="Acme", email="a@b.co")
        assert detect_changes(client, client) == {}

    def test_reports_new_values(self):
        old = ClientRecord(name="Acme", lead_status="cold")
        new = ClientRecord(name="Acme", lead_status="warm")
        assert detect_changes(old, new) == {"lead_status": "warm"}

    def test_ignores_handles_and_timestamps(self):
        old = ClientRecord(name="Acme")
        new = ClientRecord(
            name="Acme",
            primary_id="c-1",
            spreadsheet_row=2,
            tracker_page_id="p",
            is_archived=True,
            last_synced_at=datetime.now(timezone.utc) + timedelta(days=1),
        )
        assert detect_changes(old, new) == {}

    def test_touches_identity(self):
        assert touches_identity({"name": "New"})
        assert touches_identity({"company_name": "New Co"})
        assert not touches_identity({"email": "x@y.z"})
