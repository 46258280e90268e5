"""
Tests for the exception hierarchy.
"""

from datetime import datetime, timedelta, timezone

import pytest

from clientsync.core.domain import Platform, SyncAction
from clientsync.core.exceptions import (
    AdapterTimeoutError,
    AdapterWriteError,
    AggregateValidationError,
    ClientSyncError,
    ConfigError,
    ConfigFileError,
    ConfigValidationError,
    ConflictAmbiguous,
    MissingCorrelationDataError,
    RollbackFailure,
    RowNotFoundError,
    SyncCancelledError,
    ValidationError,
)


class TestClientSyncError:
    """Tests for the base exception."""

    def test_message(self):
        error = ClientSyncError("Something failed")
        assert str(error) == "Something failed"
        assert error.message == "Something failed"
        assert error.cause is None

    def test_cause_in_string(self):
        error = ClientSyncError("Write failed", cause=OSError("disk full"))
        assert str(error) == "Write failed (caused by: disk full)"

    @pytest.mark.parametrize(
        "exc_class",
        [
            ValidationError,
            AdapterWriteError,
            RollbackFailure,
            ConflictAmbiguous,
            SyncCancelledError,
            ConfigError,
        ],
    )
    def test_family_shares_base(self, exc_class):
        assert issubclass(exc_class, ClientSyncError)


class TestValidationErrors:
    """Tests for field validation errors."""

    def test_single_field(self):
        error = ValidationError("name", "Name is required")
        assert error.field == "name"
        assert error.reason == "Name is required"
        assert error.to_dict() == {"field": "name", "reason": "Name is required"}

    def test_aggregate_message(self):
        error = AggregateValidationError(
            [
                ValidationError("name", "Name is required"),
                ValidationError("email", "Invalid email format"),
            ]
        )
        assert str(error) == "Validation failed: Name is required; Invalid email format"
        assert [e.field for e in error.errors] == ["name", "email"]
        assert isinstance(error, ValidationError)


class TestAdapterErrors:
    """Tests for adapter failures."""

    def test_context(self):
        error = AdapterWriteError("rejected", platform=Platform.TRACKER, action=SyncAction.CREATE)
        assert error.context == {
            "platform": "tracker",
            "action": "create",
            "message": "rejected",
        }

    def test_timeout_is_adapter_error(self):
        error = AdapterTimeoutError(
            "slow", platform=Platform.PRIMARY, action=SyncAction.UPDATE, timeout=2.5
        )
        assert isinstance(error, AdapterWriteError)
        assert error.timeout == 2.5

    def test_missing_correlation(self):
        error = MissingCorrelationDataError(
            "no row", platform=Platform.SPREADSHEET, handle="spreadsheet_row"
        )
        assert error.handle == "spreadsheet_row"
        assert isinstance(error, AdapterWriteError)

    def test_row_not_found(self):
        error = RowNotFoundError(7, platform=Platform.SPREADSHEET)
        assert error.row_number == 7
        assert "row 7" in str(error)


class TestSagaErrors:
    """Tests for rollback and conflict errors."""

    def test_rollback_failure(self):
        error = RollbackFailure(
            "Rollback of spreadsheet create failed",
            platform=Platform.SPREADSHEET,
            action=SyncAction.DELETE,
            handle=5,
            cause=RuntimeError("quota"),
        )
        assert error.handle == 5
        assert "(caused by: quota)" in str(error)

    def test_conflict_ambiguous_message(self):
        app_ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        error = ConflictAmbiguous(3, app_ts, app_ts + timedelta(seconds=30), 60_000)
        assert error.row_number == 3
        assert "within 60000ms" in str(error)
        assert "30000ms" in str(error)


class TestConfigErrors:
    """Tests for configuration errors."""

    def test_file_error_path(self):
        error = ConfigFileError("Cannot read", path="/tmp/x.yaml")
        assert error.path == "/tmp/x.yaml"
        assert isinstance(error, ConfigError)

    def test_validation_error_lists_problems(self):
        error = ConfigValidationError(["a bad", "b bad"])
        assert error.errors == ["a bad", "b bad"]
        assert str(error) == "Invalid configuration: a bad; b bad"
