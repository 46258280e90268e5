"""
Tests for port value types: audit records and configuration.
"""

import re

import pytest

from clientsync.core.ports import AppConfig, AuditRecord, SyncConfig


class TestAuditRecord:
    """Tests for AuditRecord."""

    def test_defaults(self):
        record = AuditRecord(action="CLIENT_CREATION_SYNC")
        assert record.level == "info"
        assert record.actor_id == "SYSTEM"
        assert record.actor_name == "Sync Orchestrator"
        assert re.fullmatch(r"sync_[0-9a-f]{12}", record.id)
        assert record.timestamp.endswith("Z")

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown audit level"):
            AuditRecord(action="X", level="warning")

    def test_dict_round_trip(self):
        record = AuditRecord(action="ROLLBACK_FAILED", level="error", metadata={"handle": 5})
        assert AuditRecord.from_dict(record.to_dict()) == record


class TestAppConfig:
    """Tests for AppConfig validation."""

    def test_defaults_are_valid(self):
        config = AppConfig()
        assert config.validate() == []
        assert config.sync.drift_tolerance_ms == 60_000
        assert config.sync.adapter_timeout == 30.0

    def test_collects_every_problem(self):
        config = AppConfig(
            sync=SyncConfig(
                drift_tolerance_ms=-1,
                adapter_timeout=0,
                actor_id="",
                tracker_base_url="notion.so",
            )
        )
        config.logging.format = "xml"
        config.logging.level = "LOUD"

        errors = config.validate()

        assert len(errors) == 6
        assert any("drift_tolerance_ms" in e for e in errors)
        assert any("adapter_timeout" in e for e in errors)
        assert any("xml" in e for e in errors)

    def test_timeout_can_be_disabled(self):
        config = AppConfig(sync=SyncConfig(adapter_timeout=None))
        assert config.validate() == []
