"""
Shared pytest fixtures for the clientsync test suite.

Fixture Categories:
- Platforms: MagicMock ports attached to one manager (for global call order)
- Orchestrators: over mocks, or over the in-memory platforms
- Audit: in-memory audit sink
- Domain: sample clients
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from clientsync.adapters.audit import InMemoryAuditSink
from clientsync.adapters.memory import build_orchestrator
from clientsync.application.sync import SyncOrchestrator
from clientsync.core.domain import ClientRecord
from clientsync.core.ports import (
    PlatformSet,
    PrimaryStorePort,
    ProjectTrackerPort,
    SpreadsheetPort,
    SyncConfig,
    WriteReceipt,
)


# =============================================================================
# Platforms
# =============================================================================


@pytest.fixture
def manager() -> MagicMock:
    """
    Parent mock for the three platform mocks.

    ``manager.mock_calls`` lists every platform call in global order,
    e.g. ``call.spreadsheet.delete(5)``.
    """
    manager = MagicMock()

    primary = MagicMock(spec=PrimaryStorePort)
    primary.create.return_value = WriteReceipt(id="client-1")
    primary.find_by_spreadsheet_row.return_value = None
    primary.find_by_email.return_value = None

    spreadsheet = MagicMock(spec=SpreadsheetPort)
    spreadsheet.create.return_value = WriteReceipt(row_number=5)
    spreadsheet.read.return_value = None

    tracker = MagicMock(spec=ProjectTrackerPort)
    tracker.create_linked_item.return_value = WriteReceipt(id="1a2b-3c4d")
    tracker.list_linked_items.return_value = []

    manager.attach_mock(primary, "primary")
    manager.attach_mock(spreadsheet, "spreadsheet")
    manager.attach_mock(tracker, "tracker")
    return manager


@pytest.fixture
def platforms(manager) -> PlatformSet:
    return PlatformSet(
        primary=manager.primary, spreadsheet=manager.spreadsheet, tracker=manager.tracker
    )


# =============================================================================
# Orchestrators
# =============================================================================


@pytest.fixture
def sync_config() -> SyncConfig:
    """Config with adapter calls run inline on the test thread."""
    return SyncConfig(adapter_timeout=None)


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def orchestrator(manager, sync_config, audit_sink) -> SyncOrchestrator:
    """Orchestrator over the mock platforms."""
    return SyncOrchestrator(
        primary=manager.primary,
        spreadsheet=manager.spreadsheet,
        tracker=manager.tracker,
        config=sync_config,
        audit_sink=audit_sink,
    )


@pytest.fixture
def memory_orchestrator(sync_config, audit_sink) -> SyncOrchestrator:
    """Orchestrator over fresh in-memory platforms."""
    return build_orchestrator(sync_config, audit_sink=audit_sink)


# =============================================================================
# Domain
# =============================================================================


@pytest.fixture
def new_client() -> ClientRecord:
    """A valid client that has not been written anywhere yet."""
    return ClientRecord(
        name="Jane Doe",
        company_name="Acme Ltd",
        email="jane@acme.io",
        lead_status="warm",
        service_type="video",
    )


@pytest.fixture
def synced_client() -> ClientRecord:
    """A client already present on all three platforms."""
    return ClientRecord(
        name="Jane Doe",
        company_name="Acme Ltd",
        email="jane@acme.io",
        lead_status="warm",
        primary_id="client-1",
        spreadsheet_row=5,
        tracker_page_id="1a2b-3c4d",
        tracker_project_url="https://notion.so/1a2b3c4d",
        last_synced_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
    )
