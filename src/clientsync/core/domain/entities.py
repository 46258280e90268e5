"""
Domain Entities - Objects with identity that persist over time.

ClientRecord is the one aggregate replicated across the primary store, the
spreadsheet and the project tracker. Each platform addresses it through its
own correlation handle.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any


# Fields copied between platforms; change detection only looks at these.
REPLICATED_FIELDS: tuple[str, ...] = (
    "name",
    "company_name",
    "email",
    "lead_status",
    "service_type",
    "contact_date",
    "comments",
    "youtube_channel",
    "instagram_account",
    "postal_address",
)

# Fields that make up the display name pushed to linked tracker items.
IDENTITY_FIELDS: tuple[str, ...] = ("name", "company_name")

HANDLE_FIELDS: tuple[str, ...] = ("primary_id", "spreadsheet_row", "tracker_page_id")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass through a datetime), normalized to UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class ClientRecord:
    """
    A client as known to every platform.

    Instances are immutable; workflows derive new versions with
    ``dataclasses.replace`` or the ``with_*`` helpers.
    """

    name: str = ""
    company_name: str | None = None
    email: str | None = None
    lead_status: str | None = None
    service_type: str | None = None
    contact_date: str | None = None
    comments: str | None = None
    youtube_channel: str | None = None
    instagram_account: str | None = None
    postal_address: str | None = None

    is_archived: bool = False
    tracker_project_url: str | None = None

    # Correlation handles
    primary_id: str | None = None
    spreadsheet_row: int | None = None
    tracker_page_id: str | None = None

    # Read only by the conflict resolver
    last_synced_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.spreadsheet_row is not None and self.spreadsheet_row < 1:
            raise ValueError(f"spreadsheet_row must be positive, got {self.spreadsheet_row}")

    @property
    def display_name(self) -> str:
        """Name shown on linked tracker items."""
        return self.name or self.company_name or ""

    @property
    def synced_at_or_epoch(self) -> datetime:
        return self.last_synced_at or EPOCH

    def with_handles(
        self,
        primary_id: str | None = None,
        spreadsheet_row: int | None = None,
        tracker_page_id: str | None = None,
    ) -> ClientRecord:
        """Return a copy with the given handles set; None leaves a handle untouched."""
        return replace(
            self,
            primary_id=primary_id if primary_id is not None else self.primary_id,
            spreadsheet_row=spreadsheet_row if spreadsheet_row is not None else self.spreadsheet_row,
            tracker_page_id=tracker_page_id if tracker_page_id is not None else self.tracker_page_id,
        )

    def replicated_values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in REPLICATED_FIELDS}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["last_synced_at"] = (
            self.last_synced_at.isoformat() if self.last_synced_at else None
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientRecord:
        """Build from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "last_synced_at" in values:
            values["last_synced_at"] = parse_timestamp(values["last_synced_at"])
        if values.get("spreadsheet_row") is not None:
            values["spreadsheet_row"] = int(values["spreadsheet_row"])
        return cls(**values)


def detect_changes(old: ClientRecord, new: ClientRecord) -> dict[str, Any]:
    """
    Field-level diff over REPLICATED_FIELDS.

    Returns:
        Mapping of changed field name to its new value. Empty when nothing
        replicated changed.
    """
    changes: dict[str, Any] = {}
    for name in REPLICATED_FIELDS:
        new_value = getattr(new, name)
        if getattr(old, name) != new_value:
            changes[name] = new_value
    return changes


def touches_identity(changes: dict[str, Any]) -> bool:
    """Whether a diff changes the display name pushed to tracker items."""
    return any(name in changes for name in IDENTITY_FIELDS)
