"""
Static validation of client input before any platform is touched.
"""

from __future__ import annotations

import re

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.exceptions import ValidationError


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check the ``local@domain.tld`` shape."""
    return bool(EMAIL_PATTERN.match(email))


def validate_client(client: ClientRecord) -> list[ValidationError]:
    """
    Validate a client for the create workflow.

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[ValidationError] = []

    if not client.name or not client.name.strip():
        errors.append(ValidationError("name", "Name is required"))

    if client.email and not is_valid_email(client.email):
        errors.append(ValidationError("email", "Invalid email format"))

    return errors
