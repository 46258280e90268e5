"""
Tests for client validation.
"""

import pytest

from clientsync.application.sync.validation import is_valid_email, validate_client
from clientsync.core.domain import ClientRecord


class TestIsValidEmail:
    """Tests for the email shape check."""

    @pytest.mark.parametrize("email", ["a@b.co", "jane.doe+crm@acme.io", "x@y.z.w"])
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.d", "@b.co", "a@@b.co"])
    def test_invalid(self, email):
        assert not is_valid_email(email)


class TestValidateClient:
    """Tests for validate_client."""

    def test_valid(self):
        assert validate_client(ClientRecord(name="Acme", email="ops@acme.io")) == []

    @pytest.mark.parametrize("name", ["", "   "])
    def test_name_required(self, name):
        [error] = validate_client(ClientRecord(name=name))
        assert error.field == "name"
        assert error.reason == "Name is required"

    def test_email_optional(self):
        assert validate_client(ClientRecord(name="Acme")) == []

    def test_collects_all_errors(self):
        errors = validate_client(ClientRecord(name="", email="broken"))
        assert [e.field for e in errors] == ["name", "email"]
