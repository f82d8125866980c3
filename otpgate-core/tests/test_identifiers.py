"""
Tests for identifier validation and normalization.
"""

import pytest

from otpgate_core.errors import InvalidIdentifierError
from otpgate_core.identifiers import (
    IdentifierKind,
    NumberingPlan,
    fingerprint,
    format_phone,
    normalize_email,
    normalize_phone,
    parse_identifier,
    validate_email,
    validate_e164,
)


class TestEmail:
    """Tests for email normalization."""

    def test_lowercases_and_trims(self):
        """Should lower-case and strip surrounding whitespace."""
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"

    def test_missing_at_sign(self):
        """Should ask for a valid address when there is no @."""
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_email("alice.example.com")
        assert exc.value.user_message == "Valid email address is required"

    def test_empty(self):
        """Should reject an empty address."""
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_email("")
        assert exc.value.user_message == "Valid email address is required"

    @pytest.mark.parametrize("raw", ["alice@example", "alice@@example.com", "al ice@example.com", "@example.com"])
    def test_invalid_format(self, raw):
        """Should reject addresses that fail the pattern."""
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_email(raw)
        assert exc.value.user_message == "Invalid email format"

    def test_validate_email(self):
        assert validate_email("bob@example.org") is True
        assert validate_email("bob@example") is False


class TestPhone:
    """Tests for Haitian phone canonicalization."""

    def test_international_form(self):
        """Should accept 509 followed by eight digits."""
        assert format_phone("+509 3712 3456") == "+50937123456"
        assert normalize_phone("50937123456") == "+50937123456"

    def test_trunk_form(self):
        """Should drop the leading zero of the 09 form."""
        assert format_phone("0937123456") == "+509937123456"

    def test_subscriber_form(self):
        """Should prefix the country code to the 9 form."""
        assert format_phone("937123456") == "+509937123456"

    def test_strips_punctuation(self):
        assert format_phone("(509) 3712-3456") == "+50937123456"

    @pytest.mark.parametrize("raw", ["12345", "+14155551234", "8371234567", "5093712345"])
    def test_rejects_other_shapes(self, raw):
        """Should reject numbers outside the numbering plan."""
        assert format_phone(raw) is None
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_phone(raw)
        assert "valid Haitian phone number" in exc.value.user_message

    def test_empty_phone(self):
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_phone("")
        assert exc.value.user_message == "Valid phone number is required"

    def test_other_numbering_plan(self):
        """Should canonicalize against a configured plan."""
        plan = NumberingPlan(
            country_code="1",
            international_length=11,
            trunk_length=0,
            subscriber_length=10,
            subscriber_prefix="4",
            error_message="Bad number",
        )
        assert format_phone("14155551234", plan) == "+14155551234"
        with pytest.raises(InvalidIdentifierError) as exc:
            normalize_phone("555", plan)
        assert exc.value.user_message == "Bad number"

    def test_validate_e164(self):
        assert validate_e164("+50937123456") is True
        assert validate_e164("50937123456") is False


class TestParseIdentifier:
    """Tests for identifier auto-detection."""

    def test_detects_email(self):
        identifier = parse_identifier("Carol@Example.com")
        assert identifier.kind == IdentifierKind.EMAIL
        assert identifier.value == "carol@example.com"

    def test_detects_phone(self):
        identifier = parse_identifier("0937123456")
        assert identifier.kind == IdentifierKind.PHONE
        assert identifier.value == "+509937123456"

    def test_explicit_kind_wins(self):
        """Should validate as the requested kind."""
        with pytest.raises(InvalidIdentifierError):
            parse_identifier("0937123456", IdentifierKind.EMAIL)

    def test_rate_limit_keys(self):
        """Phone keys are prefixed; scopes get their own key."""
        email = parse_identifier("dave@example.com")
        phone = parse_identifier("50937123456")

        assert email.rate_limit_key() == "dave@example.com"
        assert email.rate_limit_key("password_reset") == "dave@example.com:password_reset"
        assert phone.rate_limit_key() == "phone:+50937123456"

    def test_fingerprint_hides_value(self):
        identifier = parse_identifier("erin@example.com")
        assert identifier.fingerprint == fingerprint("erin@example.com")
        assert len(identifier.fingerprint) == 12
        assert "erin" not in identifier.fingerprint
