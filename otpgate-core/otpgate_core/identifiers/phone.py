"""
Phone Utilities
===============
Phone number validation and normalization for a regional numbering plan.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidIdentifierError


@dataclass(frozen=True)
class NumberingPlan:
    """
    Accepted input shapes for one country.

    Three shapes are recognized once non-digits are stripped:
    - international: country code followed by the national number
    - trunk: a leading ``0`` followed by a subscriber number
    - subscriber: the bare subscriber number
    """
    country_code: str = "509"
    international_length: int = 11
    trunk_length: int = 10
    subscriber_length: int = 9
    subscriber_prefix: str = "9"
    error_message: str = (
        "Please enter a valid Haitian phone number. "
        "Format: +509XXXXXXXX or 09XXXXXXXX"
    )


HAITI = NumberingPlan()


def _digits(phone: str) -> str:
    return re.sub(r'\D', '', phone or '')


def format_phone(phone: str, plan: NumberingPlan = HAITI) -> Optional[str]:
    """
    Canonicalize a phone number to E.164.

    Args:
        phone: Raw phone number in any of the plan's shapes
        plan: Numbering plan to apply

    Returns:
        E.164 formatted number, or None if no shape matches
    """
    digits = _digits(phone)

    if digits.startswith(plan.country_code) and len(digits) == plan.international_length:
        return f"+{digits}"

    if digits.startswith("0" + plan.subscriber_prefix) and len(digits) == plan.trunk_length:
        return f"+{plan.country_code}{digits[1:]}"

    if digits.startswith(plan.subscriber_prefix) and len(digits) == plan.subscriber_length:
        return f"+{plan.country_code}{digits}"

    return None


def validate_phone(phone: str, plan: NumberingPlan = HAITI) -> bool:
    """Check a phone number against the plan without raising."""
    return format_phone(phone, plan) is not None


def normalize_phone(phone: str, plan: NumberingPlan = HAITI) -> str:
    """
    Normalize and validate a phone number.

    Raises:
        InvalidIdentifierError: If the number is missing or matches no shape
    """
    if not phone:
        raise InvalidIdentifierError("Valid phone number is required")

    formatted = format_phone(phone, plan)
    if formatted is None:
        raise InvalidIdentifierError(plan.error_message)
    return formatted


def validate_e164(phone: str) -> bool:
    """
    Validate E.164 phone number format.

    Args:
        phone: Phone number

    Returns:
        True if valid E.164 format
    """
    return bool(re.match(r'^\+[1-9]\d{1,14}$', phone or ''))
