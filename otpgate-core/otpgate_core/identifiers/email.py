"""
Email Utilities
===============
Email address normalization and validation.
"""

import re

from ..errors import InvalidIdentifierError

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(email: str) -> str:
    """
    Normalize and validate an email address.

    Args:
        email: Raw email address

    Returns:
        Lower-cased, trimmed address

    Raises:
        InvalidIdentifierError: If the address is missing or malformed
    """
    if not email or '@' not in email:
        raise InvalidIdentifierError("Valid email address is required")

    normalized = email.lower().strip()
    if normalized.count('@') != 1 or not EMAIL_PATTERN.match(normalized):
        raise InvalidIdentifierError("Invalid email format")

    return normalized


def validate_email(email: str) -> bool:
    """Check an email address without raising."""
    try:
        normalize_email(email)
    except InvalidIdentifierError:
        return False
    return True
