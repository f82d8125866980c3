"""
Identifiers
===========
Pure validation and normalization of email addresses and phone numbers.
Nothing here touches shared state.
"""

from typing import Optional

from .models import Identifier, IdentifierKind, fingerprint
from .email import normalize_email, validate_email, EMAIL_PATTERN
from .phone import (
    NumberingPlan,
    HAITI,
    format_phone,
    normalize_phone,
    validate_phone,
    validate_e164,
)


def parse_identifier(
    raw: str,
    kind: Optional[IdentifierKind] = None,
    plan: NumberingPlan = HAITI,
) -> Identifier:
    """
    Validate and canonicalize a raw identifier.

    Args:
        raw: User-supplied email address or phone number
        kind: Expected kind; detected from the presence of ``@`` when omitted
        plan: Numbering plan for phone numbers

    Raises:
        InvalidIdentifierError: If validation fails
    """
    if kind is None:
        kind = IdentifierKind.EMAIL if raw and '@' in raw else IdentifierKind.PHONE

    if kind == IdentifierKind.EMAIL:
        return Identifier(IdentifierKind.EMAIL, normalize_email(raw))
    return Identifier(IdentifierKind.PHONE, normalize_phone(raw, plan))


__all__ = [
    # Models
    "Identifier",
    "IdentifierKind",
    "fingerprint",
    "parse_identifier",
    # Email
    "normalize_email",
    "validate_email",
    "EMAIL_PATTERN",
    # Phone
    "NumberingPlan",
    "HAITI",
    "format_phone",
    "normalize_phone",
    "validate_phone",
    "validate_e164",
]
