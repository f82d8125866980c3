"""
Identifier Models
=================
Canonical identifiers that codes are issued against.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IdentifierKind(str, Enum):
    """Channel an identifier belongs to."""
    EMAIL = "email"
    PHONE = "phone"


@dataclass(frozen=True)
class Identifier:
    """A validated, normalized email address or E.164 phone number."""
    kind: IdentifierKind
    value: str

    def rate_limit_key(self, scope: Optional[str] = None) -> str:
        """
        Key used for admission control.

        Phone keys are prefixed so they can never collide with an email key.
        A scope (e.g. ``password_reset``) gives that purpose its own window.
        """
        base = f"phone:{self.value}" if self.kind == IdentifierKind.PHONE else self.value
        return f"{base}:{scope}" if scope else base

    @property
    def fingerprint(self) -> str:
        """Short hash safe to write to logs."""
        return fingerprint(self.value)

    def __str__(self) -> str:
        return self.value


def fingerprint(value: str, pepper: str = "") -> str:
    """
    Hash an identifier for privacy in logs.

    Args:
        value: Email address or E.164 phone number
        pepper: Optional secret pepper

    Returns:
        First 12 hex characters of the SHA-256 digest
    """
    return hashlib.sha256(f"{pepper}:{value}".encode()).hexdigest()[:12]
