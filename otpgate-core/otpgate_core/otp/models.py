"""
OTP Models
==========
Data models and enums for passcode issue and verification.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class OTPPurpose(str, Enum):
    """Why a code was issued. Callers may also pass their own tag."""
    SIGNIN = "signin"
    PASSWORD_RESET = "password_reset"


class VerificationStatus(str, Enum):
    """State of an OTP record as observed by a verify call."""
    ABSENT = "absent"
    LIVE = "live"
    EXPIRED = "expired"
    LOCKED = "locked"
    VERIFIED_PENDING = "verified_pending"
    CONSUMED = "consumed"


ERROR_NOT_FOUND = "OTP not found or expired. Please request a new code."
ERROR_EXPIRED = "OTP has expired. Please request a new code."
ERROR_LOCKED = "Too many failed attempts. Please request a new code."


@dataclass
class OTPConfig:
    """Configuration for OTP issue and verification."""
    length: int = 6
    expiry_seconds: int = 600  # 10 minutes
    max_attempts: int = 3
    # How long an expired record is kept so a late verify reports "expired"
    retention_seconds: Optional[int] = None

    @property
    def retention(self) -> int:
        if self.retention_seconds is None:
            return self.expiry_seconds
        return self.retention_seconds


@dataclass
class OTPRecord:
    """The single live code for one identifier."""
    code: str
    purpose: str
    attempts: int
    created_at: float
    expires_at: float
    verified: bool = False

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OTPRecord":
        return cls(
            code=str(data["code"]),
            purpose=str(data["purpose"]),
            attempts=int(data.get("attempts", 0)),
            created_at=float(data["created_at"]),
            expires_at=float(data["expires_at"]),
            verified=bool(data.get("verified", False)),
        )


@dataclass
class VerificationResult:
    """Verdict of one verify call."""
    is_valid: bool
    status: VerificationStatus
    purpose: Optional[str] = None
    error: Optional[str] = None
    remaining_attempts: Optional[int] = None

    @classmethod
    def failure(
        cls,
        status: VerificationStatus,
        error: str,
        remaining_attempts: Optional[int] = None,
    ) -> "VerificationResult":
        return cls(
            is_valid=False,
            status=status,
            error=error,
            remaining_attempts=remaining_attempts,
        )

    @classmethod
    def success(cls, status: VerificationStatus, purpose: str) -> "VerificationResult":
        return cls(is_valid=True, status=status, purpose=purpose)
