"""
Flow Results
============
Values returned by the passcode sign-in and password reset flows.
"""

from dataclasses import dataclass
from typing import Optional

from ..directory import DirectoryUser
from ..otp import VerificationStatus


@dataclass
class SendResult:
    """Outcome of sending (or resending) a code."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    message_id: Optional[str] = None


@dataclass
class SignedInUser:
    """Profile returned after a successful passcode sign-in."""
    id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    is_verified: bool = True
    is_synthesized: bool = False  # No directory account was found


@dataclass
class SignInResult:
    """Outcome of verifying a sign-in code."""
    success: bool
    status: VerificationStatus
    message: Optional[str] = None
    error: Optional[str] = None
    remaining_attempts: Optional[int] = None
    user: Optional[SignedInUser] = None


@dataclass
class PhoneLookup:
    """Whether a directory account exists for a phone number."""
    exists: bool
    user: Optional[DirectoryUser] = None


@dataclass
class ResetResult:
    """Outcome of one step of the password reset flow."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    verified: bool = False
    status: Optional[VerificationStatus] = None
