"""
OTP Generation and Verification
================================
Secure code generation with attempt-bounded, expiring verification.
"""

from .models import (
    OTPPurpose,
    OTPConfig,
    OTPRecord,
    VerificationStatus,
    VerificationResult,
    ERROR_NOT_FOUND,
    ERROR_EXPIRED,
    ERROR_LOCKED,
)
from .codes import generate_otp, validate_code_format, codes_match, CODE_PATTERN
from .ledger import OTPLedger

__all__ = [
    # Models
    "OTPPurpose",
    "OTPConfig",
    "OTPRecord",
    "VerificationStatus",
    "VerificationResult",
    "ERROR_NOT_FOUND",
    "ERROR_EXPIRED",
    "ERROR_LOCKED",
    # Codes
    "generate_otp",
    "validate_code_format",
    "codes_match",
    "CODE_PATTERN",
    # Ledger
    "OTPLedger",
]
