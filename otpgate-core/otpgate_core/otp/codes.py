"""
OTP Code Utilities
==================
Generation, shape validation and comparison of numeric codes.
"""

import hmac
import re
import secrets

from ..errors import InvalidCodeFormatError

CODE_PATTERN = re.compile(r'[0-9]{6}')


def generate_otp(length: int = 6) -> str:
    """
    Generate a secure random numeric OTP.

    The first digit is never zero, so a 6-digit code falls in
    ``100000..999999``.

    Args:
        length: Number of digits

    Returns:
        OTP string
    """
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def validate_code_format(code: str) -> str:
    """
    Check that a submitted code has the expected shape.

    Raises:
        InvalidCodeFormatError: If the code is not exactly six digits
    """
    if not isinstance(code, str) or not CODE_PATTERN.fullmatch(code):
        raise InvalidCodeFormatError("OTP must be a 6-digit number")
    return code


def codes_match(submitted: str, stored: str) -> bool:
    """
    Compare a submitted code with the stored one.

    Uses constant-time comparison to prevent timing attacks.
    """
    return hmac.compare_digest(submitted.encode(), stored.encode())
