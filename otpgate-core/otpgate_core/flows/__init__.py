"""
Passcode Flows
==============
Sign-in and password reset built on the lifecycle engine and the identity
directory.
"""

from .models import SendResult, SignedInUser, SignInResult, PhoneLookup, ResetResult
from .signin import PasscodeSignIn
from .password_reset import PasswordResetFlow, validate_new_password, MIN_PASSWORD_LENGTH

__all__ = [
    # Models
    "SendResult",
    "SignedInUser",
    "SignInResult",
    "PhoneLookup",
    "ResetResult",
    # Flows
    "PasscodeSignIn",
    "PasswordResetFlow",
    "validate_new_password",
    "MIN_PASSWORD_LENGTH",
]
