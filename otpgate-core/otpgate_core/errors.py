"""
OTPGate Errors
==============
Error taxonomy shared by every component.

Each error carries a technical ``message`` (logged) and a ``user_message``
(safe to show to the end user). Verification failures are not exceptions;
they are reported as ``VerificationResult`` values.
"""

from typing import Optional


GENERIC_USER_MESSAGE = "Internal server error. Please try again later."


class OTPGateError(Exception):
    """Base exception for all otpgate errors."""

    code: str = "OTPGATE_ERROR"
    default_user_message: str = GENERIC_USER_MESSAGE

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        code: Optional[str] = None,
    ):
        self.message = message
        self.user_message = user_message or self.default_user_message
        if code:
            self.code = code
        super().__init__(message)


# Validation errors: rejected before any shared state is touched

class ValidationError(OTPGateError):
    """Malformed input, reported with a specific corrective message."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message, user_message=user_message or message)


class InvalidIdentifierError(ValidationError):
    """Email address or phone number failed validation."""
    code = "INVALID_IDENTIFIER"


class InvalidCodeFormatError(ValidationError):
    """Submitted passcode is not six digits."""
    code = "INVALID_CODE_FORMAT"


class WeakPasswordError(ValidationError):
    """New password does not meet the minimum requirements."""
    code = "WEAK_PASSWORD"


# Admission errors

class RateLimitExceeded(OTPGateError):
    """Too many code requests for one identifier inside the window."""
    code = "RATE_LIMITED"
    default_user_message = "Too many OTP requests. Please try again in 15 minutes."

    def __init__(
        self,
        key: str,
        retry_after: Optional[int] = None,
        user_message: Optional[str] = None,
    ):
        self.key = key
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded (retry after {retry_after}s)",
            user_message=user_message,
        )


# Collaborator errors: caught at the boundary and converted

class CollaboratorError(OTPGateError):
    """An external collaborator (delivery, directory) failed."""
    code = "COLLABORATOR_ERROR"


class DeliveryError(CollaboratorError):
    """Message delivery provider rejected or failed the send."""
    code = "DELIVERY_FAILED"
    default_user_message = "Failed to send verification code. Please try again."


class DirectoryError(CollaboratorError):
    """Identity directory lookup or update failed."""
    code = "DIRECTORY_ERROR"


# Handshake errors

class HandshakeError(OTPGateError):
    """Federated login handshake could not be started or completed."""
    code = "HANDSHAKE_ERROR"
    default_user_message = "Authentication failed"


class FederationNotConfiguredError(HandshakeError):
    """No identity provider client is configured."""
    code = "FEDERATION_NOT_CONFIGURED"
    default_user_message = "Google OAuth not configured on server"


class ConfigurationError(OTPGateError):
    """A required setting or collaborator is missing."""
    code = "CONFIGURATION_ERROR"
