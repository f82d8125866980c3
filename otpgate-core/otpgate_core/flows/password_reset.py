"""
Password Reset Flow
===================
Email-only password reset with a ``password_reset`` code.

1. ``request_reset`` sends a code if an account exists. The answer is the
   same either way so the endpoint cannot be used to discover which accounts exist.
2. ``verify_reset_code`` checks the code without consuming it.
3. ``complete_reset`` consumes the code and sets the new password.
"""

import structlog

from ..directory import IdentityDirectory
from ..engine import OTPLifecycleEngine
from ..errors import DirectoryError, RateLimitExceeded, WeakPasswordError
from ..identifiers import IdentifierKind, parse_identifier
from ..otp import OTPPurpose, VerificationResult, validate_code_format
from .models import ResetResult

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

RESET_REQUESTED_MESSAGE = "If an account exists with this email, a password reset code has been sent."
RESET_RATE_LIMIT_MESSAGE = "Too many password reset requests. Please try again in 15 minutes."
WRONG_PURPOSE_ERROR = "This OTP is not valid for password reset"
USER_NOT_FOUND_ERROR = "User not found. Please check your email address."
UPDATE_FAILED_ERROR = "Failed to update password. Please try again."


def validate_new_password(password: str) -> str:
    """
    Raises:
        WeakPasswordError: If the password is shorter than the minimum
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return password


class PasswordResetFlow:
    """Request, verify and complete a password reset."""

    purpose = OTPPurpose.PASSWORD_RESET

    def __init__(self, engine: OTPLifecycleEngine, directory: IdentityDirectory):
        self.engine = engine
        self.directory = directory

    async def request_reset(self, email: str) -> ResetResult:
        """
        Send a reset code to ``email`` if it belongs to an account.

        Raises:
            InvalidIdentifierError: If the email address is malformed
            RateLimitExceeded: If too many resets were requested for it
        """
        identifier = parse_identifier(email, IdentifierKind.EMAIL)

        try:
            await self.engine.admit(identifier, scope=self.purpose.value)
        except RateLimitExceeded as e:
            raise RateLimitExceeded(
                e.key, retry_after=e.retry_after, user_message=RESET_RATE_LIMIT_MESSAGE,
            ) from e

        try:
            account = await self.directory.find_by_email(identifier.value)
        except DirectoryError as e:
            logger.warning("Directory lookup failed for password reset", error=str(e))
            account = None

        if account is None:
            logger.info("Password reset requested for unknown account", identifier=identifier.fingerprint)
            return ResetResult(success=True, message=RESET_REQUESTED_MESSAGE)

        outcome = await self.engine.deliver_code(identifier, self.purpose)
        if not outcome.delivered:
            # Already logged by the engine; the answer must not differ from the unknown-account case.
            logger.warning("Password reset code not delivered", identifier=identifier.fingerprint)

        return ResetResult(success=True, message=RESET_REQUESTED_MESSAGE)

    def _reject(self, result: VerificationResult) -> ResetResult:
        return ResetResult(success=False, error=result.error, status=result.status)

    async def verify_reset_code(self, email: str, code: str) -> ResetResult:
        """
        Check a reset code, leaving it in place for ``complete_reset``.

        Raises:
            InvalidIdentifierError: If the email address is malformed
            InvalidCodeFormatError: If the code is not six digits
        """
        result = await self.engine.verify_code(
            email, code, IdentifierKind.EMAIL, consume_on_success=False,
        )
        if not result.is_valid:
            return self._reject(result)

        if result.purpose != self.purpose.value:
            logger.warning("Code presented for the wrong purpose", purpose=result.purpose)
            return ResetResult(success=False, error=WRONG_PURPOSE_ERROR, status=result.status)

        return ResetResult(
            success=True,
            message="Password reset code verified successfully",
            verified=True,
            status=result.status,
        )

    async def complete_reset(self, email: str, code: str, new_password: str) -> ResetResult:
        """
        Consume the reset code and set a new password.

        Raises:
            InvalidIdentifierError: If the email address is malformed
            InvalidCodeFormatError: If the code is not six digits
            WeakPasswordError: If the new password is too short
        """
        identifier = parse_identifier(email, IdentifierKind.EMAIL)
        validate_code_format(code)
        validate_new_password(new_password)

        result = await self.engine.verify_code(identifier.value, code, IdentifierKind.EMAIL)
        if not result.is_valid:
            return self._reject(result)

        if result.purpose != self.purpose.value:
            logger.warning("Code presented for the wrong purpose", purpose=result.purpose)
            return ResetResult(success=False, error=WRONG_PURPOSE_ERROR, status=result.status)

        try:
            account = await self.directory.find_by_email(identifier.value)
        except DirectoryError as e:
            logger.error("Directory lookup failed during password reset", error=str(e))
            account = None

        if account is None:
            return ResetResult(success=False, error=USER_NOT_FOUND_ERROR, status=result.status)

        try:
            await self.directory.update_password(account.id, new_password)
        except DirectoryError as e:
            logger.error("Password update failed", identifier=identifier.fingerprint, error=str(e))
            return ResetResult(success=False, error=UPDATE_FAILED_ERROR, status=result.status)

        logger.info("Password reset completed", identifier=identifier.fingerprint)
        return ResetResult(
            success=True,
            message="Password has been reset successfully. You can now sign in with your new password.",
            status=result.status,
        )
