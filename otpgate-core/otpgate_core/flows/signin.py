"""
Passcode Sign-In
================
Email and SMS sign-in with one-time codes.

A successful verification always signs the user in. When the directory has
no account for the identifier (or cannot be reached) a placeholder profile is
synthesized instead of failing the sign-in.
"""

import time
from typing import Callable, Optional

import structlog

from ..directory import DirectoryUser, IdentityDirectory
from ..engine import IssueOutcome, OTPLifecycleEngine
from ..errors import DirectoryError
from ..identifiers import IdentifierKind, parse_identifier
from ..otp import OTPPurpose, VerificationResult
from .models import PhoneLookup, SendResult, SignedInUser, SignInResult

logger = structlog.get_logger(__name__)

SIGNED_IN_MESSAGE = "Signed in successfully!"


class PasscodeSignIn:
    """Send, resend and verify sign-in codes."""

    def __init__(
        self,
        engine: OTPLifecycleEngine,
        directory: IdentityDirectory,
        clock: Callable[[], float] = time.time,
    ):
        self.engine = engine
        self.directory = directory
        self._clock = clock

    def _millis(self) -> int:
        return int(self._clock() * 1000)

    @staticmethod
    def _sent(
        outcome: IssueOutcome,
        message: str,
        failure: str,
        provider_detail: bool = True,
    ) -> SendResult:
        if not outcome.delivered:
            error = outcome.error if provider_detail else None
            return SendResult(success=False, error=error or failure)
        return SendResult(success=True, message=message, message_id=outcome.message_id)

    async def send_email_code(self, email: str) -> SendResult:
        outcome = await self.engine.request_code(email, IdentifierKind.EMAIL, OTPPurpose.SIGNIN)
        return self._sent(
            outcome,
            "Verification code sent successfully",
            "Failed to send verification email. Please try again.",
        )

    async def resend_email_code(
        self,
        email: str,
        purpose: str = OTPPurpose.SIGNIN.value,
    ) -> SendResult:
        outcome = await self.engine.request_code(email, IdentifierKind.EMAIL, purpose, resend=True)
        return self._sent(
            outcome,
            "New verification code sent successfully",
            "Failed to resend verification email. Please try again.",
            provider_detail=False,
        )

    async def send_phone_code(self, phone: str) -> SendResult:
        outcome = await self.engine.request_code(phone, IdentifierKind.PHONE, OTPPurpose.SIGNIN)
        return self._sent(
            outcome,
            "Verification code sent via SMS",
            "Failed to send SMS. Please try again.",
        )

    async def resend_phone_code(self, phone: str) -> SendResult:
        outcome = await self.engine.request_code(
            phone, IdentifierKind.PHONE, OTPPurpose.SIGNIN, resend=True,
        )
        return self._sent(
            outcome,
            "New verification code sent via SMS",
            "Failed to resend verification code. Please try again.",
            provider_detail=False,
        )

    async def _lookup(self, kind: IdentifierKind, value: str) -> Optional[DirectoryUser]:
        try:
            if kind == IdentifierKind.EMAIL:
                return await self.directory.find_by_email(value)
            return await self.directory.find_by_phone(value)
        except DirectoryError as e:
            logger.warning("Directory lookup failed after sign-in", channel=kind.value, error=str(e))
            return None

    @staticmethod
    def _rejected(result: VerificationResult) -> SignInResult:
        return SignInResult(
            success=False,
            status=result.status,
            error=result.error,
            remaining_attempts=result.remaining_attempts,
        )

    async def verify_email_code(self, email: str, code: str) -> SignInResult:
        """
        Verify an email sign-in code and resolve the signed-in profile.

        Raises:
            InvalidIdentifierError: If the email address is malformed
            InvalidCodeFormatError: If the code is not six digits
        """
        identifier = parse_identifier(email, IdentifierKind.EMAIL)
        result = await self.engine.verify_code(identifier.value, code, IdentifierKind.EMAIL)
        if not result.is_valid:
            return self._rejected(result)

        account = await self._lookup(IdentifierKind.EMAIL, identifier.value)
        if account is None:
            user = SignedInUser(
                id=f"email_{self._millis()}",
                full_name=identifier.value.split("@")[0],
                email=identifier.value,
                is_synthesized=True,
            )
        else:
            user = SignedInUser(
                id=account.id,
                full_name=account.full_name or identifier.value.split("@")[0],
                email=identifier.value,
                phone=account.phone,
            )

        logger.info("Email sign-in completed", identifier=identifier.fingerprint, known=account is not None)
        return SignInResult(success=True, status=result.status, message=SIGNED_IN_MESSAGE, user=user)

    async def verify_phone_code(self, phone: str, code: str) -> SignInResult:
        """
        Verify an SMS sign-in code and resolve the signed-in profile.

        Raises:
            InvalidIdentifierError: If the phone number is malformed
            InvalidCodeFormatError: If the code is not six digits
        """
        identifier = parse_identifier(phone, IdentifierKind.PHONE)
        result = await self.engine.verify_code(identifier.value, code, IdentifierKind.PHONE)
        if not result.is_valid:
            return self._rejected(result)

        account = await self._lookup(IdentifierKind.PHONE, identifier.value)
        if account is None:
            user = SignedInUser(
                id=f"phone_{self._millis()}",
                full_name="User",
                phone=identifier.value,
                is_synthesized=True,
            )
        else:
            user = SignedInUser(
                id=account.id,
                full_name=account.full_name or account.username or "User",
                email=account.email,
                phone=identifier.value,
            )

        logger.info("Phone sign-in completed", identifier=identifier.fingerprint, known=account is not None)
        return SignInResult(success=True, status=result.status, message=SIGNED_IN_MESSAGE, user=user)

    async def phone_exists(self, phone: str) -> PhoneLookup:
        """
        Check whether a directory account uses this phone number.

        Raises:
            InvalidIdentifierError: If the phone number is malformed
            DirectoryError: If the directory cannot be queried
        """
        identifier = parse_identifier(phone, IdentifierKind.PHONE)
        account = await self.directory.find_by_phone(identifier.value)
        return PhoneLookup(exists=account is not None, user=account)
