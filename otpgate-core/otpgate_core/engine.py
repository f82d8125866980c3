"""
OTP Lifecycle Engine
====================
Orchestrates one code request (validate, admit, issue, deliver) and one
verification (validate, verify) across the identifier, rate limiting, ledger
and delivery components.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Union

import structlog

from .dispatch import BaseDeliveryDispatcher, DeliveryResult, MessageComposer
from .errors import ConfigurationError, DeliveryError, RateLimitExceeded
from .identifiers import Identifier, IdentifierKind, parse_identifier
from .otp import OTPLedger, OTPPurpose, VerificationResult, validate_code_format
from .rate_limit import SlidingWindowLimiter

logger = structlog.get_logger(__name__)


@dataclass
class IssueOutcome:
    """What happened to a code request that passed admission."""
    identifier: Identifier
    purpose: str
    delivered: bool
    message_id: Optional[str] = None
    error: Optional[str] = None  # User-facing delivery failure text


class OTPLifecycleEngine:
    """Request and verify one-time codes for email addresses and phone numbers."""

    def __init__(
        self,
        ledger: OTPLedger,
        limiter: SlidingWindowLimiter,
        dispatchers: Mapping[IdentifierKind, BaseDeliveryDispatcher],
        composer: Optional[MessageComposer] = None,
    ):
        self.ledger = ledger
        self.limiter = limiter
        self.dispatchers = dict(dispatchers)
        self.composer = composer or MessageComposer()

    def _dispatcher_for(self, kind: IdentifierKind) -> BaseDeliveryDispatcher:
        dispatcher = self.dispatchers.get(kind)
        if dispatcher is None:
            raise ConfigurationError(f"No delivery dispatcher configured for {kind.value}")
        return dispatcher

    async def admit(self, identifier: Identifier, scope: Optional[str] = None) -> None:
        """
        Count one code request against the identifier's window.

        Raises:
            RateLimitExceeded: If the identifier is over its request cap
        """
        key = identifier.rate_limit_key(scope)
        info = await self.limiter.check(key)
        if not info.allowed:
            raise RateLimitExceeded(key, retry_after=info.retry_after)

    async def deliver_code(
        self,
        identifier: Identifier,
        purpose: Union[OTPPurpose, str] = OTPPurpose.SIGNIN,
        resend: bool = False,
    ) -> IssueOutcome:
        """Issue a code for an already admitted identifier and send it."""
        purpose_tag = purpose.value if isinstance(purpose, OTPPurpose) else str(purpose)
        dispatcher = self._dispatcher_for(identifier.kind)

        code = await self.ledger.issue(identifier.value, purpose_tag)
        message = self.composer.compose(code, purpose_tag, resend=resend)
        try:
            result = await dispatcher.send(identifier.value, message)
        except DeliveryError as e:
            result = DeliveryResult(
                success=False,
                error_code=e.code,
                error_message=e.message,
                user_message=e.user_message,
            )

        if not result.success:
            logger.error(
                "OTP delivery failed",
                identifier=identifier.fingerprint,
                channel=identifier.kind.value,
                provider=dispatcher.name,
                error_code=result.error_code,
                error=result.error_message,
            )
            return IssueOutcome(
                identifier=identifier,
                purpose=purpose_tag,
                delivered=False,
                error=result.user_message,
            )

        logger.info(
            "OTP delivered",
            identifier=identifier.fingerprint,
            channel=identifier.kind.value,
            provider=dispatcher.name,
            resend=resend,
        )
        return IssueOutcome(
            identifier=identifier,
            purpose=purpose_tag,
            delivered=True,
            message_id=result.provider_message_id,
        )

    async def request_code(
        self,
        raw_identifier: str,
        kind: Optional[IdentifierKind] = None,
        purpose: Union[OTPPurpose, str] = OTPPurpose.SIGNIN,
        resend: bool = False,
        rate_limit_scope: Optional[str] = None,
    ) -> IssueOutcome:
        """
        Issue a code for an identifier and deliver it.

        Args:
            raw_identifier: User-supplied email address or phone number
            kind: Expected identifier kind; detected when omitted
            purpose: Purpose tag stored with the code
            resend: Use the "new code" wording in the message
            rate_limit_scope: Give this request its own admission window

        Returns:
            IssueOutcome; ``delivered=False`` means the code was stored but the
            provider did not accept the message

        Raises:
            InvalidIdentifierError: If the identifier is malformed
            RateLimitExceeded: If the identifier is over its request cap
        """
        identifier = parse_identifier(raw_identifier, kind)
        self._dispatcher_for(identifier.kind)
        await self.admit(identifier, rate_limit_scope)
        return await self.deliver_code(identifier, purpose, resend=resend)

    async def verify_code(
        self,
        raw_identifier: str,
        code: str,
        kind: Optional[IdentifierKind] = None,
        consume_on_success: bool = True,
    ) -> VerificationResult:
        """
        Verify a submitted code.

        Raises:
            InvalidIdentifierError: If the identifier is malformed
            InvalidCodeFormatError: If the code is not six digits
        """
        identifier = parse_identifier(raw_identifier, kind)
        validate_code_format(code)
        return await self.ledger.verify(identifier.value, code, consume_on_success)
