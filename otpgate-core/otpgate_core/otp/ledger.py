"""
OTP Ledger
==========
Keyed, expiring, attempt-bounded storage of one-time codes.

At most one record exists per identifier. Issuing overwrites the previous
record. A verify call walks the record through these checks, in order:

1. no record -> ABSENT
2. past ``expires_at`` -> record deleted, EXPIRED
3. attempts exhausted -> record deleted, LOCKED
4. wrong code -> attempts incremented, still LIVE
5. right code -> deleted (CONSUMED) or marked verified (VERIFIED_PENDING)

A VERIFIED_PENDING record stays verifiable until it is consumed or
expires, and wrong codes submitted against it still count as attempts.
"""

import time
from typing import Callable, Optional, Union

import structlog

from ..identifiers import fingerprint
from ..locks import KeyedLock
from ..storage import StateStore
from .codes import codes_match, generate_otp
from .models import (
    ERROR_EXPIRED,
    ERROR_LOCKED,
    ERROR_NOT_FOUND,
    OTPConfig,
    OTPPurpose,
    OTPRecord,
    VerificationResult,
    VerificationStatus,
)

logger = structlog.get_logger(__name__)


class OTPLedger:
    """Issues and verifies codes against a ``StateStore``."""

    namespace = "otp"

    def __init__(
        self,
        store: StateStore,
        config: Optional[OTPConfig] = None,
        clock: Callable[[], float] = time.time,
        code_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.config = config or OTPConfig()
        self._clock = clock
        self._code_factory = code_factory or (lambda: generate_otp(self.config.length))
        self._locks = KeyedLock()

    def _retain_until(self, record: OTPRecord) -> float:
        return record.expires_at + self.config.retention

    async def issue(
        self,
        identifier: str,
        purpose: Union[OTPPurpose, str] = OTPPurpose.SIGNIN,
    ) -> str:
        """
        Create a fresh code for ``identifier``, replacing any prior one.

        Args:
            identifier: Canonical email address or E.164 number
            purpose: Tag returned to the caller on successful verification

        Returns:
            The plain code, for the delivery dispatcher
        """
        purpose_tag = purpose.value if isinstance(purpose, OTPPurpose) else str(purpose)

        async with self._locks.hold(identifier):
            code = self._code_factory()
            now = self._clock()
            record = OTPRecord(
                code=code,
                purpose=purpose_tag,
                attempts=0,
                created_at=now,
                expires_at=now + self.config.expiry_seconds,
            )
            await self.store.set(
                self.namespace, identifier, record.to_dict(), self._retain_until(record),
            )

        logger.info(
            "OTP issued",
            identifier=fingerprint(identifier),
            purpose=purpose_tag,
            expires_in=self.config.expiry_seconds,
        )
        return code

    async def verify(
        self,
        identifier: str,
        submitted_code: str,
        consume_on_success: bool = True,
    ) -> VerificationResult:
        """
        Check ``submitted_code`` against the live record for ``identifier``.

        Args:
            identifier: Canonical email address or E.164 number
            submitted_code: Code entered by the user
            consume_on_success: Delete the record on a match; otherwise mark
                it verified and keep it for a later consuming call

        Returns:
            VerificationResult; the state transition is fully persisted
            before it is returned
        """
        async with self._locks.hold(identifier):
            data = await self.store.get(self.namespace, identifier)
            if data is None:
                return VerificationResult.failure(VerificationStatus.ABSENT, ERROR_NOT_FOUND)

            record = OTPRecord.from_dict(data)

            if record.is_expired(self._clock()):
                await self.store.delete(self.namespace, identifier)
                logger.warning("OTP expired", identifier=fingerprint(identifier))
                return VerificationResult.failure(VerificationStatus.EXPIRED, ERROR_EXPIRED)

            if record.attempts >= self.config.max_attempts:
                await self.store.delete(self.namespace, identifier)
                logger.warning("OTP attempts exhausted", identifier=fingerprint(identifier))
                return VerificationResult.failure(VerificationStatus.LOCKED, ERROR_LOCKED)

            if not codes_match(submitted_code, record.code):
                record.attempts += 1
                await self.store.set(
                    self.namespace, identifier, record.to_dict(), self._retain_until(record),
                )
                remaining = self.config.max_attempts - record.attempts
                logger.warning(
                    "Invalid OTP attempt",
                    identifier=fingerprint(identifier),
                    remaining=remaining,
                )
                return VerificationResult.failure(
                    VerificationStatus.LIVE,
                    f"Invalid OTP. {remaining} attempt(s) remaining.",
                    remaining_attempts=remaining,
                )

            if consume_on_success:
                await self.store.delete(self.namespace, identifier)
                status = VerificationStatus.CONSUMED
            else:
                record.verified = True
                await self.store.set(
                    self.namespace, identifier, record.to_dict(), self._retain_until(record),
                )
                status = VerificationStatus.VERIFIED_PENDING

        logger.info(
            "OTP verified successfully",
            identifier=fingerprint(identifier),
            purpose=record.purpose,
            status=status.value,
        )
        return VerificationResult.success(status, record.purpose)

    async def invalidate(self, identifier: str) -> bool:
        """Drop the record for ``identifier`` if one exists."""
        async with self._locks.hold(identifier):
            return await self.store.delete(self.namespace, identifier)

    async def sweep(self) -> int:
        """Reclaim records past their retention deadline."""
        return await self.store.prune(self.namespace)
