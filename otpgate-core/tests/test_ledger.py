"""
Tests for OTP generation and the verification state machine.
"""

import asyncio
from itertools import cycle

import pytest

from otpgate_core.errors import InvalidCodeFormatError
from otpgate_core.otp import (
    ERROR_EXPIRED,
    ERROR_LOCKED,
    ERROR_NOT_FOUND,
    OTPConfig,
    OTPLedger,
    OTPPurpose,
    VerificationStatus,
    codes_match,
    generate_otp,
    validate_code_format,
)


def fixed_codes(*codes):
    """Code factory returning the given codes in turn."""
    source = cycle(codes)
    return lambda: next(source)


class TestCodes:
    """Tests for code generation and shape checks."""

    def test_generate_otp_range(self):
        """Should generate six digits without a leading zero."""
        for _ in range(200):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_generate_otp_length(self):
        assert len(generate_otp(length=8)) == 8

    @pytest.mark.parametrize("code", ["12345", "1234567", "12a456", "", "123456\n", "١٢٣٤٥٦"])
    def test_rejects_bad_shape(self, code):
        """Should accept exactly six ASCII digits."""
        with pytest.raises(InvalidCodeFormatError) as exc:
            validate_code_format(code)
        assert exc.value.user_message == "OTP must be a 6-digit number"

    def test_accepts_six_digits(self):
        assert validate_code_format("012345") == "012345"

    def test_codes_match(self):
        assert codes_match("123456", "123456") is True
        assert codes_match("123457", "123456") is False


class TestOTPLedger:
    """Tests for the verification state machine."""

    @pytest.fixture
    def ledger(self, store, clock):
        return OTPLedger(store, clock=clock, code_factory=fixed_codes("123456"))

    @pytest.mark.asyncio
    async def test_end_to_end_scenario(self, ledger):
        """Wrong code, then right code, then replay."""
        code = await ledger.issue("a@b.com", "signin")
        assert code == "123456"

        wrong = await ledger.verify("a@b.com", "654321", True)
        assert wrong.is_valid is False
        assert wrong.status == VerificationStatus.LIVE
        assert wrong.remaining_attempts == 2
        assert wrong.error == "Invalid OTP. 2 attempt(s) remaining."

        right = await ledger.verify("a@b.com", "123456", True)
        assert right.is_valid is True
        assert right.status == VerificationStatus.CONSUMED
        assert right.purpose == "signin"

        replay = await ledger.verify("a@b.com", "123456", True)
        assert replay.is_valid is False
        assert replay.status == VerificationStatus.ABSENT
        assert replay.error == ERROR_NOT_FOUND

    @pytest.mark.asyncio
    async def test_absent(self, ledger):
        result = await ledger.verify("nobody@example.com", "123456")
        assert result.status == VerificationStatus.ABSENT

    @pytest.mark.asyncio
    async def test_reissue_invalidates_prior_code(self, store, clock):
        """Should reject the old code once a new one is issued."""
        ledger = OTPLedger(store, clock=clock, code_factory=fixed_codes("111111", "222222"))
        await ledger.issue("a@b.com")
        await ledger.issue("a@b.com")

        old = await ledger.verify("a@b.com", "111111")
        assert old.is_valid is False

        new = await ledger.verify("a@b.com", "222222")
        assert new.is_valid is True

    @pytest.mark.asyncio
    async def test_reissue_resets_attempts(self, ledger):
        await ledger.issue("a@b.com")
        await ledger.verify("a@b.com", "000000")
        await ledger.verify("a@b.com", "000000")

        await ledger.issue("a@b.com")
        result = await ledger.verify("a@b.com", "000000")

        assert result.remaining_attempts == 2

    @pytest.mark.asyncio
    async def test_locked_after_max_attempts(self, ledger):
        """Should lock after three wrong codes, even for the right code."""
        await ledger.issue("a@b.com")
        remaining = []
        for _ in range(3):
            result = await ledger.verify("a@b.com", "999999")
            remaining.append(result.remaining_attempts)
        assert remaining == [2, 1, 0]

        locked = await ledger.verify("a@b.com", "123456")
        assert locked.is_valid is False
        assert locked.status == VerificationStatus.LOCKED
        assert locked.error == ERROR_LOCKED

        after = await ledger.verify("a@b.com", "123456")
        assert after.status == VerificationStatus.ABSENT

    @pytest.mark.asyncio
    async def test_expired(self, ledger, clock):
        """Should report expiry even for the right code with no attempts."""
        await ledger.issue("a@b.com")
        clock.advance(601)

        result = await ledger.verify("a@b.com", "123456")

        assert result.status == VerificationStatus.EXPIRED
        assert result.error == ERROR_EXPIRED
        assert (await ledger.verify("a@b.com", "123456")).status == VerificationStatus.ABSENT

    @pytest.mark.asyncio
    async def test_valid_at_expiry_boundary(self, ledger, clock):
        await ledger.issue("a@b.com")
        clock.advance(600)

        result = await ledger.verify("a@b.com", "123456")

        assert result.is_valid is True

    @pytest.mark.asyncio
    async def test_expiry_checked_before_lockout(self, ledger, clock):
        """An expired and exhausted record reports expired."""
        await ledger.issue("a@b.com")
        for _ in range(3):
            await ledger.verify("a@b.com", "999999")
        clock.advance(601)

        result = await ledger.verify("a@b.com", "123456")

        assert result.status == VerificationStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_absent_after_retention(self, ledger, clock):
        """Past the retention deadline a record is simply gone."""
        await ledger.issue("a@b.com")
        clock.advance(1200)

        result = await ledger.verify("a@b.com", "123456")

        assert result.status == VerificationStatus.ABSENT

    @pytest.mark.asyncio
    async def test_mark_verified_then_consume(self, ledger):
        """Non-consuming verify keeps the record for a later consuming call."""
        await ledger.issue("a@b.com", OTPPurpose.PASSWORD_RESET)

        pending = await ledger.verify("a@b.com", "123456", consume_on_success=False)
        assert pending.is_valid is True
        assert pending.status == VerificationStatus.VERIFIED_PENDING
        assert pending.purpose == "password_reset"

        again = await ledger.verify("a@b.com", "123456", consume_on_success=False)
        assert again.is_valid is True

        consumed = await ledger.verify("a@b.com", "123456", consume_on_success=True)
        assert consumed.status == VerificationStatus.CONSUMED

    @pytest.mark.asyncio
    async def test_wrong_code_after_mark_verified_counts(self, ledger):
        """Wrong codes still count against a verified-pending record."""
        await ledger.issue("a@b.com")
        await ledger.verify("a@b.com", "123456", consume_on_success=False)

        wrong = await ledger.verify("a@b.com", "000000", consume_on_success=False)

        assert wrong.is_valid is False
        assert wrong.remaining_attempts == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, ledger):
        await ledger.issue("a@b.com")

        assert await ledger.invalidate("a@b.com") is True
        assert (await ledger.verify("a@b.com", "123456")).status == VerificationStatus.ABSENT

    @pytest.mark.asyncio
    async def test_sweep(self, ledger, clock):
        await ledger.issue("a@b.com")
        await ledger.issue("c@d.com")
        clock.advance(1200)

        assert await ledger.sweep() == 2

    @pytest.mark.asyncio
    async def test_custom_config(self, store, clock):
        ledger = OTPLedger(
            store,
            OTPConfig(expiry_seconds=60, max_attempts=1, retention_seconds=0),
            clock=clock,
            code_factory=fixed_codes("123456"),
        )
        await ledger.issue("a@b.com")

        wrong = await ledger.verify("a@b.com", "000000")
        assert wrong.remaining_attempts == 0
        assert (await ledger.verify("a@b.com", "123456")).status == VerificationStatus.LOCKED

    @pytest.mark.asyncio
    async def test_concurrent_wrong_codes_are_serialized(self, ledger):
        """Concurrent verifies must each see the previous attempt count."""
        await ledger.issue("a@b.com")

        results = await asyncio.gather(*[
            ledger.verify("a@b.com", "000000") for _ in range(4)
        ])

        assert sorted(r.remaining_attempts for r in results[:3]) == [0, 1, 2]
        assert results[3].status == VerificationStatus.LOCKED
