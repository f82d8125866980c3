"""
Shared fixtures for otpgate-core tests.
"""

from unittest.mock import AsyncMock

import pytest

from otpgate_core.dispatch import BaseDeliveryDispatcher, DeliveryResult
from otpgate_core.storage import InMemoryStateStore


class FakeClock:
    """Manually advanced clock, epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingDispatcher(BaseDeliveryDispatcher):
    """Dispatcher that keeps every message instead of sending it."""

    name = "recording"

    def __init__(self, fail_with: str = None):
        super().__init__()
        self.sent = []
        self.fail_with = fail_with

    async def send(self, destination, message) -> DeliveryResult:
        self.sent.append((destination, message))
        if self.fail_with:
            return DeliveryResult(
                success=False,
                error_code="500",
                error_message="provider down",
                user_message=self.fail_with,
            )
        return DeliveryResult(success=True, provider_message_id=f"msg_{len(self.sent)}")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryStateStore(clock=clock)


@pytest.fixture
def email_dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def sms_dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def directory():
    """Identity directory with no accounts."""
    mock = AsyncMock()
    mock.find_by_email.return_value = None
    mock.find_by_phone.return_value = None
    return mock


@pytest.fixture
def failing_dispatcher():
    return RecordingDispatcher(fail_with="Failed to send verification email. Please try again.")
