"""
Delivery Dispatcher Base
========================
Base classes for passcode delivery channels (email, SMS).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
import structlog

from .messages import OutboundMessage

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryResult:
    """Result of a delivery attempt."""
    success: bool
    provider_message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None  # Technical detail, for logs
    user_message: Optional[str] = None  # Safe to show to the end user
    raw_response: Optional[Dict[str, Any]] = None


class BaseDeliveryDispatcher(ABC):
    """
    Abstract base class for delivery providers.

    Implementations report provider failure either by returning a
    ``DeliveryResult`` with ``success=False`` or by raising ``DeliveryError``.
    The engine treats both as "issued but not delivered" without unwinding
    stored state.
    """

    name: str = "base"

    def __init__(self):
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the dispatcher (e.g., create HTTP clients)."""
        self._is_initialized = True
        logger.info("Delivery dispatcher initialized", provider=self.name)

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        self._is_initialized = False
        logger.info("Delivery dispatcher closed", provider=self.name)

    @abstractmethod
    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        """
        Deliver a message.

        Args:
            destination: Email address or E.164 phone number
            message: Subject and rendered body

        Returns:
            DeliveryResult with provider response
        """
