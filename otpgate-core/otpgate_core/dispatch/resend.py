"""
Resend Email Dispatcher
=======================
Delivers passcodes by email through the Resend API.
"""

import httpx
from typing import Optional
import structlog

from .base import BaseDeliveryDispatcher, DeliveryResult
from .messages import OutboundMessage

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_EMAIL_ERROR = "Failed to send verification email. Please try again."


class ResendEmailDispatcher(BaseDeliveryDispatcher):
    """Resend email delivery."""

    name = "resend"

    def __init__(
        self,
        api_key: str,
        sender: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: Resend API key
            sender: From header, e.g. "App <noreply@example.com>"
            client: Preconfigured HTTP client (tests)
        """
        super().__init__()
        self.api_key = api_key
        self.sender = sender
        self._client = client

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        await super().initialize()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        """Send email via Resend."""
        if not self._client:
            await self.initialize()

        payload = {
            "from": self.sender,
            "to": destination,
            "subject": message.subject,
            "text": message.text,
        }
        if message.html:
            payload["html"] = message.html

        try:
            response = await self._client.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )

            if response.status_code in (200, 201):
                data = response.json()
                return DeliveryResult(
                    success=True,
                    provider_message_id=data.get("id"),
                    raw_response=data,
                )

            error_data = response.json()
            logger.error(
                "Resend send rejected",
                status_code=response.status_code,
                error_name=error_data.get("name"),
            )
            return DeliveryResult(
                success=False,
                error_code=str(error_data.get("name", response.status_code)),
                error_message=error_data.get("message", "Unknown error"),
                user_message=DEFAULT_EMAIL_ERROR,
                raw_response=error_data,
            )
        except Exception as e:
            logger.error("Resend send failed", error=str(e))
            return DeliveryResult(
                success=False,
                error_message=str(e),
                user_message=DEFAULT_EMAIL_ERROR,
            )
