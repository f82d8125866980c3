"""
Twilio SMS Dispatcher
=====================
Delivers passcodes by SMS through the Twilio Messages API.
"""

import httpx
from typing import Optional, Dict
from base64 import b64encode
import structlog

from .base import BaseDeliveryDispatcher, DeliveryResult
from .messages import OutboundMessage

logger = structlog.get_logger(__name__)

DEFAULT_SMS_ERROR = "Failed to send SMS. Please try again."

# Twilio error codes that deserve a specific user message
TWILIO_ERROR_MESSAGES: Dict[str, str] = {
    "21211": "Invalid phone number. Please check and try again.",
    "21408": "SMS is not available for this number. Please try a different number.",
    "21610": "Phone number is not SMS capable. Please try a different number.",
}


class TwilioSMSDispatcher(BaseDeliveryDispatcher):
    """Twilio SMS delivery."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: Optional[str] = None,
        messaging_service_sid: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            account_sid: Twilio account SID ("ACxxx")
            auth_token: Twilio auth token
            from_number: Sender number, unless a messaging service is used
            messaging_service_sid: Optional messaging service ("MGxxx")
            client: Preconfigured HTTP client (tests)
        """
        super().__init__()
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.messaging_service_sid = messaging_service_sid
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{self.account_sid}"
        self._client = client

    def _auth_header(self) -> Dict[str, str]:
        auth = b64encode(f"{self.account_sid}:{self.auth_token}".encode()).decode()
        return {"Authorization": f"Basic {auth}"}

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        if self._client is None:
            self._client = httpx.AsyncClient(headers=self._auth_header(), timeout=30.0)
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        """Send SMS via Twilio."""
        if not self._client:
            await self.initialize()

        payload = {
            "To": destination,
            "Body": message.text,
        }

        if self.messaging_service_sid:
            payload["MessagingServiceSid"] = self.messaging_service_sid
        else:
            payload["From"] = self.from_number

        try:
            response = await self._client.post(
                f"{self.base_url}/Messages.json",
                data=payload,
                headers=self._auth_header(),
            )

            if response.status_code == 201:
                data = response.json()
                return DeliveryResult(
                    success=True,
                    provider_message_id=data.get("sid"),
                    raw_response=data,
                )

            error_data = response.json()
            error_code = str(error_data.get("code", response.status_code))
            logger.error(
                "Twilio send rejected",
                status_code=response.status_code,
                error_code=error_code,
            )
            return DeliveryResult(
                success=False,
                error_code=error_code,
                error_message=error_data.get("message", "Unknown error"),
                user_message=TWILIO_ERROR_MESSAGES.get(error_code, DEFAULT_SMS_ERROR),
                raw_response=error_data,
            )
        except Exception as e:
            logger.error("Twilio send failed", error=str(e))
            return DeliveryResult(
                success=False,
                error_message=str(e),
                user_message=DEFAULT_SMS_ERROR,
            )
