"""
Passcode Messages
=================
Plain-text subjects and bodies for delivered codes.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class OutboundMessage:
    """Content handed to a delivery dispatcher."""
    subject: str
    text: str
    html: Optional[str] = None


class MessageComposer:
    """Builds the message for a code by purpose and channel."""

    def __init__(self, app_name: str = "OTPGate", expiry_minutes: int = 10):
        self.app_name = app_name
        self.expiry_minutes = expiry_minutes

    def _expiry_notice(self) -> str:
        return f"This code will expire in {self.expiry_minutes} minutes."

    def compose(self, code: str, purpose: str, resend: bool = False) -> OutboundMessage:
        """
        Args:
            code: The plain code
            purpose: Purpose tag the code was issued for
            resend: Whether this replaces a previously sent code
        """
        app = self.app_name

        if resend:
            return OutboundMessage(
                subject=f"Your New {app} Verification Code",
                text=(
                    f"Your new {app} verification code is: {code}. "
                    f"{self._expiry_notice()} Your previous code is no longer valid."
                ),
            )

        if purpose == "password_reset":
            return OutboundMessage(
                subject=f"Reset Your {app} Password",
                text=f"Your {app} password reset code is: {code}. {self._expiry_notice()}",
            )

        return OutboundMessage(
            subject=f"Your {app} Sign-In Verification Code",
            text=f"Your {app} sign-in verification code is: {code}. {self._expiry_notice()}",
        )
