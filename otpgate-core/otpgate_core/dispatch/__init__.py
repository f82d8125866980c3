"""
Delivery Dispatch
=================
Channels that carry a generated code to the user.
"""

from .messages import OutboundMessage, MessageComposer
from .base import BaseDeliveryDispatcher, DeliveryResult
from .resend import ResendEmailDispatcher, RESEND_API_URL
from .twilio import TwilioSMSDispatcher, TWILIO_ERROR_MESSAGES

__all__ = [
    # Messages
    "OutboundMessage",
    "MessageComposer",
    # Base
    "BaseDeliveryDispatcher",
    "DeliveryResult",
    # Providers
    "ResendEmailDispatcher",
    "RESEND_API_URL",
    "TwilioSMSDispatcher",
    "TWILIO_ERROR_MESSAGES",
]
