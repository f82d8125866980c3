"""
Federated Login
===============
OAuth authorization-code handshake with anti-forgery state tokens.
"""

from .models import (
    FederationConfig,
    HandshakeState,
    HandshakeStart,
    HandshakeOutcome,
    GOOGLE_AUTHORIZE_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
)
from .provider import GoogleIdentityProvider, TokenResponse, ProviderProfile
from .manager import FederationHandshakeManager

__all__ = [
    # Models
    "FederationConfig",
    "HandshakeState",
    "HandshakeStart",
    "HandshakeOutcome",
    "GOOGLE_AUTHORIZE_URL",
    "GOOGLE_TOKEN_URL",
    "GOOGLE_USERINFO_URL",
    # Provider
    "GoogleIdentityProvider",
    "TokenResponse",
    "ProviderProfile",
    # Manager
    "FederationHandshakeManager",
]
