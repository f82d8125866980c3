"""
Federation Models
=================
Configuration, state tokens and outcomes of the federated login handshake.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


@dataclass
class FederationConfig:
    """Settings for the external identity provider handshake."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    backend_url: str = "http://localhost:3001"
    frontend_url: str = "http://localhost:3000"
    app_name: str = "OTPGate"
    callback_path: str = "/api/auth/google/callback"
    default_redirect_path: str = "/auth/callback"
    error_path: str = "/auth/error"
    state_ttl_seconds: int = 600  # 10 minutes
    scope: str = "openid email profile"
    provider: str = "google"
    authorize_url: str = GOOGLE_AUTHORIZE_URL
    token_url: str = GOOGLE_TOKEN_URL
    userinfo_url: str = GOOGLE_USERINFO_URL

    @property
    def redirect_uri(self) -> str:
        return f"{self.backend_url.rstrip('/')}{self.callback_path}"

    @property
    def default_redirect(self) -> str:
        return f"{self.frontend_url.rstrip('/')}{self.default_redirect_path}"

    @property
    def error_url(self) -> str:
        return f"{self.frontend_url.rstrip('/')}{self.error_path}"

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)


@dataclass
class HandshakeState:
    """Anti-forgery state bound to one initiated login."""
    state: str
    redirect_to: str
    created_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        # Same boundary as the state store: gone at exactly the TTL
        return now - self.created_at >= ttl_seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HandshakeState":
        return cls(
            state=str(data["state"]),
            redirect_to=str(data["redirect_to"]),
            created_at=float(data["created_at"]),
        )


@dataclass
class HandshakeStart:
    """Where to send the browser to begin the provider login."""
    auth_url: str
    state: str


@dataclass
class HandshakeOutcome:
    """Where to send the browser once the callback has been handled."""
    redirect_url: str
    success: bool
    error: Optional[str] = None
    user_id: Optional[str] = None
    is_new_user: bool = False
