"""
Federation Handshake Manager
============================
Issues anti-forgery state tokens for the OAuth authorization-code flow and
correlates them on callback.

The consumer of ``complete_handshake`` is a browser mid-redirect, so every
failure becomes a redirect to the error page instead of an exception.
"""

import secrets
import time
from typing import Callable, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog

from ..directory import DirectorySession, IdentityDirectory
from ..errors import DirectoryError, FederationNotConfiguredError
from ..http import ProviderError
from ..storage import StateStore
from .models import FederationConfig, HandshakeOutcome, HandshakeStart, HandshakeState
from .provider import GoogleIdentityProvider, ProviderProfile, TokenResponse

logger = structlog.get_logger(__name__)

ERROR_PROVIDER_DENIED = "Google authentication failed"
ERROR_INVALID_REQUEST = "Invalid authentication request"
ERROR_INVALID_STATE = "Invalid session state"
ERROR_TOKEN_EXCHANGE = "Token exchange failed"
ERROR_PROFILE = "Failed to get user information"
ERROR_GENERIC = "Authentication failed"


def _with_params(url: str, params: Dict[str, str]) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)
    return urlunsplit(parts._replace(query=urlencode(query)))


class FederationHandshakeManager:
    """Begins and completes federated logins."""

    namespace = "oauth_state"

    def __init__(
        self,
        store: StateStore,
        config: FederationConfig,
        provider: GoogleIdentityProvider,
        directory: IdentityDirectory,
        clock: Callable[[], float] = time.time,
        token_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.config = config
        self.provider = provider
        self.directory = directory
        self._clock = clock
        self._token_factory = token_factory or (lambda: secrets.token_urlsafe(32))

    def _error(self, message: str) -> HandshakeOutcome:
        url = _with_params(self.config.error_url, {"message": message, "app": self.config.app_name})
        return HandshakeOutcome(redirect_url=url, success=False, error=message)

    async def begin_handshake(self, redirect_to: Optional[str] = None) -> HandshakeStart:
        """
        Start a login: store a fresh state token and build the provider URL.

        Raises:
            FederationNotConfiguredError: If no client id is configured
        """
        if not self.config.is_configured:
            raise FederationNotConfiguredError("Identity provider client id is not set")

        now = self._clock()
        handshake = HandshakeState(
            state=self._token_factory(),
            redirect_to=redirect_to or self.config.default_redirect,
            created_at=now,
        )
        await self.store.set(
            self.namespace,
            handshake.state,
            handshake.to_dict(),
            expires_at=now + self.config.state_ttl_seconds,
        )
        await self.sweep_expired()

        auth_url = _with_params(self.config.authorize_url, {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": self.config.scope,
            "state": handshake.state,
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        })

        logger.info("Federated login started", provider=self.config.provider)
        return HandshakeStart(auth_url=auth_url, state=handshake.state)

    async def _take_state(self, state: Optional[str]) -> Optional[HandshakeState]:
        """Remove ``state`` unconditionally and return it if still valid."""
        if not state:
            return None

        data = await self.store.pop(self.namespace, state)
        if data is None:
            return None

        handshake = HandshakeState.from_dict(data)
        if handshake.is_expired(self._clock(), self.config.state_ttl_seconds):
            return None
        return handshake

    async def complete_handshake(
        self,
        code: Optional[str],
        state: Optional[str],
        provider_error: Optional[str] = None,
    ) -> HandshakeOutcome:
        """
        Handle the provider callback.

        The state token is consumed before anything else, whether or not the
        rest of the callback succeeds.
        """
        handshake = await self._take_state(state)

        if provider_error:
            logger.warning("Provider returned an error", provider_error=provider_error)
            return self._error(ERROR_PROVIDER_DENIED)

        if not code or not state:
            logger.warning("Callback missing code or state")
            return self._error(ERROR_INVALID_REQUEST)

        if handshake is None:
            logger.warning("Callback with unknown, used or expired state")
            return self._error(ERROR_INVALID_STATE)

        try:
            tokens = await self.provider.exchange_code(code)
        except ProviderError as e:
            logger.error("Token exchange failed", error=str(e))
            return self._error(ERROR_TOKEN_EXCHANGE)

        try:
            profile = await self.provider.fetch_profile(tokens.access_token)
        except ProviderError as e:
            logger.error("Profile fetch failed", error=str(e))
            return self._error(ERROR_PROFILE)

        try:
            session = await self._reconcile(tokens, profile)
        except (DirectoryError, ProviderError) as e:
            logger.error("Directory reconciliation failed", error=str(e))
            return self._error(ERROR_GENERIC)
        except Exception as e:
            # Browser callbacks always get a redirect
            logger.exception("Unexpected error completing federated login", error=str(e))
            return self._error(ERROR_GENERIC)

        redirect_url = _with_params(handshake.redirect_to, {
            "success": "true",
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "user_id": session.user_id,
            "email": profile.email,
            "full_name": profile.name or "",
            "avatar_url": profile.picture or "",
            "is_new_user": str(session.is_new_user).lower(),
            "app": self.config.app_name,
        })

        logger.info(
            "Federated login completed",
            provider=self.config.provider,
            is_new_user=session.is_new_user,
        )
        return HandshakeOutcome(
            redirect_url=redirect_url,
            success=True,
            user_id=session.user_id,
            is_new_user=session.is_new_user,
        )

    async def _reconcile(self, tokens: TokenResponse, profile: ProviderProfile) -> DirectorySession:
        """Log in the directory account for ``profile``, creating it if needed."""
        if tokens.id_token:
            session = await self.directory.sign_in_with_id_token(self.config.provider, tokens.id_token)
            if session is not None:
                return session

        logger.info("No directory account, creating one", provider=self.config.provider)
        password = secrets.token_urlsafe(24)
        await self.directory.sign_up(
            profile.email,
            password,
            metadata={"full_name": profile.name, "avatar_url": profile.picture},
        )
        session = await self.directory.sign_in_with_password(profile.email, password)
        session.is_new_user = True
        return session

    async def sweep_expired(self) -> int:
        """Drop state tokens whose login was never completed."""
        return await self.store.prune(self.namespace)

    async def pending_count(self) -> int:
        """Number of outstanding state tokens."""
        return await self.store.count(self.namespace)
