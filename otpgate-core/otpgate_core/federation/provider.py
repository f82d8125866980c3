"""
Identity Provider Client
========================
Authorization-code exchange and profile lookup against Google.
"""

from typing import Optional

import httpx
from pydantic import BaseModel

from ..http import BaseProviderClient
from .models import FederationConfig


class TokenResponse(BaseModel):
    access_token: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None


class ProviderProfile(BaseModel):
    email: str
    id: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    verified_email: Optional[bool] = None


class GoogleIdentityProvider(BaseProviderClient):
    """OAuth 2.0 authorization-code client for Google."""

    def __init__(
        self,
        config: FederationConfig,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        super().__init__(
            base_url=config.token_url,
            service_name=config.provider,
            client=client,
            **kwargs,
        )
        self.config = config

    async def exchange_code(self, code: str) -> TokenResponse:
        """
        Exchange an authorization code for tokens.

        Codes are single-use, so this call is never retried.
        """
        return await self._request(
            "POST",
            self.config.token_url,
            data={
                "client_id": self.config.client_id or "",
                "client_secret": self.config.client_secret or "",
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.config.redirect_uri,
            },
            response_model=TokenResponse,
            retry=False,
        )

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Fetch the signed-in user's profile."""
        return await self.get(
            self.config.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"},
            response_model=ProviderProfile,
        )
