"""
Supabase Directory
==================
Identity directory backed by Supabase (PostgREST profiles + GoTrue auth).
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..errors import DirectoryError
from ..http import BaseProviderClient, NotFoundError, ProviderError, ProviderValidationError
from .base import IdentityDirectory
from .models import DirectorySession, DirectoryUser

logger = structlog.get_logger(__name__)

PROFILE_COLUMNS = "id,email,phone,full_name,username"


class ProfileRow(BaseModel):
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None


class AuthUserPayload(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSessionPayload(BaseModel):
    access_token: str
    refresh_token: str
    user: AuthUserPayload


def _is_missing_account(exc: ProviderError) -> bool:
    if isinstance(exc, NotFoundError):
        return True
    return isinstance(exc, ProviderValidationError) and "not found" in str(exc.details or "").lower()


class SupabaseDirectory(BaseProviderClient, IdentityDirectory):
    """
    Supabase implementation of ``IdentityDirectory``.

    Profile reads and admin updates use the service-role key; sign-in calls
    use the anon key, as a browser client would.
    """

    name = "supabase"

    def __init__(
        self,
        url: str,
        service_role_key: str,
        anon_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        super().__init__(
            base_url=url,
            service_name="supabase",
            headers={
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
            },
            client=client,
            **kwargs,
        )
        self.anon_key = anon_key or service_role_key

    def _anon_headers(self) -> Dict[str, str]:
        return {"apikey": self.anon_key, "Authorization": f"Bearer {self.anon_key}"}

    async def _find_profile(self, column: str, value: str) -> Optional[DirectoryUser]:
        try:
            rows: List[Dict[str, Any]] = await self.get(
                "/rest/v1/profiles",
                params={"select": PROFILE_COLUMNS, column: f"eq.{value}", "limit": "1"},
            ) or []
        except ProviderError as e:
            raise DirectoryError(f"Profile lookup failed: {e}") from e

        if not isinstance(rows, list):
            raise DirectoryError(f"Profile lookup returned {type(rows).__name__}, expected a list")
        if not rows:
            return None
        try:
            row = ProfileRow.model_validate(rows[0])
        except ValidationError as e:
            raise DirectoryError(f"Malformed profile row: {e}") from e
        return DirectoryUser(**row.model_dump())

    async def find_by_email(self, email: str) -> Optional[DirectoryUser]:
        return await self._find_profile("email", email)

    async def find_by_phone(self, phone: str) -> Optional[DirectoryUser]:
        return await self._find_profile("phone", phone)

    async def update_password(self, user_id: str, new_password: str) -> None:
        try:
            await self.put(
                f"/auth/v1/admin/users/{user_id}",
                json={"password": new_password},
                retry=False,
            )
        except ProviderError as e:
            raise DirectoryError(
                f"Password update failed: {e}",
                user_message="Failed to update password. Please try again.",
            ) from e

    def _session(self, payload: AuthSessionPayload, is_new_user: bool = False) -> DirectorySession:
        return DirectorySession(
            access_token=payload.access_token,
            refresh_token=payload.refresh_token,
            user_id=payload.user.id,
            is_new_user=is_new_user,
        )

    async def sign_in_with_id_token(self, provider: str, id_token: str) -> Optional[DirectorySession]:
        try:
            payload = await self.post(
                "/auth/v1/token",
                params={"grant_type": "id_token"},
                json={"provider": provider, "id_token": id_token},
                headers=self._anon_headers(),
                response_model=AuthSessionPayload,
                retry=False,
            )
        except ProviderError as e:
            if _is_missing_account(e):
                return None
            raise DirectoryError(f"ID token sign-in failed: {e}") from e
        return self._session(payload)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> DirectoryUser:
        try:
            data = await self.post(
                "/auth/v1/signup",
                json={"email": email, "password": password, "data": metadata or {}},
                headers=self._anon_headers(),
                retry=False,
            )
        except ProviderError as e:
            raise DirectoryError(f"Sign-up failed: {e}") from e

        if not isinstance(data, dict):
            raise DirectoryError("Sign-up returned no user")
        # GoTrue returns the user either bare or wrapped with a session
        try:
            user = AuthUserPayload.model_validate(data.get("user") or data)
        except ValidationError as e:
            raise DirectoryError(f"Sign-up returned no user: {e}") from e
        metadata = metadata or {}
        return DirectoryUser(id=user.id, email=user.email or email, full_name=metadata.get("full_name"))

    async def sign_in_with_password(self, email: str, password: str) -> DirectorySession:
        try:
            payload = await self.post(
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._anon_headers(),
                response_model=AuthSessionPayload,
                retry=False,
            )
        except ProviderError as e:
            raise DirectoryError(f"Password sign-in failed: {e}") from e
        return self._session(payload)

    async def close(self) -> None:
        await self.aclose()
