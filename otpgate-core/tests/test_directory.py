"""
Tests for the Supabase identity directory.
"""

import json

import httpx
import pytest

from otpgate_core.directory import SupabaseDirectory
from otpgate_core.errors import DirectoryError

SESSION = {
    "access_token": "sb-access",
    "refresh_token": "sb-refresh",
    "user": {"id": "user-1", "email": "a@b.com"},
}


def make_directory(handler) -> SupabaseDirectory:
    return SupabaseDirectory(
        "https://project.supabase.co",
        "service-role",
        anon_key="anon",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        max_attempts=1,
    )


class TestProfileLookup:
    """Tests for find_by_email and find_by_phone."""

    @pytest.mark.asyncio
    async def test_find_by_email(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["params"] = dict(request.url.params)
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=[
                {"id": "user-1", "email": "a@b.com", "full_name": "Alice", "phone": None},
            ])

        user = await make_directory(handler).find_by_email("a@b.com")

        assert user.id == "user-1"
        assert user.full_name == "Alice"
        assert captured["path"] == "/rest/v1/profiles"
        assert captured["params"]["email"] == "eq.a@b.com"
        assert captured["params"]["limit"] == "1"
        assert captured["auth"] == "Bearer service-role"

    @pytest.mark.asyncio
    async def test_find_by_phone_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        assert await make_directory(handler).find_by_phone("+50937123456") is None

    @pytest.mark.asyncio
    async def test_lookup_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        with pytest.raises(DirectoryError):
            await make_directory(handler).find_by_email("a@b.com")


class TestAuth:
    """Tests for sign-in, sign-up and password updates."""

    @pytest.mark.asyncio
    async def test_sign_in_with_id_token(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["grant_type"] = request.url.params["grant_type"]
            captured["body"] = json.loads(request.content)
            captured["apikey"] = request.headers["apikey"]
            return httpx.Response(200, json=SESSION)

        session = await make_directory(handler).sign_in_with_id_token("google", "eyJ.id")

        assert session.user_id == "user-1"
        assert session.access_token == "sb-access"
        assert session.is_new_user is False
        assert captured["grant_type"] == "id_token"
        assert captured["body"] == {"provider": "google", "id_token": "eyJ.id"}
        assert captured["apikey"] == "anon"

    @pytest.mark.asyncio
    async def test_sign_in_with_id_token_unknown_account(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error_description": "User not found"})

        assert await make_directory(handler).sign_in_with_id_token("google", "eyJ.id") is None

    @pytest.mark.asyncio
    async def test_sign_in_with_id_token_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(DirectoryError):
            await make_directory(handler).sign_in_with_id_token("google", "eyJ.id")

    @pytest.mark.asyncio
    async def test_sign_up_then_password_sign_in(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == "/auth/v1/signup":
                return httpx.Response(200, json={"user": {"id": "user-9", "email": "n@b.com"}})
            return httpx.Response(200, json={**SESSION, "user": {"id": "user-9"}})

        directory = make_directory(handler)
        user = await directory.sign_up("n@b.com", "pw-123456", metadata={"full_name": "Nadia"})
        session = await directory.sign_in_with_password("n@b.com", "pw-123456")

        assert user.id == "user-9"
        assert user.full_name == "Nadia"
        assert session.user_id == "user-9"
        assert json.loads(requests[0].content)["data"] == {"full_name": "Nadia"}
        assert requests[1].url.params["grant_type"] == "password"

    @pytest.mark.asyncio
    async def test_update_password(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["method"] = request.method
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "user-1"})

        await make_directory(handler).update_password("user-1", "n3w-secret")

        assert captured == {
            "method": "PUT",
            "path": "/auth/v1/admin/users/user-1",
            "body": {"password": "n3w-secret"},
        }

    @pytest.mark.asyncio
    async def test_update_password_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(DirectoryError) as exc:
            await make_directory(handler).update_password("user-1", "n3w-secret")

        assert exc.value.user_message == "Failed to update password. Please try again."


class TestMalformedReplies:
    """Unexpected response bodies surface as DirectoryError."""

    @pytest.mark.asyncio
    async def test_profile_row_without_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"email": "a@b.com"}])

        with pytest.raises(DirectoryError):
            await make_directory(handler).find_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_profile_lookup_not_a_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "unexpected"})

        with pytest.raises(DirectoryError):
            await make_directory(handler).find_by_phone("+50937123456")

    @pytest.mark.asyncio
    async def test_sign_up_without_user(self):
        """Should fail cleanly when sign-up only reports a pending confirmation."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"msg": "confirmation sent"})

        with pytest.raises(DirectoryError):
            await make_directory(handler).sign_up("n@b.com", "pw-123456")

    @pytest.mark.asyncio
    async def test_sign_up_empty_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        with pytest.raises(DirectoryError):
            await make_directory(handler).sign_up("n@b.com", "pw-123456")
