"""Google OAuth client and callback tests.

Google's endpoints are served by ``httpx.MockTransport``; the callback route
runs with the user directory patched, so no database is required.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient

from taskflow.backend.app import app
from taskflow.backend.db.tables import NAME_MAX_LENGTH
from taskflow.backend.deps import get_db
from taskflow.backend.errors import ValidationError
from taskflow.backend.managers.auth import AuthManager
from taskflow.backend.managers.users import DEFAULT_OAUTH_NAME
from taskflow.backend.oauth import TOKEN_URL, USERINFO_URL, GoogleOAuthClient, GoogleProfile
from taskflow.backend.settings import TaskflowSettings, get_settings


def _google(handler) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id="cid",
        client_secret="csecret",  # noqa: S106
        redirect_uri="http://api.test/auth/google/callback",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _google_ok(request: httpx.Request) -> httpx.Response:
    if str(request.url) == TOKEN_URL:
        assert b"code=the-code" in request.content
        return httpx.Response(200, json={"access_token": "g-token"})
    if str(request.url) == USERINFO_URL:
        assert request.headers["Authorization"] == "Bearer g-token"
        return httpx.Response(200, json={"email": "g@example.com", "given_name": "Grace", "family_name": "Hopper"})
    return httpx.Response(404)


def test_authorization_url() -> None:
    url = urlparse(_google(_google_ok).authorization_url(state="xyz"))
    params = parse_qs(url.query)
    assert url.netloc == "accounts.google.com"
    assert params["client_id"] == ["cid"]
    assert params["response_type"] == ["code"]
    assert params["scope"] == ["openid email profile"]
    assert params["state"] == ["xyz"]


async def test_fetch_profile() -> None:
    profile = await _google(_google_ok).fetch_profile("the-code")
    assert profile.email == "g@example.com"
    assert profile.display_name == "Grace Hopper"


async def test_fetch_profile_rejected_code() -> None:
    google = _google(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
    with pytest.raises(httpx.HTTPStatusError):
        await google.fetch_profile("bad")


def test_display_name_fallbacks() -> None:
    assert GoogleProfile(name="Full Name", given_name="G").display_name == "Full Name"
    assert GoogleProfile(given_name="Only").display_name == "Only"
    assert GoogleProfile().display_name is None


# ---------------------------------------------------------------------------
# Callback route
# ---------------------------------------------------------------------------


@pytest.fixture
async def oauth_client(bare_client: AsyncClient) -> AsyncIterator[AsyncClient]:
    async def _no_db() -> AsyncIterator[None]:
        yield None

    app.dependency_overrides[get_db] = _no_db
    app.dependency_overrides[get_settings] = lambda: TaskflowSettings(frontend_url="http://front.test")
    app.state.google_oauth = _google(_google_ok)
    yield bare_client


async def test_google_login_redirects_to_consent(oauth_client: AsyncClient) -> None:
    resp = await oauth_client.get("/auth/google")
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("https://accounts.google.com/")


async def test_google_callback_issues_local_tokens(oauth_client: AsyncClient, auth_manager: AuthManager) -> None:
    user = SimpleNamespace(id=uuid.uuid4(), email="g@example.com", name="Grace Hopper")
    find_or_create = AsyncMock(return_value=user)

    with patch("taskflow.backend.managers.users.find_or_create_user", find_or_create):
        resp = await oauth_client.get("/auth/google/callback", params={"code": "the-code"})

    find_or_create.assert_awaited_once_with(None, email="g@example.com", name="Grace Hopper")
    assert resp.status_code == 302
    location = urlparse(resp.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == "http://front.test/auth/callback"

    params = parse_qs(location.query)
    identity = auth_manager.verify_access_token(params["accessToken"][0])
    assert identity.id == str(user.id)
    assert params["refreshToken"][0]


async def test_google_callback_without_code(oauth_client: AsyncClient) -> None:
    resp = await oauth_client.get("/auth/google/callback")
    assert resp.status_code == 302
    params = parse_qs(urlparse(resp.headers["location"]).query)
    assert params == {"error": ["Missing authorization code"]}


async def test_google_callback_provider_error(oauth_client: AsyncClient) -> None:
    app.state.google_oauth = _google(lambda request: httpx.Response(500))
    resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})
    params = parse_qs(urlparse(resp.headers["location"]).query)
    assert params == {"error": ["Google authentication failed"]}


async def test_google_callback_profile_without_email(oauth_client: AsyncClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "g-token"})
        return httpx.Response(200, json={"name": "No Email"})

    app.state.google_oauth = _google(handler)
    resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})
    params = parse_qs(urlparse(resp.headers["location"]).query)
    assert params == {"error": ["Google account does not provide an email address"]}


def _google_profile(profile: dict) -> GoogleOAuthClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "g-token"})
        return httpx.Response(200, json=profile)

    return _google(handler)


async def test_google_callback_blank_name_uses_default(oauth_client: AsyncClient) -> None:
    app.state.google_oauth = _google_profile({"email": "g@example.com", "name": "   "})
    created = SimpleNamespace(id=uuid.uuid4(), email="g@example.com", name=DEFAULT_OAUTH_NAME)
    create_user = AsyncMock(return_value=created)

    with (
        patch("taskflow.backend.managers.users.find_user_by_email", AsyncMock(return_value=None)),
        patch("taskflow.backend.managers.users.create_user", create_user),
    ):
        resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})

    assert resp.status_code == 302
    assert "accessToken" in parse_qs(urlparse(resp.headers["location"]).query)
    body = create_user.await_args.args[1]
    assert body.name == DEFAULT_OAUTH_NAME


async def test_google_callback_long_name_is_truncated(oauth_client: AsyncClient) -> None:
    app.state.google_oauth = _google_profile({"email": "g@example.com", "name": "n" * 300})
    created = SimpleNamespace(id=uuid.uuid4(), email="g@example.com", name="n")
    create_user = AsyncMock(return_value=created)

    with (
        patch("taskflow.backend.managers.users.find_user_by_email", AsyncMock(return_value=None)),
        patch("taskflow.backend.managers.users.create_user", create_user),
    ):
        resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})

    assert resp.status_code == 302
    assert len(create_user.await_args.args[1].name) == NAME_MAX_LENGTH


async def test_google_callback_invalid_email(oauth_client: AsyncClient) -> None:
    app.state.google_oauth = _google_profile({"email": "not-an-email", "name": "Grace"})

    with patch("taskflow.backend.managers.users.find_user_by_email", AsyncMock(return_value=None)):
        resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})

    assert resp.status_code == 302
    params = parse_qs(urlparse(resp.headers["location"]).query)
    assert params == {"error": ["Invalid email address in identity profile"]}


async def test_google_callback_non_json_token_response(oauth_client: AsyncClient) -> None:
    app.state.google_oauth = _google(lambda request: httpx.Response(200, text="<html>oops</html>"))
    resp = await oauth_client.get("/auth/google/callback", params={"code": "x"})

    assert resp.status_code == 302
    params = parse_qs(urlparse(resp.headers["location"]).query)
    assert params == {"error": ["Malformed response from oauth2.googleapis.com"]}


async def test_fetch_profile_rejects_non_object_userinfo() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "g-token"})
        return httpx.Response(200, json=["not", "an", "object"])

    with pytest.raises(ValidationError, match="Malformed response"):
        await _google(handler).fetch_profile("x")
