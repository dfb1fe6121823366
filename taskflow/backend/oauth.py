"""Google OAuth 2.0 authorization-code client.

Only the two calls the login flow needs: build the consent URL, and turn the
callback ``code`` into a profile (token exchange + userinfo).  The resulting
profile is matched to a local user by email; Google's own tokens are not
kept.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskflow.backend.errors import ValidationError

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class GoogleProfile(BaseModel):
    """Subset of the OpenID Connect userinfo response we use."""

    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None

    @property
    def display_name(self) -> str | None:
        if self.name:
            return self.name
        joined = " ".join(part for part in (self.given_name, self.family_name) if part)
        return joined or None


class GoogleOAuthClient:
    """Authorization-code flow against Google's endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._http = http_client or httpx.AsyncClient(timeout=10.0)

    def authorization_url(self, state: str | None = None) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange *code* for an access token and read the user's profile.

        Raises ``httpx.HTTPStatusError`` if Google rejects either call and
        ``ValidationError`` if a response body is not the expected JSON.
        """
        token_resp = await self._http.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": self._redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        token_resp.raise_for_status()
        access_token = _json_object(token_resp).get("access_token")
        if not isinstance(access_token, str) or not access_token:
            msg = "Google token response did not include an access token"
            raise ValidationError(msg)

        info_resp = await self._http.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        info_resp.raise_for_status()
        try:
            return GoogleProfile.model_validate(_json_object(info_resp))
        except PydanticValidationError:
            raise ValidationError("Malformed Google userinfo response") from None

    async def aclose(self) -> None:
        await self._http.aclose()


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        raise ValidationError(f"Malformed response from {response.request.url.host}") from None
    if not isinstance(body, dict):
        raise ValidationError(f"Malformed response from {response.request.url.host}")
    return body
