"""Authentication endpoints: email login, token refresh/logout, Google OAuth."""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse
from loguru import logger

from taskflow.backend.deps import Auth, CurrentUser, DbSession, GoogleClient, Settings
from taskflow.backend.errors import TaskflowError, UserNotFoundError, ValidationError
from taskflow.backend.managers import users
from taskflow.backend.models.api import (
    Envelope,
    LoginRequest,
    LoginResponse,
    Message,
    RefreshRequest,
    TokenPairResponse,
    UserResponse,
    error_responses,
    ok,
)

router = APIRouter(prefix="/auth", tags=["auth"], responses=error_responses(400, 401, 503))


@router.post("/login", response_model=Envelope[LoginResponse])
async def login(body: LoginRequest, db: DbSession, auth: Auth) -> dict:
    """Exchange a registered email for an access/refresh token pair."""
    user, tokens = await auth.login(db, body.email)
    return ok({"user": user, "access_token": tokens.access_token, "refresh_token": tokens.refresh_token})


@router.post("/refresh", response_model=Envelope[TokenPairResponse])
async def refresh(body: RefreshRequest, db: DbSession, auth: Auth) -> dict:
    """Redeem a refresh token for a new pair.  Each refresh token works once."""
    tokens = await auth.refresh(db, body.refresh_token)
    return ok(tokens.model_dump())


@router.post("/logout", response_model=Envelope[Message])
async def logout(body: RefreshRequest, auth: Auth) -> dict:
    """Revoke a refresh token.  Succeeds even if the token is unknown."""
    await auth.logout(body.refresh_token)
    return ok({"message": "Logged out"})


@router.get("/me", response_model=Envelope[UserResponse])
async def me(current: CurrentUser, db: DbSession) -> dict:
    """Return the user behind the bearer access token."""
    user = await users.get_user(db, current.id)
    if user is None:
        raise UserNotFoundError
    return ok(user)


# ---------------------------------------------------------------------------
# Google OAuth
# ---------------------------------------------------------------------------


@router.get("/google")
async def google_login(google: GoogleClient) -> RedirectResponse:
    """Send the browser to Google's consent screen."""
    return RedirectResponse(google.authorization_url(), status_code=status.HTTP_302_FOUND)


@router.get("/google/callback")
async def google_callback(
    db: DbSession,
    auth: Auth,
    google: GoogleClient,
    settings: Settings,
    code: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Finish Google login and hand local tokens to the frontend via query string.

    Any failure redirects to the same frontend page with an ``error`` parameter.
    """
    target = f"{settings.frontend_url.rstrip('/')}/auth/callback"
    try:
        if error:
            raise ValidationError(f"Google sign-in failed: {error}")
        if not code:
            raise ValidationError("Missing authorization code")

        profile = await google.fetch_profile(code)
        if not profile.email:
            raise ValidationError("Google account does not provide an email address")

        user = await users.find_or_create_user(db, email=profile.email, name=profile.display_name)
        tokens = await auth.issue_tokens(user)
    except (TaskflowError, httpx.HTTPError) as exc:
        logger.warning("Google login failed: {}", exc)
        message = exc.message if isinstance(exc, TaskflowError) else "Google authentication failed"
        return RedirectResponse(f"{target}?{urlencode({'error': message})}", status_code=status.HTTP_302_FOUND)

    logger.info("Google login: user {}", user.id)
    query = urlencode({"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token})
    return RedirectResponse(f"{target}?{query}", status_code=status.HTTP_302_FOUND)
