"""FastAPI dependency injection for DB sessions, auth and OAuth.

Usage in route handlers::

    @router.post("")
    async def create_thing(body: ThingCreate, db: DbSession, user: CurrentUser) -> dict:
        ...

Dependencies raise ``ServiceUnavailableError`` (503) if the backing service
was not configured (TASKFLOW_DATABASE_URL unset, Google credentials unset).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.backend.errors import MissingTokenError, ServiceUnavailableError
from taskflow.backend.managers.auth import AuthManager
from taskflow.backend.models.auth import AuthenticatedUser
from taskflow.backend.oauth import GoogleOAuthClient
from taskflow.backend.settings import TaskflowSettings, get_settings

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    Managers commit on success.  If the handler raises, the session is simply
    closed and the open transaction is rolled back.
    """
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise ServiceUnavailableError("Database not configured (TASKFLOW_DATABASE_URL is unset).")
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


def get_auth_manager(request: Request) -> AuthManager:
    """Return the process-wide auth manager created in the lifespan."""
    manager: AuthManager | None = request.app.state.auth_manager
    if manager is None:
        raise ServiceUnavailableError("Auth manager not initialised.")
    return manager


def get_google_client(request: Request) -> GoogleOAuthClient:
    client: GoogleOAuthClient | None = request.app.state.google_oauth
    if client is None:
        raise ServiceUnavailableError("Google OAuth not configured.")
    return client


def get_current_user(
    manager: Annotated[AuthManager, Depends(get_auth_manager)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AuthenticatedUser:
    """Authentication gate: require a valid ``Authorization: Bearer`` access token."""
    if credentials is None or not credentials.credentials.strip():
        raise MissingTokenError
    return manager.verify_access_token(credentials.credentials.strip())


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

Auth = Annotated[AuthManager, Depends(get_auth_manager)]
"""Annotated dependency: shared token manager."""

GoogleClient = Annotated[GoogleOAuthClient, Depends(get_google_client)]
"""Annotated dependency: Google OAuth client (503 when unconfigured)."""

CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
"""Annotated dependency: identity from a verified access token (401 otherwise)."""

Settings = Annotated[TaskflowSettings, Depends(get_settings)]
"""Annotated dependency: cached service settings."""
