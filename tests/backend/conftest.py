"""Shared fixtures for backend tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.backend.app import app
from taskflow.backend.db.tables import User
from taskflow.backend.deps import get_db
from taskflow.backend.managers.auth import AuthManager
from taskflow.backend.tokens.memory import InMemoryTokenStore

ACCESS_SECRET = "test-access-secret"  # noqa: S105
REFRESH_SECRET = "test-refresh-secret"  # noqa: S105


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def auth_manager(token_store: InMemoryTokenStore) -> AuthManager:
    return AuthManager(token_store, access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


def _reset_state(manager: AuthManager) -> None:
    # The lifespan does not run under ASGITransport, so state fields are pre-set.
    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.redis = None
    app.state.auth_manager = manager
    app.state.google_oauth = None


@pytest.fixture
async def bare_client(auth_manager: AuthManager) -> AsyncIterator[AsyncClient]:
    """HTTP client with no database configured (no Docker needed)."""
    _reset_state(auth_manager)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def client(db_session: AsyncSession, auth_manager: AuthManager) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a test DB session.

    Overrides ``get_db`` so every request uses the savepoint-isolated
    ``db_session`` fixture from the root conftest.
    """

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    _reset_state(auth_manager)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(db_session: AsyncSession) -> User:
    row = User(name="Alice", email="alice@example.com")
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row


@pytest.fixture
async def auth_headers(auth_manager: AuthManager, user: User) -> dict[str, str]:
    """Bearer header for ``user``."""
    tokens = await auth_manager.issue_tokens(user)
    return {"Authorization": f"Bearer {tokens.access_token}"}
