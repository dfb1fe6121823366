"""Auth manager -- issues, verifies, rotates and revokes JWT token pairs.

The AuthManager is a process-level singleton initialised in the app lifespan.
It signs two kinds of token with separate secrets:

- **Access token**: ``{sub, email}``, short-lived, verified statelessly on
  every protected request.
- **Refresh token**: ``{sub}``, long-lived, honoured only while registered
  in the ``TokenStore``.  Each refresh redeems it exactly once and issues a
  new pair (rotation).

Every token also carries a random ``jti`` so two tokens minted for the same
user in the same second never compare equal.

Individual methods accept an ``AsyncSession`` (DB) parameter where they need
to read users, following FastAPI's per-request dependency injection pattern.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt
from loguru import logger

from taskflow.backend.errors import InvalidAccessTokenError, InvalidCredentialsError, InvalidRefreshTokenError
from taskflow.backend.managers import users
from taskflow.backend.models.auth import AuthenticatedUser, TokenPair

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from taskflow.backend.db.tables import User
    from taskflow.backend.settings import TaskflowSettings
    from taskflow.backend.tokens.base import TokenStore

ALGORITHM = "HS256"


class AuthManager:
    """Owns the token secrets and the refresh-token registry.

    Instantiated once during app lifespan; holds no per-request state.
    """

    def __init__(
        self,
        store: TokenStore,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl: int = 15 * 60,
        refresh_ttl: int = 7 * 24 * 60 * 60,
    ) -> None:
        self._store = store
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: TaskflowSettings, store: TokenStore) -> AuthManager:
        return cls(
            store,
            access_secret=settings.resolve_access_token_secret(),
            refresh_secret=settings.resolve_refresh_token_secret(),
            access_ttl=settings.access_token_expires_in,
            refresh_ttl=settings.refresh_token_expires_in,
        )

    @property
    def store(self) -> TokenStore:
        return self._store

    # -- Login -----------------------------------------------------------------

    async def login(self, db: AsyncSession, email: str) -> tuple[User, TokenPair]:
        """Issue tokens for the user with *email* (case-insensitive).

        Raises ``InvalidCredentialsError`` if no such user exists.
        """
        user = await users.find_user_by_email(db, email)
        if user is None:
            raise InvalidCredentialsError
        tokens = await self.issue_tokens(user)
        logger.info("Login: user {}", user.id)
        return user, tokens

    async def issue_tokens(self, user: User) -> TokenPair:
        """Sign a new access/refresh pair and register the refresh token."""
        user_id = str(user.id)
        access_token = self._sign({"sub": user_id, "email": user.email}, self._access_secret, self._access_ttl)
        refresh_token = self._sign({"sub": user_id}, self._refresh_secret, self._refresh_ttl)
        await self._store.put(refresh_token, user_id, self._refresh_ttl)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    # -- Refresh / logout ------------------------------------------------------

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenPair:
        """Redeem *refresh_token* for a new pair.

        The token is removed from the registry before anything else is
        checked, so it is spent whether or not the exchange succeeds, and a
        concurrent second redemption finds nothing.
        """
        owner = await self._store.pop(refresh_token)
        if owner is None:
            logger.warning("Refresh rejected: token not registered")
            raise InvalidRefreshTokenError

        try:
            payload = jwt.decode(
                refresh_token,
                self._refresh_secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.warning("Refresh rejected: {}", exc)
            raise InvalidRefreshTokenError from None

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidRefreshTokenError("Invalid refresh token payload")

        if subject != owner:
            logger.warning("Refresh rejected: registry owner {} != subject {}", owner, subject)
            raise InvalidRefreshTokenError("Refresh token mismatch")

        try:
            user_id = uuid.UUID(subject)
        except ValueError:
            raise InvalidRefreshTokenError("Invalid refresh token payload") from None

        user = await users.get_user(db, user_id)
        if user is None:
            raise InvalidRefreshTokenError("User not found")

        return await self.issue_tokens(user)

    async def logout(self, refresh_token: str) -> None:
        """Revoke *refresh_token*.  Unknown tokens are ignored."""
        await self._store.discard(refresh_token)

    # -- Access ----------------------------------------------------------------

    def verify_access_token(self, token: str) -> AuthenticatedUser:
        """Verify signature and expiry; return the embedded identity.

        Raises ``InvalidAccessTokenError`` on any failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._access_secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidAccessTokenError("Access token expired") from None
        except jwt.InvalidTokenError:
            raise InvalidAccessTokenError from None

        subject = payload.get("sub")
        email = payload.get("email")
        if not isinstance(subject, str) or not subject or not isinstance(email, str) or not email:
            raise InvalidAccessTokenError("Invalid access token payload")

        return AuthenticatedUser(id=subject, email=email)

    # -- Helpers ---------------------------------------------------------------

    @staticmethod
    def _sign(claims: dict[str, Any], secret: str, ttl: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)
