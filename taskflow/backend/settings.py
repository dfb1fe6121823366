"""Service configuration loaded from TASKFLOW_* environment variables."""

from __future__ import annotations

import secrets

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskflowSettings(BaseSettings):
    """Taskflow backend settings.

    All fields are read from environment variables with the ``TASKFLOW_`` prefix.
    For example, ``TASKFLOW_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit JSON lines instead of coloured text."""

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (``postgresql+psycopg://``).  Required for full operation."""

    redis_url: str | None = None
    """Redis connection string.  When set, refresh tokens are tracked in Redis
    instead of process memory."""

    redis_key_prefix: str = "taskflow:refresh:"

    # -- Tokens ----------------------------------------------------------------
    access_token_secret: SecretStr | None = None
    """HMAC secret for access tokens.  Generated per process if empty."""

    refresh_token_secret: SecretStr | None = None
    """HMAC secret for refresh tokens.  Must differ from the access secret."""

    access_token_expires_in: int = 15 * 60
    """Access token lifetime in seconds."""

    refresh_token_expires_in: int = 7 * 24 * 60 * 60
    """Refresh token lifetime in seconds."""

    # -- Google OAuth ----------------------------------------------------------
    google_client_id: str | None = None
    google_client_secret: SecretStr | None = None
    google_redirect_uri: str = "http://localhost:4000/auth/google/callback"

    frontend_url: str = "http://localhost:5173"
    """Where the OAuth callback sends the browser after login."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 4000
    cors_origins: list[str] = ["*"]

    # -- Helpers ---------------------------------------------------------------

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    def resolve_access_token_secret(self) -> str:
        """Return the configured access secret or generate a random one."""
        if self.access_token_secret:
            return self.access_token_secret.get_secret_value()
        return secrets.token_urlsafe(32)

    def resolve_refresh_token_secret(self) -> str:
        """Return the configured refresh secret or generate a random one."""
        if self.refresh_token_secret:
            return self.refresh_token_secret.get_secret_value()
        return secrets.token_urlsafe(32)


def get_settings() -> TaskflowSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> TaskflowSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return TaskflowSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
