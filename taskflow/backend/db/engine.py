"""Async SQLAlchemy engine and session factory.

Uses psycopg3, which serves both the async app (``postgresql+psycopg://``)
and the synchronous Alembic migrations from the same URL.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def normalize_url(database_url: str) -> str:
    """Coerce ``postgres://`` / ``postgresql://`` / asyncpg URLs to the psycopg dialect."""
    for prefix in ("postgres://", "postgresql://", "postgresql+asyncpg://"):
        if database_url.startswith(prefix):
            return "postgresql+psycopg://" + database_url[len(prefix) :]
    return database_url


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async SQLAlchemy engine with production pool settings.

    - **pool_size=5** / **max_overflow=10**: baseline and burst connections.
    - **pool_pre_ping=True**: survive server-side disconnects.
    - **pool_recycle=3600**: recycle connections hourly.

    All defaults can be overridden via *kwargs*.
    """
    defaults = {
        "echo": False,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    defaults.update(kwargs)  # type: ignore[arg-type]
    return create_async_engine(normalize_url(database_url), **defaults)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` keeps ORM instances readable after commit
    without lazy loads, which async sessions forbid.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
