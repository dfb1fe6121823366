"""Alembic environment for the taskflow schema.

The target URL is ``sqlalchemy.url`` as set by
``taskflow.backend.db.migrate.alembic_config``; TASKFLOW_DATABASE_URL is the
fallback when Alembic is driven some other way.  Logging is not configured
here: whatever loguru setup the caller made stays in effect.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from taskflow.backend.db.engine import normalize_url
from taskflow.backend.db.tables import Base
from taskflow.backend.settings import TaskflowSettings

config = context.config
target_metadata = Base.metadata


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url") or TaskflowSettings().database_url
    if not url:
        msg = "No database URL: pass --database-url or set TASKFLOW_DATABASE_URL."
        raise RuntimeError(msg)
    return normalize_url(url)


def emit_sql(url: str) -> None:
    """Write the DDL to stdout without connecting (``db init --sql``)."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def apply(url: str) -> None:
    """Run pending revisions in a single transaction on a throwaway engine."""
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata, transaction_per_migration=False)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    emit_sql(_database_url())
else:
    apply(_database_url())
