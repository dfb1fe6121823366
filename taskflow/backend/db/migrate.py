"""Schema bootstrap: bring a database up to the packaged Alembic head.

Used by ``taskflow db init`` and by the integration test fixtures, so both
create the schema the same way.
"""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from loguru import logger

from taskflow.backend.db.engine import normalize_url

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def alembic_config(database_url: str) -> Config:
    """Build an Alembic config pointing at *database_url* (psycopg dialect)."""
    cfg = Config(str(ALEMBIC_INI))
    # ConfigParser interpolation treats "%" specially; URL-encoded passwords contain it.
    cfg.set_main_option("sqlalchemy.url", normalize_url(database_url).replace("%", "%%"))
    return cfg


def upgrade_schema(database_url: str, *, sql: bool = False) -> None:
    """Create the schema, or apply any revisions it is missing.

    With *sql*, print the DDL instead of executing it.
    """
    logger.info("Bringing schema to head{}", " (SQL only)" if sql else "")
    command.upgrade(alembic_config(database_url), "head", sql=sql)
