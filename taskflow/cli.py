"""``taskflow`` command line: run the API and create its database schema."""

from __future__ import annotations

import click

from taskflow.backend.log import setup_logging
from taskflow.backend.settings import get_settings


@click.group()
def main() -> None:
    """Taskflow - task-management REST backend."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: TASKFLOW_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: TASKFLOW_PORT or 4000).")
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes (development).")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    # log_config=None leaves uvicorn's loggers to the loguru bridge set up above.
    uvicorn.run(
        "taskflow.backend.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@main.group()
def db() -> None:
    """Database schema commands."""


@db.command("init")
@click.option(
    "--database-url",
    envvar="TASKFLOW_DATABASE_URL",
    default=None,
    help="PostgreSQL URL (default: TASKFLOW_DATABASE_URL).",
)
@click.option("--sql", "as_sql", is_flag=True, default=False, help="Print the DDL instead of executing it.")
def init_db(database_url: str | None, as_sql: bool) -> None:
    """Create the schema, or bring an existing one up to date."""
    if not database_url:
        raise click.UsageError("Set TASKFLOW_DATABASE_URL or pass --database-url.")

    from taskflow.backend.db import migrate

    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)
    migrate.upgrade_schema(database_url, sql=as_sql)
    if not as_sql:
        click.echo("Database is ready.")


if __name__ == "__main__":
    main()
