"""Integration fixtures: PostgreSQL and Redis in Docker via testcontainers.

The schema is created once per run with ``upgrade_schema`` (the same code
path as ``taskflow db init``).  Every test gets a session whose commits land
in a savepoint that is rolled back afterwards, and starts from empty
``users`` / ``workspaces`` / ``projects`` / ``boards`` tables.

Tests that use these fixtures should be marked ``@pytest.mark.integration``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass, field

import pytest
import redis.asyncio as aioredis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer

from taskflow.backend.db.engine import normalize_url
from taskflow.backend.db.migrate import upgrade_schema
from taskflow.backend.db.tables import Board, Project, Workspace

# Child tables first, matching the order a cascade removes them in.
HIERARCHY_TABLES = ("boards", "projects", "workspaces", "users")


@pytest.fixture(scope="session")
def database_url() -> Iterator[str]:
    """A migrated PostgreSQL 17 database, shared by the whole run."""
    with PostgresContainer(image="postgres:17", dbname="taskflow_test", driver="psycopg") as pg:
        url = normalize_url(pg.get_connection_url())
        upgrade_schema(url)
        yield url


@pytest.fixture(scope="session")
def async_engine(database_url: str) -> Iterator[AsyncEngine]:
    # NullPool: no connection outlives the event loop of the test that opened it.
    engine = create_async_engine(database_url, poolclass=NullPool)
    yield engine
    engine.sync_engine.dispose()


async def _row_counts(conn: AsyncConnection) -> dict[str, int]:
    counts = {}
    for table in HIERARCHY_TABLES:
        result = await conn.execute(text(f"SELECT count(*) FROM {table}"))  # noqa: S608
        counts[table] = result.scalar_one()
    return counts


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session whose ``commit()`` only releases a savepoint; all rows vanish at teardown."""
    async with async_engine.connect() as conn:
        await conn.begin()
        leaked = {table: n for table, n in (await _row_counts(conn)).items() if n}
        assert not leaked, f"rows left behind by an earlier test: {leaked}"

        session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
        yield session
        await session.close()
        await conn.rollback()


@dataclass
class SeededTree:
    """One workspace holding two projects with boards at mixed positions."""

    workspace: Workspace
    projects: list[Project] = field(default_factory=list)
    boards: list[Board] = field(default_factory=list)


@pytest.fixture
async def seeded_tree(db_session: AsyncSession) -> SeededTree:
    """Insert a small hierarchy directly through the ORM, bypassing the managers."""
    workspace = Workspace(name="Seeded", description="fixture")
    db_session.add(workspace)
    await db_session.flush()

    tree = SeededTree(workspace=workspace)
    for p in range(2):
        project = Project(workspace_id=workspace.id, name=f"Project {p}")
        db_session.add(project)
        await db_session.flush()
        tree.projects.append(project)
        for position in (1, 0):
            board = Board(project_id=project.id, name=f"P{p} board {position}", position=position)
            db_session.add(board)
            tree.boards.append(board)

    await db_session.commit()
    return tree


@pytest.fixture(scope="session")
def redis_url() -> Iterator[str]:
    with RedisContainer(image="redis:7") as container:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        yield f"redis://{host}:{port}/0"


@pytest.fixture
async def redis_client(redis_url: str) -> AsyncIterator[aioredis.Redis]:
    """Client on the shared Redis 7 container; its database is flushed afterwards."""
    client = aioredis.from_url(redis_url)
    yield client
    await client.flushdb()
    await client.aclose()
