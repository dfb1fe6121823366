"""Project CRUD operations.

A project belongs to exactly one workspace, which must exist when the project
is created or moved.  Deleting a project removes its boards in the same
transaction.
"""

from __future__ import annotations

import uuid

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.backend.db.tables import Board, Project
from taskflow.backend.errors import WorkspaceNotFoundError
from taskflow.backend.managers.ids import parse_filter, parse_id
from taskflow.backend.managers.workspaces import workspace_exists
from taskflow.backend.models.api import ProjectCreate, ProjectUpdate


async def create_project(db: AsyncSession, body: ProjectCreate) -> Project:
    """Create a project.  Raises ``WorkspaceNotFoundError`` if the workspace is missing."""
    if not await workspace_exists(db, body.workspace_id):
        raise WorkspaceNotFoundError

    project = Project(
        workspace_id=body.workspace_id,
        name=body.name,
        description=body.description,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


async def list_projects(db: AsyncSession, *, workspace_id: str | None = None) -> list[Project]:
    """List projects, newest first, optionally within one workspace.

    Raises ``InvalidFilterError`` if *workspace_id* is not a UUID.
    """
    parent = parse_filter(workspace_id, "workspace")
    stmt = select(Project).order_by(Project.created_at.desc())
    if parent is not None:
        stmt = stmt.where(Project.workspace_id == parent)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_project(db: AsyncSession, project_id: str | uuid.UUID) -> Project | None:
    """Get a project with its boards loaded, or ``None`` if missing."""
    pk = parse_id(project_id, "project")
    stmt = (
        select(Project)
        .where(Project.id == pk)
        .options(selectinload(Project.boards))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def project_exists(db: AsyncSession, project_id: uuid.UUID) -> bool:
    result = await db.execute(select(Project.id).where(Project.id == project_id))
    return result.first() is not None


async def update_project(db: AsyncSession, project_id: str | uuid.UUID, body: ProjectUpdate) -> Project | None:
    """Partially update a project.  Returns ``None`` if missing.

    Moving the project to another workspace re-checks that the target exists;
    on failure the stored row is left untouched.
    """
    project = await db.get(Project, parse_id(project_id, "project"))
    if project is None:
        return None

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        return project

    target = changes.get("workspace_id")
    if target is not None and target != project.workspace_id and not await workspace_exists(db, target):
        raise WorkspaceNotFoundError

    for key, value in changes.items():
        setattr(project, key, value)

    await db.commit()
    await db.refresh(project)
    return project


async def delete_project(db: AsyncSession, project_id: str | uuid.UUID) -> bool:
    """Delete a project and its boards in one transaction.

    Returns whether the project row existed.
    """
    pk = parse_id(project_id, "project")

    try:
        boards = await db.execute(delete(Board).where(Board.project_id == pk))
        result = await db.execute(delete(Project).where(Project.id == pk))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    deleted = result.rowcount > 0
    if deleted:
        logger.info("Project deleted: {} (boards={})", pk, boards.rowcount)
    return deleted
