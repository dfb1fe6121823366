"""Workspace CRUD operations.

A workspace is the root of the hierarchy: it owns projects, which own boards.
Deleting a workspace removes the whole subtree in one transaction.
"""

from __future__ import annotations

import uuid

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.backend.db.tables import Board, Project, Workspace
from taskflow.backend.managers.ids import parse_id
from taskflow.backend.models.api import WorkspaceCreate, WorkspaceUpdate


async def create_workspace(db: AsyncSession, body: WorkspaceCreate) -> Workspace:
    """Create a new workspace with a freshly generated id."""
    workspace = Workspace(name=body.name, description=body.description)
    db.add(workspace)
    await db.commit()
    await db.refresh(workspace)
    return workspace


async def list_workspaces(db: AsyncSession) -> list[Workspace]:
    """List all workspaces, newest first."""
    result = await db.execute(select(Workspace).order_by(Workspace.created_at.desc()))
    return list(result.scalars().all())


async def get_workspace(db: AsyncSession, workspace_id: str | uuid.UUID) -> Workspace | None:
    """Get a workspace with its projects and their boards loaded.

    Raises ``InvalidIdError`` if *workspace_id* is malformed; returns ``None``
    if no such workspace exists.
    """
    pk = parse_id(workspace_id, "workspace")
    stmt = (
        select(Workspace)
        .where(Workspace.id == pk)
        .options(selectinload(Workspace.projects).selectinload(Project.boards))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def workspace_exists(db: AsyncSession, workspace_id: uuid.UUID) -> bool:
    result = await db.execute(select(Workspace.id).where(Workspace.id == workspace_id))
    return result.first() is not None


async def update_workspace(
    db: AsyncSession, workspace_id: str | uuid.UUID, body: WorkspaceUpdate
) -> Workspace | None:
    """Partially update a workspace.  Returns ``None`` if missing."""
    workspace = await db.get(Workspace, parse_id(workspace_id, "workspace"))
    if workspace is None:
        return None

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        return workspace

    for key, value in changes.items():
        setattr(workspace, key, value)

    await db.commit()
    await db.refresh(workspace)
    return workspace


async def delete_workspace(db: AsyncSession, workspace_id: str | uuid.UUID) -> bool:
    """Delete a workspace together with its projects and their boards.

    All three deletes run in one transaction; if any fails, nothing is
    removed.  Returns whether the workspace row existed.
    """
    pk = parse_id(workspace_id, "workspace")
    project_ids = select(Project.id).where(Project.workspace_id == pk)

    try:
        boards = await db.execute(delete(Board).where(Board.project_id.in_(project_ids)))
        projects = await db.execute(delete(Project).where(Project.workspace_id == pk))
        result = await db.execute(delete(Workspace).where(Workspace.id == pk))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    deleted = result.rowcount > 0
    if deleted:
        logger.info(
            "Workspace deleted: {} (projects={}, boards={})",
            pk,
            projects.rowcount,
            boards.rowcount,
        )
    return deleted
