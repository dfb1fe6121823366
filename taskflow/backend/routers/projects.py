"""Project CRUD endpoints.  All routes require a bearer access token."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from taskflow.backend.deps import DbSession, get_current_user
from taskflow.backend.managers import projects as manager
from taskflow.backend.models.api import (
    Envelope,
    Message,
    ProjectCreate,
    ProjectDetail,
    ProjectResponse,
    ProjectUpdate,
    error_responses,
    ok,
)

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    dependencies=[Depends(get_current_user)],
    responses=error_responses(400, 401, 404, 503),
)


@router.get("", response_model=Envelope[list[ProjectResponse]])
async def list_projects(
    db: DbSession,
    workspace_id: Annotated[str | None, Query(alias="workspaceId")] = None,
) -> dict:
    """List projects, newest first, optionally filtered by workspace."""
    return ok(await manager.list_projects(db, workspace_id=workspace_id))


@router.post("", response_model=Envelope[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, db: DbSession) -> dict:
    """Create a project inside an existing workspace."""
    return ok(await manager.create_project(db, body))


@router.get("/{project_id}", response_model=Envelope[ProjectDetail])
async def get_project(project_id: str, db: DbSession) -> dict:
    """Get a project together with its boards."""
    project = await manager.get_project(db, project_id)
    if project is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ok(project)


@router.put("/{project_id}", response_model=Envelope[ProjectResponse])
async def update_project(project_id: str, body: ProjectUpdate, db: DbSession) -> dict:
    """Partially update a project, optionally moving it to another workspace."""
    project = await manager.update_project(db, project_id, body)
    if project is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ok(project)


@router.delete("/{project_id}", response_model=Envelope[Message])
async def delete_project(project_id: str, db: DbSession) -> dict:
    """Delete a project and its boards."""
    if not await manager.delete_project(db, project_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ok({"message": "Project deleted successfully"})
