"""Workspace CRUD endpoints.  All routes require a bearer access token."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from taskflow.backend.deps import DbSession, get_current_user
from taskflow.backend.managers import workspaces as manager
from taskflow.backend.models.api import (
    Envelope,
    Message,
    WorkspaceCreate,
    WorkspaceDetail,
    WorkspaceResponse,
    WorkspaceUpdate,
    error_responses,
    ok,
)

router = APIRouter(
    prefix="/workspaces",
    tags=["workspaces"],
    dependencies=[Depends(get_current_user)],
    responses=error_responses(400, 401, 404, 503),
)


@router.get("", response_model=Envelope[list[WorkspaceResponse]])
async def list_workspaces(db: DbSession) -> dict:
    """List all workspaces, newest first."""
    return ok(await manager.list_workspaces(db))


@router.post("", response_model=Envelope[WorkspaceResponse], status_code=status.HTTP_201_CREATED)
async def create_workspace(body: WorkspaceCreate, db: DbSession) -> dict:
    """Create a new workspace."""
    return ok(await manager.create_workspace(db, body))


@router.get("/{workspace_id}", response_model=Envelope[WorkspaceDetail])
async def get_workspace(workspace_id: str, db: DbSession) -> dict:
    """Get a workspace together with its projects and boards."""
    workspace = await manager.get_workspace(db, workspace_id)
    if workspace is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return ok(workspace)


@router.put("/{workspace_id}", response_model=Envelope[WorkspaceResponse])
async def update_workspace(workspace_id: str, body: WorkspaceUpdate, db: DbSession) -> dict:
    """Partially update a workspace."""
    workspace = await manager.update_workspace(db, workspace_id, body)
    if workspace is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return ok(workspace)


@router.delete("/{workspace_id}", response_model=Envelope[Message])
async def delete_workspace(workspace_id: str, db: DbSession) -> dict:
    """Delete a workspace and everything under it."""
    if not await manager.delete_workspace(db, workspace_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return ok({"message": "Workspace deleted successfully"})
