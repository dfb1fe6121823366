"""Board CRUD endpoints.  All routes require a bearer access token."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from taskflow.backend.deps import DbSession, get_current_user
from taskflow.backend.managers import boards as manager
from taskflow.backend.models.api import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    Envelope,
    Message,
    error_responses,
    ok,
)

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
    dependencies=[Depends(get_current_user)],
    responses=error_responses(400, 401, 404, 503),
)


@router.get("", response_model=Envelope[list[BoardResponse]])
async def list_boards(
    db: DbSession,
    project_id: Annotated[str | None, Query(alias="projectId")] = None,
) -> dict:
    """List boards by position (ties: newest first), optionally filtered by project."""
    return ok(await manager.list_boards(db, project_id=project_id))


@router.post("", response_model=Envelope[BoardResponse], status_code=status.HTTP_201_CREATED)
async def create_board(body: BoardCreate, db: DbSession) -> dict:
    return ok(await manager.create_board(db, body))


@router.get("/{board_id}", response_model=Envelope[BoardResponse])
async def get_board(board_id: str, db: DbSession) -> dict:
    board = await manager.get_board(db, board_id)
    if board is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Board not found")
    return ok(board)


@router.put("/{board_id}", response_model=Envelope[BoardResponse])
async def update_board(board_id: str, body: BoardUpdate, db: DbSession) -> dict:
    """Partially update a board, optionally moving it to another project."""
    board = await manager.update_board(db, board_id, body)
    if board is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Board not found")
    return ok(board)


@router.delete("/{board_id}", response_model=Envelope[Message])
async def delete_board(board_id: str, db: DbSession) -> dict:
    if not await manager.delete_board(db, board_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Board not found")
    return ok({"message": "Board deleted successfully"})
