"""Board CRUD operations.

Boards are ordered within a project by ascending ``position``; equal
positions fall back to newest first.
"""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.backend.db.tables import Board
from taskflow.backend.errors import ProjectNotFoundError
from taskflow.backend.managers.ids import parse_filter, parse_id
from taskflow.backend.managers.projects import project_exists
from taskflow.backend.models.api import BoardCreate, BoardUpdate


async def create_board(db: AsyncSession, body: BoardCreate) -> Board:
    """Create a board.  Raises ``ProjectNotFoundError`` if the project is missing."""
    if not await project_exists(db, body.project_id):
        raise ProjectNotFoundError

    board = Board(
        project_id=body.project_id,
        name=body.name,
        description=body.description,
        position=body.position,
    )
    db.add(board)
    await db.commit()
    await db.refresh(board)
    return board


async def list_boards(db: AsyncSession, *, project_id: str | None = None) -> list[Board]:
    """List boards by position, then newest first.

    Raises ``InvalidFilterError`` if *project_id* is not a UUID.
    """
    parent = parse_filter(project_id, "project")
    stmt = select(Board).order_by(Board.position.asc(), Board.created_at.desc())
    if parent is not None:
        stmt = stmt.where(Board.project_id == parent)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_board(db: AsyncSession, board_id: str | uuid.UUID) -> Board | None:
    return await db.get(Board, parse_id(board_id, "board"))


async def update_board(db: AsyncSession, board_id: str | uuid.UUID, body: BoardUpdate) -> Board | None:
    """Partially update a board.  Returns ``None`` if missing.

    Moving the board to another project re-checks that the target exists; on
    failure the stored row is left untouched.
    """
    board = await get_board(db, board_id)
    if board is None:
        return None

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        return board

    target = changes.get("project_id")
    if target is not None and target != board.project_id and not await project_exists(db, target):
        raise ProjectNotFoundError

    for key, value in changes.items():
        setattr(board, key, value)

    await db.commit()
    await db.refresh(board)
    return board


async def delete_board(db: AsyncSession, board_id: str | uuid.UUID) -> bool:
    """Delete a board.  Returns whether a row was removed."""
    pk = parse_id(board_id, "board")
    result = await db.execute(delete(Board).where(Board.id == pk))
    await db.commit()
    return result.rowcount > 0
