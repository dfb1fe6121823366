"""User CRUD endpoints.

Open (no bearer token): creating a user is how accounts are registered.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from taskflow.backend.deps import DbSession
from taskflow.backend.managers import users as manager
from taskflow.backend.models.api import Envelope, Message, UserCreate, UserResponse, UserUpdate, error_responses, ok

router = APIRouter(prefix="/users", tags=["users"], responses=error_responses(400, 404, 503))


@router.get("", response_model=Envelope[list[UserResponse]])
async def list_users(db: DbSession) -> dict:
    """List all users, newest first."""
    return ok(await manager.list_users(db))


@router.post("", response_model=Envelope[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: DbSession) -> dict:
    """Register a user.  Emails are unique regardless of case."""
    return ok(await manager.create_user(db, body))


@router.get("/{user_id}", response_model=Envelope[UserResponse])
async def get_user(user_id: str, db: DbSession) -> dict:
    user = await manager.get_user(db, user_id)
    if user is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    return ok(user)


@router.put("/{user_id}", response_model=Envelope[UserResponse])
async def update_user(user_id: str, body: UserUpdate, db: DbSession) -> dict:
    user = await manager.update_user(db, user_id, body)
    if user is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    return ok(user)


@router.delete("/{user_id}", response_model=Envelope[Message])
async def delete_user(user_id: str, db: DbSession) -> dict:
    if not await manager.delete_user(db, user_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    return ok({"message": "User deleted successfully"})
