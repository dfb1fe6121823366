"""User directory: lookup, create, update and delete of user rows.

Emails are unique case-insensitively.  The pre-insert lookup only exists to
produce a clean ``EmailAlreadyExistsError``; the unique index on
``lower(email)`` is what actually closes the race between two concurrent
inserts, and its ``IntegrityError`` is mapped to the same exception.
"""

from __future__ import annotations

import uuid

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.backend.db.tables import NAME_MAX_LENGTH, User
from taskflow.backend.errors import EmailAlreadyExistsError, ValidationError
from taskflow.backend.managers.ids import parse_id
from taskflow.backend.models.api import UserCreate, UserUpdate

DEFAULT_OAUTH_NAME = "Google User"


async def list_users(db: AsyncSession) -> list[User]:
    """List all users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Case-insensitive exact match on email."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()).limit(1))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: str | uuid.UUID) -> User | None:
    """Get a user by id.  Raises ``InvalidIdError`` if *user_id* is malformed."""
    return await db.get(User, parse_id(user_id, "user"))


async def create_user(db: AsyncSession, body: UserCreate) -> User:
    """Create a user.  Raises ``EmailAlreadyExistsError`` on a duplicate email."""
    if await find_user_by_email(db, body.email) is not None:
        raise EmailAlreadyExistsError

    user = User(name=body.name, email=body.email)
    db.add(user)
    await _commit_unique_email(db)
    await db.refresh(user)
    logger.info("User created: {} ({})", user.id, user.email)
    return user


async def update_user(db: AsyncSession, user_id: str | uuid.UUID, body: UserUpdate) -> User | None:
    """Partially update a user.  Returns ``None`` if the user does not exist."""
    user = await get_user(db, user_id)
    if user is None:
        return None

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        return user

    new_email = changes.get("email")
    if new_email is not None and new_email.lower() != user.email.lower():
        existing = await find_user_by_email(db, new_email)
        if existing is not None and existing.id != user.id:
            raise EmailAlreadyExistsError

    for key, value in changes.items():
        setattr(user, key, value)

    await _commit_unique_email(db)
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: str | uuid.UUID) -> bool:
    """Delete a user.  Returns whether a row was removed."""
    pk = parse_id(user_id, "user")
    result = await db.execute(delete(User).where(User.id == pk))
    await db.commit()
    return result.rowcount > 0


async def find_or_create_user(db: AsyncSession, *, email: str, name: str | None) -> User:
    """Return the user with *email*, creating one on first sight (OAuth login).

    A blank *name* falls back to ``DEFAULT_OAUTH_NAME``; an overlong one is
    cut to the column limit.  Raises ``ValidationError`` if *email* is not a
    valid address.
    """
    user = await find_user_by_email(db, email)
    if user is not None:
        return user

    display_name = (name or "").strip()[:NAME_MAX_LENGTH].strip() or DEFAULT_OAUTH_NAME
    try:
        body = UserCreate(name=display_name, email=email)
    except PydanticValidationError:
        raise ValidationError("Invalid email address in identity profile") from None
    return await create_user(db, body)


async def _commit_unique_email(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise EmailAlreadyExistsError from None
