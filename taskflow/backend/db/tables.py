"""SQLAlchemy ORM models for PostgreSQL.

These are the single source of truth for the database schema.  Alembic reads
``Base.metadata`` to autogenerate migration scripts.

Ownership is strictly parent -> child: a workspace owns its projects, a
project owns its boards.  Foreign keys carry ``ON DELETE CASCADE`` so the
store itself never keeps orphans; the managers additionally delete
descendants explicitly inside one transaction.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Timezone-aware timestamp type for all datetime columns.  Defaults use
# clock_timestamp() rather than now() so rows written in one transaction
# still order by insertion time.
TimestampTZ = DateTime(timezone=True)

NAME_MAX_LENGTH = 191
DESCRIPTION_MAX_LENGTH = 1000


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


# Apply naming convention to the metadata for deterministic constraint names.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.clock_timestamp())


# Case-insensitive uniqueness lives in the database, not only in the manager.
Index("uq_users_email_lower", func.lower(User.email), unique=True)


class Workspace(Base):
    __tablename__ = "workspaces"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.clock_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, server_default=func.clock_timestamp(), onupdate=func.clock_timestamp()
    )

    projects: Mapped[list[Project]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
        order_by=lambda: Project.created_at.desc(),
    )


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_workspace_id", "workspace_id"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE", name="fk_projects_workspace_id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.clock_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, server_default=func.clock_timestamp(), onupdate=func.clock_timestamp()
    )

    workspace: Mapped[Workspace] = relationship(back_populates="projects", lazy="raise")
    boards: Mapped[list[Board]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
        order_by=lambda: (Board.position.asc(), Board.created_at.desc()),
    )


class Board(Base):
    __tablename__ = "boards"
    __table_args__ = (
        Index("ix_boards_project_id_position", "project_id", "position"),
        CheckConstraint("position >= 0", name="position_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE", name="fk_boards_project_id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    position: Mapped[int] = mapped_column(default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.clock_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, server_default=func.clock_timestamp(), onupdate=func.clock_timestamp()
    )

    project: Mapped[Project] = relationship(back_populates="boards", lazy="raise")
