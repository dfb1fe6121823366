"""API request / response schemas.

These thin schemas sit between HTTP and the ORM layer:

- **Create** schemas validate user input and provide defaults.
- **Update** schemas allow partial updates via ``exclude_unset``.
- **Response** schemas serialize ORM rows via ``from_attributes``.

Field names are snake_case in Python and camelCase on the wire; inputs
accept both spellings.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from taskflow.backend.db.tables import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=DESCRIPTION_MAX_LENGTH)]
Position = Annotated[int, Field(ge=0, description="Ascending sort key within a project.")]

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialUpdate(CamelModel):
    """Base for update schemas.

    Omitted fields are left untouched.  Fields listed in ``non_nullable`` may
    be omitted but not sent as ``null``.
    """

    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> PartialUpdate:
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{to_camel(name)} cannot be null"
                raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class Envelope(BaseModel, Generic[DataT]):
    """Uniform success wrapper returned by every endpoint."""

    success: bool = True
    data: DataT


class ErrorEnvelope(BaseModel):
    """Uniform failure wrapper."""

    success: bool = False
    error: str


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses=`` entries declaring the failure envelope for *status_codes*."""
    return {code: {"model": ErrorEnvelope} for code in status_codes}


class Message(BaseModel):
    message: str


def ok(data: object) -> dict[str, object]:
    """Wrap *data* in a success envelope; the route's ``response_model`` serializes it."""
    return {"success": True, "data": data}


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class UserCreate(CamelModel):
    name: Name
    email: EmailStr


class UserUpdate(PartialUpdate):
    non_nullable = ("name", "email")

    name: Name | None = None
    email: EmailStr | None = None


class UserResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(CamelModel):
    name: Name
    description: Description | None = None


class WorkspaceUpdate(PartialUpdate):
    non_nullable = ("name",)

    name: Name | None = None
    description: Description | None = None


class WorkspaceResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class ProjectCreate(CamelModel):
    workspace_id: uuid.UUID
    name: Name
    description: Description | None = None


class ProjectUpdate(PartialUpdate):
    non_nullable = ("workspace_id", "name")

    workspace_id: uuid.UUID | None = None
    name: Name | None = None
    description: Description | None = None


class ProjectResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


class BoardCreate(CamelModel):
    project_id: uuid.UUID
    name: Name
    description: Description | None = None
    position: Position = 0


class BoardUpdate(PartialUpdate):
    non_nullable = ("project_id", "name", "position")

    project_id: uuid.UUID | None = None
    name: Name | None = None
    description: Description | None = None
    position: Position | None = None


class BoardResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    description: str | None = None
    position: int
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Nested detail views (single-resource GET)
# ---------------------------------------------------------------------------


class ProjectDetail(ProjectResponse):
    """Project with its boards, ordered by position."""

    boards: list[BoardResponse] = Field(default_factory=list)


class WorkspaceDetail(WorkspaceResponse):
    """Workspace with its projects and their boards."""

    projects: list[ProjectDetail] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(CamelModel):
    email: EmailStr


class RefreshRequest(CamelModel):
    refresh_token: Annotated[str, StringConstraints(min_length=1)]


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    user: UserResponse
