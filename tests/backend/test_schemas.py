"""Unit tests for request schemas and identifier parsing."""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from taskflow.backend.errors import InvalidFilterError, InvalidIdError
from taskflow.backend.managers.ids import parse_filter, parse_id
from taskflow.backend.models.api import (
    BoardCreate,
    BoardUpdate,
    LoginResponse,
    ProjectCreate,
    ProjectUpdate,
    UserCreate,
    WorkspaceCreate,
    WorkspaceUpdate,
)


def test_name_is_trimmed() -> None:
    body = WorkspaceCreate(name="  Roadmap  ")
    assert body.name == "Roadmap"
    assert body.description is None


@pytest.mark.parametrize("name", ["", "   ", "x" * 192])
def test_name_bounds(name: str) -> None:
    with pytest.raises(ValidationError):
        WorkspaceCreate(name=name)


def test_description_limit() -> None:
    WorkspaceCreate(name="ok", description="d" * 1000)
    with pytest.raises(ValidationError):
        WorkspaceCreate(name="ok", description="d" * 1001)


def test_camel_case_input() -> None:
    ws = uuid.uuid4()
    body = ProjectCreate.model_validate({"workspaceId": str(ws), "name": "P"})
    assert body.workspace_id == ws


def test_parent_id_must_be_uuid() -> None:
    with pytest.raises(ValidationError):
        ProjectCreate.model_validate({"workspaceId": "not-a-uuid", "name": "P"})


def test_board_position() -> None:
    pid = uuid.uuid4()
    assert BoardCreate(project_id=pid, name="B").position == 0
    with pytest.raises(ValidationError):
        BoardCreate(project_id=pid, name="B", position=-1)


def test_partial_update_tracks_only_sent_fields() -> None:
    body = BoardUpdate.model_validate({"position": 3})
    assert body.model_dump(exclude_unset=True) == {"position": 3}


def test_update_may_clear_description() -> None:
    body = WorkspaceUpdate.model_validate({"description": None})
    assert body.model_dump(exclude_unset=True) == {"description": None}


@pytest.mark.parametrize(
    ("model", "payload"),
    [
        (WorkspaceUpdate, {"name": None}),
        (ProjectUpdate, {"workspaceId": None}),
        (BoardUpdate, {"position": None}),
    ],
)
def test_update_rejects_null_for_required_fields(model: type, payload: dict) -> None:
    with pytest.raises(ValidationError, match="cannot be null"):
        model.model_validate(payload)


def test_user_email_validated() -> None:
    with pytest.raises(ValidationError):
        UserCreate(name="A", email="not-an-email")


def test_login_response_serializes_camel_case() -> None:
    payload = LoginResponse.model_validate(
        {
            "access_token": "a",
            "refresh_token": "r",
            "user": {"id": uuid.uuid4(), "name": "A", "email": "a@example.com", "created_at": "2026-01-01T00:00:00Z"},
        }
    ).model_dump(by_alias=True)
    assert set(payload) == {"accessToken", "refreshToken", "user"}
    assert "createdAt" in payload["user"]


# ---------------------------------------------------------------------------
# Identifier parsing
# ---------------------------------------------------------------------------


def test_parse_id() -> None:
    value = uuid.uuid4()
    assert parse_id(str(value), "board") == value
    assert parse_id(value, "board") == value


def test_parse_id_malformed() -> None:
    with pytest.raises(InvalidIdError, match="Invalid board id"):
        parse_id("123", "board")


def test_parse_filter() -> None:
    assert parse_filter(None, "project") is None
    with pytest.raises(InvalidFilterError, match="Invalid project id"):
        parse_filter("abc", "project")
