"""Data models for the taskflow backend."""

from taskflow.backend.models.api import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    Envelope,
    ErrorEnvelope,
    LoginRequest,
    LoginResponse,
    Message,
    ok,
    ProjectCreate,
    ProjectDetail,
    ProjectResponse,
    ProjectUpdate,
    RefreshRequest,
    TokenPairResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    WorkspaceCreate,
    WorkspaceDetail,
    WorkspaceResponse,
    WorkspaceUpdate,
    error_responses,
)
from taskflow.backend.models.auth import AuthenticatedUser, TokenPair

__all__ = [
    # Auth
    "AuthenticatedUser",
    # Board
    "BoardCreate",
    "BoardResponse",
    "BoardUpdate",
    # Envelope
    "Envelope",
    "ErrorEnvelope",
    "LoginRequest",
    "LoginResponse",
    "Message",
    # Project
    "ProjectCreate",
    "ProjectDetail",
    "ProjectResponse",
    "ProjectUpdate",
    "RefreshRequest",
    "TokenPair",
    "TokenPairResponse",
    # User
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    # Workspace
    "WorkspaceCreate",
    "WorkspaceDetail",
    "WorkspaceResponse",
    "WorkspaceUpdate",
    "error_responses",
    "ok",
]
