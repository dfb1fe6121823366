"""Domain exception taxonomy.

Managers raise these; they never raise HTTP exceptions.  Each class carries
the HTTP status the boundary maps it to (see ``app.py`` exception handlers),
so routers only need to handle the "absent" results that are not errors.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# -- 400 ----------------------------------------------------------------------


class ValidationError(TaskflowError, ValueError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Validation error"


class InvalidIdError(ValidationError):
    """A path identifier is not a well-formed UUID."""

    default_message = "Invalid id"


class InvalidFilterError(ValidationError):
    """A list filter value is not a well-formed UUID."""

    default_message = "Invalid filter"


class ConflictError(TaskflowError):
    status_code = 400
    default_message = "Conflict"


class EmailAlreadyExistsError(ConflictError):
    default_message = "Email already exists"


# -- 401 ----------------------------------------------------------------------


class AuthError(TaskflowError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentialsError(AuthError):
    default_message = "Invalid credentials"


class InvalidRefreshTokenError(AuthError):
    default_message = "Invalid refresh token"


class InvalidAccessTokenError(AuthError):
    default_message = "Invalid access token"


class MissingTokenError(AuthError):
    default_message = "Missing bearer token"


# -- 404 ----------------------------------------------------------------------


class NotFoundError(TaskflowError, LookupError):
    status_code = 404
    default_message = "Not found"


class WorkspaceNotFoundError(NotFoundError):
    default_message = "Workspace not found"


class ProjectNotFoundError(NotFoundError):
    default_message = "Project not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


# -- 503 ----------------------------------------------------------------------


class ServiceUnavailableError(TaskflowError):
    """A backing service (database, OAuth provider) is not configured."""

    status_code = 503
    default_message = "Service unavailable"
