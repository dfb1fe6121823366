"""Identifier parsing shared by the managers."""

from __future__ import annotations

import uuid

from taskflow.backend.errors import InvalidFilterError, InvalidIdError


def parse_id(value: str | uuid.UUID, label: str) -> uuid.UUID:
    """Parse a path identifier.  Raises ``InvalidIdError`` if malformed."""
    try:
        return _to_uuid(value)
    except ValueError:
        raise InvalidIdError(f"Invalid {label} id") from None


def parse_filter(value: str | uuid.UUID | None, label: str) -> uuid.UUID | None:
    """Parse an optional list filter.  Raises ``InvalidFilterError`` if malformed."""
    if value is None:
        return None
    try:
        return _to_uuid(value)
    except ValueError:
        raise InvalidFilterError(f"Invalid {label} id") from None


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise ValueError(value)
    return uuid.UUID(value)
