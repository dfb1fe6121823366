"""Token-lifecycle domain models.

Kept apart from the HTTP schemas in ``api.py``: these are what the auth
manager hands around internally, independent of wire naming.
"""

from __future__ import annotations

from pydantic import BaseModel


class TokenPair(BaseModel):
    """A freshly issued access/refresh token pair."""

    access_token: str
    refresh_token: str


class AuthenticatedUser(BaseModel):
    """Identity carried by a verified access token."""

    id: str
    email: str
