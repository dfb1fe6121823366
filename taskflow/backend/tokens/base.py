"""Refresh-token registry interface.

Signed JWTs cannot be revoked on their own, so every issued refresh token is
also recorded here, keyed by the token string and mapped to its owner's user
id.  A refresh token is only honoured while its entry exists; logout and
rotation remove it.

The registry is passed to ``AuthManager`` as a constructed dependency so a
single-process deployment can use the in-memory map while a multi-instance
deployment shares Redis.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenStore(Protocol):
    """Async protocol for the refresh-token registry."""

    async def put(self, token: str, user_id: str, ttl_seconds: int) -> None:
        """Record *token* as owned by *user_id* for at most *ttl_seconds*."""
        ...

    async def pop(self, token: str) -> str | None:
        """Atomically remove *token* and return its owner, or ``None`` if unknown.

        Read and delete must be one operation: two concurrent callers popping
        the same token must never both receive the owner.
        """
        ...

    async def discard(self, token: str) -> None:
        """Remove *token*.  No-op if not found."""
        ...
