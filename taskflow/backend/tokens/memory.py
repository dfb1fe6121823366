"""Process-local refresh-token registry.

Suitable for a single-instance deployment only: entries vanish on restart
and are invisible to other processes.  ``pop`` contains no ``await`` between
the lookup and the delete, so on one event loop it is atomic.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class InMemoryTokenStore:
    """In-memory implementation of the TokenStore protocol."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def put(self, token: str, user_id: str, ttl_seconds: int) -> None:
        self._purge_expired()
        self._entries[token] = (user_id, self._clock() + ttl_seconds)

    async def pop(self, token: str) -> str | None:
        entry = self._entries.pop(token, None)
        if entry is None:
            return None
        user_id, expires_at = entry
        if expires_at <= self._clock():
            return None
        return user_id

    async def discard(self, token: str) -> None:
        self._entries.pop(token, None)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [token for token, (_, expires_at) in self._entries.items() if expires_at <= now]
        for token in expired:
            del self._entries[token]
