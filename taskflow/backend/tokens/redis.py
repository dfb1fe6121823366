"""Redis-backed refresh-token registry.

Shared across processes, so any instance can rotate or revoke a token issued
by another.  Entries expire with the token (``SET ... EX``) and ``pop`` uses
``GETDEL`` so a token can be redeemed at most once cluster-wide.

Layout::

    {prefix}{token} -> user_id
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import redis.asyncio as aioredis


class RedisTokenStore:
    """Redis implementation of the TokenStore protocol.

    Requires Redis >= 6.2 for ``GETDEL``.
    """

    def __init__(self, client: aioredis.Redis, prefix: str = "taskflow:refresh:") -> None:
        self._client = client
        self._prefix = prefix

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def put(self, token: str, user_id: str, ttl_seconds: int) -> None:
        await self._client.set(self._key(token), user_id, ex=ttl_seconds)

    async def pop(self, token: str) -> str | None:
        value = await self._client.getdel(self._key(token))
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    async def discard(self, token: str) -> None:
        await self._client.delete(self._key(token))
