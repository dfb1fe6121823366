"""Refresh-token registry backends."""

from taskflow.backend.tokens.base import TokenStore
from taskflow.backend.tokens.memory import InMemoryTokenStore
from taskflow.backend.tokens.redis import RedisTokenStore

__all__ = ["InMemoryTokenStore", "RedisTokenStore", "TokenStore"]
