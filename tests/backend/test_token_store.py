"""Unit tests for InMemoryTokenStore.

No database or Docker required.
"""

from __future__ import annotations

import asyncio

import pytest

from taskflow.backend.tokens.base import TokenStore
from taskflow.backend.tokens.memory import InMemoryTokenStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryTokenStore:
    return InMemoryTokenStore(clock=clock)


def test_satisfies_protocol(store: InMemoryTokenStore) -> None:
    assert isinstance(store, TokenStore)


async def test_put_then_pop(store: InMemoryTokenStore) -> None:
    await store.put("tok", "user-1", ttl_seconds=60)
    assert await store.pop("tok") == "user-1"
    # Popped tokens are gone.
    assert await store.pop("tok") is None


async def test_pop_unknown(store: InMemoryTokenStore) -> None:
    assert await store.pop("nope") is None


async def test_discard(store: InMemoryTokenStore) -> None:
    await store.put("tok", "user-1", ttl_seconds=60)
    await store.discard("tok")
    assert await store.pop("tok") is None

    # Discarding an unknown token is a no-op.
    await store.discard("never-seen")


async def test_expired_entry_is_absent(store: InMemoryTokenStore, clock: FakeClock) -> None:
    await store.put("tok", "user-1", ttl_seconds=60)
    clock.now += 61
    assert await store.pop("tok") is None


async def test_put_purges_expired_entries(store: InMemoryTokenStore, clock: FakeClock) -> None:
    await store.put("old", "user-1", ttl_seconds=10)
    clock.now += 11
    await store.put("new", "user-2", ttl_seconds=10)
    assert len(store) == 1


async def test_concurrent_pop_yields_owner_once(store: InMemoryTokenStore) -> None:
    await store.put("tok", "user-1", ttl_seconds=60)
    results = await asyncio.gather(*(store.pop("tok") for _ in range(5)))
    assert results.count("user-1") == 1
    assert results.count(None) == 4
