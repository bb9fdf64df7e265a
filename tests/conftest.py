"""Shared pytest fixtures for the kvcache test suite."""
from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from kvcache.infrastructure.cache import TTLCache


@pytest.fixture
def cache() -> Iterator[TTLCache]:
    """A cache with no default expiration and no reaper."""
    c = TTLCache()
    yield c
    c.close()


@pytest.fixture
def evictions(cache: TTLCache) -> list[tuple[str, Any]]:
    """List that receives every (key, value) the cache fixture evicts."""
    calls: list[tuple[str, Any]] = []
    cache.on_evicted(lambda key, value: calls.append((key, value)))
    return calls
