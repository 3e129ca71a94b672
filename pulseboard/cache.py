from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Typed snapshot for a single cache key."""

    payload: Any = None
    fetched_at: float
    provider: str | None = None


class RecentlyUsed:
    """Insertion-ordered set that forgets its oldest member past *size*."""

    def __init__(self, size: int = 5) -> None:
        self.size = size
        self._items: OrderedDict[Hashable, None] = OrderedDict()

    def __contains__(self, item: Hashable) -> bool:
        return item in self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: Hashable) -> None:
        self._items.pop(item, None)
        self._items[item] = None
        while len(self._items) > self.size:
            self._items.popitem(last=False)

    def clear(self) -> None:
        self._items.clear()

    def items(self) -> list[Hashable]:
        return list(self._items)


class CacheStore:
    """Process-wide in-memory cache for a single-worker async app.

    Entries are replaced wholesale on ``put`` and never deleted.  Concurrent
    requests for the same stale key may each refetch; the last write wins.
    The store also owns the bounded "recently shown" sets used for
    duplicate suppression, so every piece of shared state lives here.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        recent_size: int = 5,
    ) -> None:
        self._clock = clock
        self._recent_size = recent_size
        self._store: dict[str, CacheEntry] = {}
        self._recent: dict[str, RecentlyUsed] = {}

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> CacheEntry | None:
        return self._store.get(key)

    def put(self, key: str, payload: Any, provider: str | None = None) -> CacheEntry:
        entry = CacheEntry(
            payload=payload,
            fetched_at=self._clock(),
            provider=provider,
        )
        self._store[key] = entry
        return entry

    def is_fresh(self, entry: CacheEntry, max_age: float) -> bool:
        return (self._clock() - entry.fetched_at) < max_age

    def recent(self, name: str) -> RecentlyUsed:
        """Return the named dedup set, creating it on first use."""
        if name not in self._recent:
            self._recent[name] = RecentlyUsed(self._recent_size)
        return self._recent[name]

    def keys(self) -> list[str]:
        return list(self._store.keys())

    def timestamps(self) -> dict[str, float]:
        """Return {key: fetched_at} for every cached query."""
        return {k: v.fetched_at for k, v in self._store.items()}
