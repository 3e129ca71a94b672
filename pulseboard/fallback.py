"""Selection from small pools with "recently shown" suppression."""
from __future__ import annotations

import random
from collections.abc import Callable, Hashable, Sequence
from typing import TypeVar

from pulseboard.cache import RecentlyUsed

T = TypeVar("T")


def pick_fresh(
    items: Sequence[T],
    rng: random.Random,
    recent: RecentlyUsed,
    key: Callable[[T], Hashable] = lambda item: item,
    min_available: int = 1,
    limit: int | None = None,
) -> T:
    """Pick uniformly among *items* not in *recent*, then remember the pick.

    If fewer than *min_available* items remain after the exclusion, the
    recent set is cleared and the pick is made from the whole pool.  With
    *limit*, only the first *limit* remaining items are eligible.
    """
    if not items:
        raise ValueError("cannot pick from an empty pool")
    available = [item for item in items if key(item) not in recent]
    if len(available) < min_available:
        recent.clear()
        available = list(items)
    if limit is not None:
        available = available[:limit]
    choice = rng.choice(available)
    recent.add(key(choice))
    return choice


def small_delta(rng: random.Random, spread: float = 2.0) -> float:
    """Uniform value in [-spread, spread]."""
    return (rng.random() * 2 - 1) * spread
