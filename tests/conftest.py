"""
Pytest configuration and shared fixtures for PulseBoard tests.

Upstream APIs are replaced by ``FakeUpstream``, an ``httpx.MockTransport``
handler keyed on scheme://host/path, so no test touches the network.
"""

from __future__ import annotations

import random
from collections.abc import Callable

import httpx
import pytest

from pulseboard.cache import CacheStore
from pulseboard.config import settings
from pulseboard.engine import Dispatcher
from tests.fakes import FakeClock, FakeUpstream


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """No real pauses and a known key set in every test."""
    monkeypatch.setattr(settings, "ITEM_DELAY", 0.0)
    monkeypatch.setattr(settings, "RETRY_BACKOFF", 0.0)
    monkeypatch.setattr(settings, "NYT_API_KEY", "test-nyt-key")
    monkeypatch.setattr(settings, "WEATHERAPI_KEY", "")
    monkeypatch.setattr(settings, "GEOCODE_API_KEY", "test-geocode-key")
    monkeypatch.setattr(settings, "ALPHA_VANTAGE_API_KEY", "demo")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> CacheStore:
    return CacheStore(clock=clock, recent_size=5)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_dispatcher(
    upstream: FakeUpstream, cache: CacheStore, sleeps: list[float]
) -> Callable[..., Dispatcher]:
    """Build a dispatcher over the fake upstream with recorded backoff."""

    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def factory(seed: int = 1234, backoff: float = 1.0) -> Dispatcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return Dispatcher(
            client,
            cache,
            random.Random(seed),
            attempts=2,
            backoff=backoff,
            sleep=record_sleep,
        )

    return factory


@pytest.fixture
def dispatcher(make_dispatcher: Callable[..., Dispatcher]) -> Dispatcher:
    return make_dispatcher()
