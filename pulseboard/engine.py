"""Generic cache → provider chain → fallback engine.

Each data source is described once as a ``Source``: its providers in
priority order, its response schema, its cache policy and its fallback.
``Dispatcher.dispatch`` runs the same cycle for all of them::

    cache hit ─────────────────────────────► cached payload
    cache miss ─► fetch_with_fallback ─ Ok ─► write-through, live payload
                                      ├ Ok, partial ─► partial payload (uncached)
                                      └ Err ─► fallback (uncached)
                                               └ none ─► NoFallbackAvailable
"""
from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from pulseboard.cache import CacheStore
from pulseboard.errors import NoFallbackAvailable, ProviderError

log = logging.getLogger(__name__)

Q = TypeVar("Q")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class Ok:
    payload: Any
    provider: str
    # Some of the payload was synthesized to cover upstream gaps
    partial: bool = False


@dataclass(frozen=True)
class Partial:
    """Wraps a provider payload that had gaps filled with synthetic values."""

    payload: Any


@dataclass(frozen=True)
class Err:
    reasons: tuple[str, ...]

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons) or "no provider configured"


SourceResult = Union[Ok, Err]


@dataclass(frozen=True)
class Provider:
    """One upstream endpoint in a source's chain.

    ``attempts`` overrides the dispatcher default; ``enabled`` lets a
    provider drop out of the chain when it is not configured.
    """

    name: str
    fetch: Fetcher
    attempts: int | None = None
    enabled: Callable[[], bool] = lambda: True


@dataclass
class Context:
    """Shared randomness and state handed to providers and hooks."""

    rng: random.Random
    cache: CacheStore

    def now(self) -> float:
        return self.cache.now()


Fetcher = Callable[[httpx.AsyncClient, Any, Context], Awaitable[Any]]


@dataclass
class Source(Generic[Q]):
    name: str
    providers: Sequence[Provider]
    schema: TypeAdapter
    # Shape of what providers return and the cache holds, when that differs
    # from the response (e.g. a list of articles to choose from).
    payload_schema: TypeAdapter | None = None
    cache_key: Callable[[Q], str] | None = None
    max_age: Callable[[], float] | None = None
    present: Callable[[Any, Q, Context], Any] | None = None
    fallback: Callable[[Q, Context], Any] | None = None
    no_fallback: Callable[[Q, str], NoFallbackAvailable] | None = None

    def validate_payload(self, payload: Any) -> Any:
        adapter = self.payload_schema or self.schema
        return adapter.dump_python(adapter.validate_python(payload), mode="json")

    def validate_response(self, payload: Any) -> Any:
        return self.schema.dump_python(
            self.schema.validate_python(payload), mode="json"
        )


@dataclass(frozen=True)
class DispatchResult:
    payload: Any
    origin: str  # "live", "cache", "partial" or "fallback"
    provider: str | None = None

    @property
    def synthetic(self) -> bool:
        return self.origin in ("partial", "fallback")

    def headers(self) -> dict[str, str]:
        headers = {"X-Data-Origin": self.origin}
        if self.provider:
            headers["X-Data-Provider"] = self.provider
        return headers


async def fetch_with_fallback(
    providers: Sequence[Provider],
    query: Any,
    *,
    client: httpx.AsyncClient,
    context: Context,
    validator: Callable[[Any], Any] | None = None,
    attempts: int = 2,
    backoff: float = 1.0,
    sleep: Sleeper = asyncio.sleep,
) -> SourceResult:
    """Try each provider in order; never raises for provider failures."""
    reasons: list[str] = []
    for provider in providers:
        if not provider.enabled():
            log.debug("Provider %s disabled, skipping", provider.name)
            continue
        tries = provider.attempts or attempts
        for attempt in range(1, tries + 1):
            if attempt > 1 and backoff:
                await sleep(backoff)
            try:
                payload = await provider.fetch(client, query, context)
                partial = isinstance(payload, Partial)
                if partial:
                    payload = payload.payload
                if validator is not None:
                    payload = validator(payload)
            except ValidationError as e:
                reason = f"{provider.name}: malformed payload ({e.error_count()} errors)"
            except ProviderError as e:
                reason = f"{provider.name}: {type(e).__name__}: {e}"
            except Exception as e:
                # Unexpected payload shape slipped past the adapter's checks
                reason = f"{provider.name}: ProviderMalformed: {e!r}"
            else:
                return Ok(payload, provider.name, partial)
            log.warning("Attempt %d/%d failed — %s", attempt, tries, reason)
            reasons.append(reason)
    return Err(tuple(reasons))


class Dispatcher:
    """Runs the request cycle for any ``Source`` against shared state."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: CacheStore,
        rng: random.Random | None = None,
        *,
        attempts: int = 2,
        backoff: float = 1.0,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.client = client
        self.cache = cache
        self.context = Context(rng=rng or random.Random(), cache=cache)
        self.attempts = attempts
        self.backoff = backoff
        self._sleep = sleep

    def _present(self, source: Source, payload: Any, query: Any) -> Any:
        if source.present is not None:
            payload = source.present(payload, query, self.context)
        return source.validate_response(payload)

    async def dispatch(
        self,
        source: Source[Q],
        query: Q,
        *,
        force_refresh: bool = False,
    ) -> DispatchResult:
        key = None
        if source.cache_key is not None and source.max_age is not None:
            key = source.cache_key(query)

        if key is not None and not force_refresh:
            entry = self.cache.get(key)
            if entry is not None and self.cache.is_fresh(entry, source.max_age()):
                log.debug("Cache hit %s", key)
                return DispatchResult(
                    self._present(source, entry.payload, query),
                    "cache",
                    entry.provider,
                )

        result = await fetch_with_fallback(
            source.providers,
            query,
            client=self.client,
            context=self.context,
            validator=source.validate_payload,
            attempts=self.attempts,
            backoff=self.backoff,
            sleep=self._sleep,
        )
        if isinstance(result, Ok) and result.partial:
            log.warning(
                "%s returned partial %s data, not caching", result.provider, source.name
            )
            return DispatchResult(
                self._present(source, result.payload, query),
                "partial",
                result.provider,
            )
        if isinstance(result, Ok):
            if key is not None:
                self.cache.put(key, result.payload, result.provider)
            return DispatchResult(
                self._present(source, result.payload, query),
                "live",
                result.provider,
            )

        if source.fallback is None:
            log.error("All %s providers failed: %s", source.name, result.reason)
            if source.no_fallback is not None:
                raise source.no_fallback(query, result.reason)
            raise NoFallbackAvailable(
                source.name, f"Unable to fetch {source.name} data"
            )

        log.warning(
            "All %s providers failed, using fallback: %s",
            source.name,
            result.reason,
        )
        # Synthetic payloads are never cached
        payload = source.validate_response(source.fallback(query, self.context))
        return DispatchResult(payload, "fallback")
