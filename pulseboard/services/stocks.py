"""Major US index moves via Alpha Vantage ETF proxies.

Alpha Vantage allows a handful of calls per minute, so indices are fetched
one at a time with a fixed pause between calls.
"""
from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Partial, Provider, Source
from pulseboard.errors import ProviderError, ProviderRateLimited, ProviderUnavailable
from pulseboard.fallback import small_delta
from pulseboard.services.http import get_json, rate_limit_note, require

log = logging.getLogger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"


class TrackedIndex(NamedTuple):
    symbol: str
    name: str
    # ETF traded as a stand-in for the index itself
    proxy: str


INDICES: tuple[TrackedIndex, ...] = (
    TrackedIndex("^GSPC", "S&P 500", "SPY"),
    TrackedIndex("^IXIC", "NASDAQ", "QQQ"),
    TrackedIndex("^DJI", "Dow", "DIA"),
)


def synthetic_quote(index: TrackedIndex, ctx: Context) -> dict:
    return {
        "symbol": index.symbol,
        "name": index.name,
        "change": small_delta(ctx.rng),
        "changePercent": small_delta(ctx.rng),
    }


def _percent(raw: str) -> float:
    try:
        return float(raw.strip().rstrip("%"))
    except ValueError:
        return 0.0


async def fetch_quote(client: httpx.AsyncClient, index: TrackedIndex) -> dict:
    data = await get_json(
        client,
        ALPHA_VANTAGE_URL,
        params={
            "function": "GLOBAL_QUOTE",
            "symbol": index.proxy,
            "apikey": settings.ALPHA_VANTAGE_API_KEY,
        },
    )
    note = rate_limit_note(data)
    if note:
        raise ProviderRateLimited(note)
    quote = require(data, "Global Quote")
    percent = require(quote, "10. change percent")
    return {
        "symbol": index.symbol,
        "name": index.name,
        "change": float(quote.get("09. change") or 0),
        "changePercent": _percent(percent),
    }


async def fetch_global_quotes(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> list[dict] | Partial:
    """Quote every index; gaps are filled with small synthetic moves.

    A filled result is returned as ``Partial`` so it is never cached as live
    data.  Fails as a whole when nothing came back or the API says we are
    throttled, since every later call would be throttled too.
    """
    results: list[dict | None] = []
    for i, index in enumerate(INDICES):
        if i and settings.ITEM_DELAY:
            await asyncio.sleep(settings.ITEM_DELAY)
        try:
            results.append(await fetch_quote(client, index))
        except ProviderRateLimited:
            raise
        except (ProviderError, ValueError) as e:
            log.warning("Quote for %s failed: %s", index.proxy, e)
            results.append(None)

    if not any(results):
        raise ProviderUnavailable("no index quotes returned")
    quotes = [
        quote if quote is not None else synthetic_quote(index, ctx)
        for index, quote in zip(INDICES, results)
    ]
    if None in results:
        return Partial(quotes)
    return quotes


def random_moves(query: None, ctx: Context) -> list[dict]:
    return [synthetic_quote(index, ctx) for index in INDICES]


source: Source[None] = Source(
    name="stocks",
    providers=(Provider("Alpha Vantage", fetch_global_quotes),),
    schema=schemas.index_quotes,
    cache_key=lambda query: "stocks",
    max_age=lambda: settings.CACHE_STOCKS,
    fallback=random_moves,
)
