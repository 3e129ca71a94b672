"""Bitcoin spot price: CoinGecko, then Alpha Vantage as backup.

There is no synthetic price; when both fail the route answers 503.
"""
from __future__ import annotations

import logging

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import NoFallbackAvailable, ProviderMalformed, ProviderRateLimited
from pulseboard.services.http import get_json, rate_limit_note, require

log = logging.getLogger(__name__)

COINGECKO_URL = "https://api.coingecko.com/api/v3/coins/bitcoin"
ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"

INTRADAY_SERIES = "Time Series Crypto (5min)"
# 5-minute bars in 24 hours
BARS_PER_DAY = 288


async def fetch_coingecko(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    data = await get_json(
        client,
        COINGECKO_URL,
        params={
            "localization": "false",
            "tickers": "false",
            "market_data": "true",
            "community_data": "false",
            "developer_data": "false",
            "sparkline": "false",
        },
    )
    price = require(data, "market_data", "current_price", "usd")
    change = data["market_data"].get("price_change_percentage_24h") or 0
    return {"price": price, "changePercent24h": change, "source": "CoinGecko"}


async def fetch_alpha_vantage(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    data = await get_json(
        client,
        ALPHA_VANTAGE_URL,
        params={
            "function": "CRYPTO_INTRADAY",
            "symbol": "BTC",
            "market": "USD",
            "interval": "5min",
            "apikey": settings.ALPHA_VANTAGE_API_KEY,
        },
    )
    note = rate_limit_note(data)
    if note:
        raise ProviderRateLimited(note)

    series = require(data, INTRADAY_SERIES)
    stamps = sorted(series, reverse=True)
    latest = series[stamps[0]]
    if not isinstance(latest, dict) or not latest.get("4. close"):
        raise ProviderMalformed("latest bar has no close price")
    price = float(latest["4. close"])

    change = 0.0
    if len(stamps) > BARS_PER_DAY:
        old = series[stamps[BARS_PER_DAY]].get("4. close")
        if old:
            old_price = float(old)
            change = (price - old_price) / old_price * 100

    return {"price": price, "changePercent24h": change, "source": "Alpha Vantage"}


def _unavailable(query: None, reason: str) -> NoFallbackAvailable:
    return NoFallbackAvailable(
        "bitcoin", "Unable to fetch real Bitcoin data", status_code=503
    )


source: Source[None] = Source(
    name="bitcoin",
    providers=(
        Provider("CoinGecko", fetch_coingecko),
        Provider("Alpha Vantage", fetch_alpha_vantage),
    ),
    schema=schemas.price_quote,
    cache_key=lambda query: "bitcoin",
    max_age=lambda: settings.CACHE_BITCOIN,
    no_fallback=_unavailable,
)
