"""USGS earthquake feed.

Prefers the most recent significant quake of the past hour; otherwise shows
a random M1.5+ quake from the past day, avoiding ones shown recently.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import ProviderMalformed
from pulseboard.fallback import pick_fresh
from pulseboard.services.http import get_json

log = logging.getLogger(__name__)

FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"
SIGNIFICANT_HOUR_URL = f"{FEED_URL}/significant_hour.geojson"
DAY_URL = f"{FEED_URL}/1.0_day.geojson"
MAP_URL = "https://earthquake.usgs.gov/earthquakes/map/"

MIN_DAY_MAGNITUDE = 1.5
# Picks are made among the newest unseen quakes in the day feed
DAY_CANDIDATES = 20
# Below this many unseen quakes, repeats are allowed again
MIN_UNSEEN = 3


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def time_ago(then: datetime, now: datetime) -> str:
    """Human-readable distance like "2 hours and 5 minutes ago"."""
    minutes = int((now - then).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{_plural(minutes, 'minute')} ago"
    if hours < 24:
        rem_minutes = minutes % 60
        if rem_minutes == 0:
            return f"{_plural(hours, 'hour')} ago"
        return f"{_plural(hours, 'hour')} and {_plural(rem_minutes, 'minute')} ago"

    text = _plural(days, "day")
    if hours % 24:
        text += f" {_plural(hours % 24, 'hour')}"
    if minutes % 60:
        text += f" and {_plural(minutes % 60, 'minute')}"
    return text + " ago"


def _features(data: dict) -> list[dict]:
    features = data.get("features") if isinstance(data, dict) else None
    if not features:
        raise ProviderMalformed("feed has no features")
    return features


def _utc(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _iso(when: datetime) -> str:
    return when.isoformat().replace("+00:00", "Z")


def describe(feature: dict, now: datetime) -> dict:
    props = feature["properties"]
    when = _utc(props["time"] / 1000)
    return {
        "magnitude": props["mag"],
        "location": props["place"],
        "time": _iso(when),
        "timeAgo": time_ago(when, now),
        "url": props["url"],
    }


async def fetch_significant_hour(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    data = await get_json(client, SIGNIFICANT_HOUR_URL)
    return describe(_features(data)[0], _utc(ctx.now()))


async def fetch_past_day(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    features = _features(await get_json(client, DAY_URL))
    candidates = [
        f for f in features
        if (f.get("properties") or {}).get("mag") is not None
        and f["properties"]["mag"] >= MIN_DAY_MAGNITUDE
    ]
    if not candidates:
        candidates = features[:1]
    quake = pick_fresh(
        candidates,
        ctx.rng,
        ctx.cache.recent("earthquake"),
        key=lambda f: f.get("id"),
        min_available=min(MIN_UNSEEN, len(candidates)),
        limit=DAY_CANDIDATES,
    )
    return describe(quake, _utc(ctx.now()))


def no_events(query: None, ctx: Context) -> dict:
    return {
        "magnitude": 0,
        "location": "No significant earthquakes have been recorded recently",
        "time": _iso(_utc(ctx.now())),
        "timeAgo": "",
        "url": MAP_URL,
    }


source: Source[None] = Source(
    name="earthquake",
    providers=(
        # An empty hour is not transient; go straight to the day feed
        Provider("USGS significant hour", fetch_significant_hour, attempts=1),
        Provider("USGS past day", fetch_past_day),
    ),
    schema=schemas.earthquake,
    cache_key=lambda query: "earthquake",
    max_age=lambda: settings.CACHE_EARTHQUAKE,
    fallback=no_events,
)
