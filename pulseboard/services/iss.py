"""International Space Station position.

Open Notify first, wheretheiss.at second.  When both are down, a position is
computed from the time of day so the marker keeps moving along a plausible
ground track.  Positions are never cached.
"""
from __future__ import annotations

import logging
import math

import httpx

from pulseboard import schemas
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import ProviderMalformed
from pulseboard.services.http import get_json, require

log = logging.getLogger(__name__)

OPEN_NOTIFY_URL = "http://api.open-notify.org/iss-now.json"
WHERE_THE_ISS_URL = "https://api.wheretheiss.at/v1/satellites/25544"

ORBIT_SECONDS = 92.68 * 60
INCLINATION_DEG = 51.6
DAY_SECONDS = 86_400


def _fmt(value: float) -> str:
    return f"{value:.4f}"


def position_payload(timestamp: int, latitude: float, longitude: float) -> dict:
    return {
        "message": "success",
        "timestamp": timestamp,
        "iss_position": {"latitude": _fmt(latitude), "longitude": _fmt(longitude)},
    }


def simulated_position(epoch_seconds: float) -> tuple[float, float]:
    """Ground-track point for *epoch_seconds*, a pure function of time of day."""
    t = epoch_seconds % DAY_SECONDS
    phase = (t % ORBIT_SECONDS) / ORBIT_SECONDS
    latitude = INCLINATION_DEG * math.sin(2 * math.pi * phase)
    # The orbit drifts west as the earth turns underneath it
    longitude = phase * 360 - t / DAY_SECONDS * 360
    longitude = (longitude + 180) % 360 - 180
    return latitude, longitude


async def fetch_open_notify(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    data = await get_json(client, OPEN_NOTIFY_URL)
    if isinstance(data, dict) and data.get("message") not in (None, "success"):
        raise ProviderMalformed(f"open-notify said {data.get('message')!r}")
    position = require(data, "iss_position")
    return position_payload(
        int(require(data, "timestamp")),
        float(require(position, "latitude")),
        float(require(position, "longitude")),
    )


async def fetch_where_the_iss(
    client: httpx.AsyncClient, query: None, ctx: Context
) -> dict:
    data = await get_json(client, WHERE_THE_ISS_URL)
    return position_payload(
        int(require(data, "timestamp")),
        float(require(data, "latitude")),
        float(require(data, "longitude")),
    )


def simulated(query: None, ctx: Context) -> dict:
    now = ctx.now()
    latitude, longitude = simulated_position(now)
    return position_payload(int(now), latitude, longitude)


source: Source[None] = Source(
    name="iss",
    providers=(
        Provider("Open Notify", fetch_open_notify),
        Provider("wheretheiss.at", fetch_where_the_iss),
    ),
    schema=schemas.iss_position,
    fallback=simulated,
)
