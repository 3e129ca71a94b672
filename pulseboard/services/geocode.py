"""Reverse geocoding through geocode.maps.co.

Coordinates come from the ISS tile, so the key space is unbounded and
results are not cached.  A miss on the exact point is retried once with
coordinates rounded to two decimals before giving up.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import NoFallbackAvailable, ProviderMalformed
from pulseboard.services.http import get_json

log = logging.getLogger(__name__)

REVERSE_URL = "https://geocode.maps.co/reverse"


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float
    # As received, echoed back in error bodies
    raw_lat: str
    raw_lon: str

    @classmethod
    def parse(cls, lat: str, lon: str) -> Coordinates:
        return cls(float(lat), float(lon), lat, lon)

    def rounded(self) -> tuple[float, float]:
        return round(self.lat, 2), round(self.lon, 2)


async def _reverse(client: httpx.AsyncClient, lat: float, lon: float) -> dict:
    log.info("Reverse geocoding %s, %s", lat, lon)
    params = {"lat": lat, "lon": lon}
    if settings.GEOCODE_API_KEY:
        params["api_key"] = settings.GEOCODE_API_KEY
    data = await get_json(client, REVERSE_URL, params=params)
    if not isinstance(data, dict) or data.get("error"):
        reason = data.get("error") if isinstance(data, dict) else "not an object"
        raise ProviderMalformed(f"geocoder error: {reason}")
    return data


async def fetch_exact(
    client: httpx.AsyncClient, query: Coordinates, ctx: Context
) -> dict:
    return await _reverse(client, query.lat, query.lon)


async def fetch_rounded(
    client: httpx.AsyncClient, query: Coordinates, ctx: Context
) -> dict:
    lat, lon = query.rounded()
    return await _reverse(client, lat, lon)


def _unavailable(query: Coordinates, reason: str) -> NoFallbackAvailable:
    return NoFallbackAvailable(
        "geocode",
        "Unable to geocode location",
        status_code=500,
        extra={"coordinates": {"lat": query.raw_lat, "lon": query.raw_lon}},
    )


source: Source[Coordinates] = Source(
    name="geocode",
    providers=(
        Provider("maps.co exact", fetch_exact, attempts=1),
        Provider("maps.co rounded", fetch_rounded, attempts=1),
    ),
    schema=schemas.geocode_result,
    no_fallback=_unavailable,
)
