"""Current conditions for a major city.

WeatherAPI.com when a key is configured, Open-Meteo (no API key required)
otherwise or as backup.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.geography import City
from pulseboard.services.http import get_json, require

log = logging.getLogger(__name__)

WEATHERAPI_URL = "https://api.weatherapi.com/v1/current.json"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

CONDITIONS = (
    "Sunny", "Partly Cloudy", "Cloudy", "Rainy",
    "Stormy", "Snowy", "Foggy", "Clear",
)

# WMO weather interpretation codes, as used by Open-Meteo
WMO_CONDITIONS = {
    0: "Clear",
    1: "Mainly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy",
    51: "Light Drizzle",
    53: "Drizzle",
    55: "Heavy Drizzle",
    56: "Freezing Drizzle",
    57: "Freezing Drizzle",
    61: "Light Rain",
    63: "Rainy",
    65: "Heavy Rain",
    66: "Freezing Rain",
    67: "Freezing Rain",
    71: "Light Snow",
    73: "Snowy",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Rain Showers",
    81: "Rain Showers",
    82: "Violent Rain Showers",
    85: "Snow Showers",
    86: "Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm with Hail",
    99: "Thunderstorm with Hail",
}


@dataclass(frozen=True)
class WeatherQuery:
    city: City


def wmo_condition(code: int | None) -> str:
    if code is None:
        return "Unknown"
    return WMO_CONDITIONS.get(int(code), "Unknown")


async def fetch_weatherapi(
    client: httpx.AsyncClient, query: WeatherQuery, ctx: Context
) -> dict:
    log.info("Fetching WeatherAPI conditions for %s", query.city.name)
    data = await get_json(
        client,
        WEATHERAPI_URL,
        params={"key": settings.WEATHERAPI_KEY, "q": query.city.name},
    )
    location = require(data, "location")
    current = require(data, "current")
    return {
        "city": require(location, "name"),
        "country": location.get("country") or query.city.country,
        "temperature": require(current, "temp_c"),
        "condition": require(current, "condition", "text"),
        "humidity": current.get("humidity", 0),
        "windSpeed": current.get("wind_kph", 0),
    }


async def fetch_open_meteo(
    client: httpx.AsyncClient, query: WeatherQuery, ctx: Context
) -> dict:
    params = {
        "latitude": query.city.lat,
        "longitude": query.city.lon,
        "current": "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m",
        "wind_speed_unit": "kmh",
    }
    data = await get_json(client, OPEN_METEO_URL, params=params)
    current = require(data, "current")
    return {
        "city": query.city.name,
        "country": query.city.country,
        "temperature": require(current, "temperature_2m"),
        "condition": wmo_condition(current.get("weather_code")),
        "humidity": current.get("relative_humidity_2m", 0),
        "windSpeed": current.get("wind_speed_10m", 0),
    }


def synthetic_reading(query: WeatherQuery, ctx: Context) -> dict:
    """Plausible reading: warmer near the equator, jittered."""
    rng = ctx.rng
    base = 25 - abs(query.city.lat) * 0.5
    return {
        "city": query.city.name,
        "country": query.city.country,
        "temperature": round(base + (rng.random() * 10 - 5), 1),
        "condition": rng.choice(CONDITIONS),
        "humidity": round(40 + rng.random() * 40),
        "windSpeed": round(rng.random() * 30, 1),
    }


source: Source[WeatherQuery] = Source(
    name="weather",
    providers=(
        Provider(
            "WeatherAPI",
            fetch_weatherapi,
            enabled=lambda: bool(settings.WEATHERAPI_KEY),
        ),
        Provider("Open-Meteo", fetch_open_meteo),
    ),
    schema=schemas.conditions,
    cache_key=lambda query: f"weather:{query.city.key}",
    max_age=lambda: settings.CACHE_WEATHER,
    fallback=synthetic_reading,
)
