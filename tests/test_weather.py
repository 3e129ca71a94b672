"""Tests for city weather and city resolution."""

from __future__ import annotations

import random

import pytest

from pulseboard.config import settings
from pulseboard.engine import Dispatcher
from pulseboard.geography import MAJOR_CITIES, city_for_tile, find_city, resolve_city
from pulseboard.services import weather
from tests.fakes import FakeUpstream

TOKYO = find_city("Tokyo")
SINGAPORE = find_city("Singapore")

OPEN_METEO_REPLY = {
    "latitude": 35.7,
    "longitude": 139.7,
    "current": {
        "time": "2026-10-19T12:00",
        "temperature_2m": 18.4,
        "relative_humidity_2m": 63,
        "weather_code": 3,
        "wind_speed_10m": 11.2,
    },
}

WEATHERAPI_REPLY = {
    "location": {"name": "Tokyo", "country": "Japan"},
    "current": {
        "temp_c": 19.0,
        "condition": {"text": "Light rain"},
        "humidity": 81,
        "wind_kph": 14.4,
    },
}


class TestCityResolution:
    def test_find_city_ignores_case(self) -> None:
        assert find_city("  new york ") == MAJOR_CITIES[0]
        assert find_city("Atlantis") is None
        assert find_city(None) is None

    def test_tile_city_is_stable(self) -> None:
        assert city_for_tile("tile-7") == city_for_tile("tile-7")

    def test_named_city_wins(self) -> None:
        rng = random.Random(0)
        assert resolve_city("paris", "tile-7", rng).name == "Paris"

    def test_unknown_name_uses_tile(self) -> None:
        rng = random.Random(0)
        assert resolve_city("Atlantis", "tile-7", rng) == city_for_tile("tile-7")

    def test_random_without_hints(self) -> None:
        assert resolve_city(None, None, random.Random(0)) in MAJOR_CITIES


class TestWeatherSource:
    @pytest.mark.asyncio
    async def test_open_meteo_without_key(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        upstream.on(weather.OPEN_METEO_URL, OPEN_METEO_REPLY)
        upstream.on(weather.WEATHERAPI_URL, WEATHERAPI_REPLY)

        result = await dispatcher.dispatch(weather.source, weather.WeatherQuery(TOKYO))

        assert result.provider == "Open-Meteo"
        assert result.payload == {
            "city": "Tokyo",
            "country": "JP",
            "temperature": 18.4,
            "condition": "Overcast",
            "humidity": 63,
            "windSpeed": 11.2,
        }
        assert upstream.calls_to(weather.WEATHERAPI_URL) == []
        params = upstream.calls[0].url.params
        assert params["latitude"] == str(TOKYO.lat)

    @pytest.mark.asyncio
    async def test_weatherapi_with_key(
        self,
        dispatcher: Dispatcher,
        upstream: FakeUpstream,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "WEATHERAPI_KEY", "wk")
        upstream.on(weather.WEATHERAPI_URL, WEATHERAPI_REPLY)

        result = await dispatcher.dispatch(weather.source, weather.WeatherQuery(TOKYO))

        assert result.provider == "WeatherAPI"
        assert result.payload["condition"] == "Light rain"
        assert result.payload["country"] == "Japan"
        assert upstream.calls[0].url.params["key"] == "wk"

    @pytest.mark.asyncio
    async def test_weatherapi_failure_uses_open_meteo(
        self,
        dispatcher: Dispatcher,
        upstream: FakeUpstream,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "WEATHERAPI_KEY", "wk")
        upstream.on(weather.WEATHERAPI_URL, 401)
        upstream.on(weather.OPEN_METEO_URL, OPEN_METEO_REPLY)

        result = await dispatcher.dispatch(weather.source, weather.WeatherQuery(TOKYO))

        assert result.origin == "live"
        assert result.provider == "Open-Meteo"

    @pytest.mark.asyncio
    async def test_synthetic_reading_bounds(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        for _ in range(20):
            result = await dispatcher.dispatch(
                weather.source, weather.WeatherQuery(SINGAPORE)
            )
            payload = result.payload
            base = 25 - abs(SINGAPORE.lat) * 0.5
            assert result.origin == "fallback"
            assert payload["city"] == "Singapore"
            assert base - 5 <= payload["temperature"] <= base + 5
            assert payload["condition"] in weather.CONDITIONS
            assert 40 <= payload["humidity"] <= 80
            assert 0 <= payload["windSpeed"] <= 30

    @pytest.mark.asyncio
    async def test_cached_per_city(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        upstream.on(weather.OPEN_METEO_URL, OPEN_METEO_REPLY)

        await dispatcher.dispatch(weather.source, weather.WeatherQuery(TOKYO))
        cached = await dispatcher.dispatch(weather.source, weather.WeatherQuery(TOKYO))
        other = await dispatcher.dispatch(weather.source, weather.WeatherQuery(SINGAPORE))

        assert cached.origin == "cache"
        assert other.origin == "live"
        assert len(upstream.calls) == 2

    def test_unknown_wmo_code(self) -> None:
        assert weather.wmo_condition(1234) == "Unknown"
        assert weather.wmo_condition(None) == "Unknown"
