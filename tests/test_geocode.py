"""Tests for reverse geocoding with rounded-coordinate retry."""

from __future__ import annotations

import pytest

from pulseboard.engine import Dispatcher
from pulseboard.errors import NoFallbackAvailable
from pulseboard.services import geocode
from tests.fakes import FakeUpstream

LONDON = {
    "place_id": 1,
    "display_name": "Westminster, London, Greater London, England, United Kingdom",
    "address": {"city": "London", "country": "United Kingdom"},
}


class TestGeocodeSource:
    @pytest.mark.asyncio
    async def test_exact_coordinates(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        upstream.on(geocode.REVERSE_URL, LONDON)

        result = await dispatcher.dispatch(
            geocode.source, geocode.Coordinates.parse("51.5074", "-0.1278")
        )

        assert result.payload == LONDON
        request = upstream.calls[0]
        assert request.url.params["lat"] == "51.5074"
        assert request.url.params["lon"] == "-0.1278"
        assert request.url.params["api_key"] == "test-geocode-key"

    @pytest.mark.asyncio
    async def test_error_retries_with_rounded_coordinates(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        upstream.on(geocode.REVERSE_URL, {"error": "Unable to geocode"}, LONDON)

        result = await dispatcher.dispatch(
            geocode.source, geocode.Coordinates.parse("51.5074", "-0.1278")
        )

        assert result.provider == "maps.co rounded"
        assert len(upstream.calls) == 2
        rounded = upstream.calls[1].url.params
        assert (rounded["lat"], rounded["lon"]) == ("51.51", "-0.13")

    @pytest.mark.asyncio
    async def test_both_fail_is_500_with_coordinates(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        upstream.on(geocode.REVERSE_URL, {"error": "Unable to geocode"})

        with pytest.raises(NoFallbackAvailable) as exc_info:
            await dispatcher.dispatch(
                geocode.source, geocode.Coordinates.parse("0.0001", "-160.5")
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.body() == {
            "error": "Unable to geocode location",
            "coordinates": {"lat": "0.0001", "lon": "-160.5"},
        }
        assert len(upstream.calls) == 2

    @pytest.mark.asyncio
    async def test_not_cached(self, dispatcher: Dispatcher, upstream: FakeUpstream) -> None:
        upstream.on(geocode.REVERSE_URL, LONDON)
        coords = geocode.Coordinates.parse("51.5074", "-0.1278")

        await dispatcher.dispatch(geocode.source, coords)
        await dispatcher.dispatch(geocode.source, coords)

        assert len(upstream.calls) == 2

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            geocode.Coordinates.parse("north", "-0.1")
