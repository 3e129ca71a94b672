"""Reference places used for weather tiles."""
from __future__ import annotations

import random
from typing import NamedTuple


class City(NamedTuple):
    name: str
    country: str
    lat: float
    lon: float

    @property
    def key(self) -> str:
        return f"{self.name},{self.country}"


MAJOR_CITIES: tuple[City, ...] = (
    City("New York", "US", 40.7128, -74.0060),
    City("London", "GB", 51.5074, -0.1278),
    City("Tokyo", "JP", 35.6762, 139.6503),
    City("Paris", "FR", 48.8566, 2.3522),
    City("Sydney", "AU", -33.8688, 151.2093),
    City("Beijing", "CN", 39.9042, 116.4074),
    City("Berlin", "DE", 52.5200, 13.4050),
    City("Moscow", "RU", 55.7558, 37.6173),
    City("Dubai", "AE", 25.2048, 55.2708),
    City("Mumbai", "IN", 19.0760, 72.8777),
    City("São Paulo", "BR", -23.5505, -46.6333),
    City("Cairo", "EG", 30.0444, 31.2357),
    City("Cape Town", "ZA", -33.9249, 18.4241),
    City("Bangkok", "TH", 13.7563, 100.5018),
    City("Mexico City", "MX", 19.4326, -99.1332),
    City("Singapore", "SG", 1.3521, 103.8198),
    City("Rome", "IT", 41.9028, 12.4964),
    City("Amsterdam", "NL", 52.3676, 4.9041),
    City("Seoul", "KR", 37.5665, 126.9780),
    City("Toronto", "CA", 43.6532, -79.3832),
)


def find_city(name: str | None) -> City | None:
    """Case-insensitive lookup by city name."""
    if not name:
        return None
    wanted = name.strip().lower()
    for city in MAJOR_CITIES:
        if city.name.lower() == wanted:
            return city
    return None


def city_for_tile(unique_id: str) -> City:
    """Stable city for a tile id, so each tile keeps showing the same place."""
    index = sum(ord(ch) for ch in unique_id) % len(MAJOR_CITIES)
    return MAJOR_CITIES[index]


def resolve_city(
    name: str | None,
    unique_id: str | None,
    rng: random.Random,
) -> City:
    city = find_city(name)
    if city is not None:
        return city
    if unique_id:
        return city_for_tile(unique_id)
    return rng.choice(MAJOR_CITIES)
