from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)


def _env(primary: str, *fallbacks: str, default: str = "") -> str:
    """Read env var with fallback aliases."""
    val = os.getenv(primary)
    if val is not None:
        return val
    for fb in fallbacks:
        val = os.getenv(fb)
        if val is not None:
            return val
    return default


class Settings:
    # --- Server ---
    HOST: str = os.getenv("PULSEBOARD_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PULSEBOARD_PORT", "8100"))

    # --- Provider credentials ---
    ALPHA_VANTAGE_API_KEY: str = os.getenv("ALPHA_VANTAGE_API_KEY", "demo")
    NYT_API_KEY: str = os.getenv("NYT_API_KEY", "")
    WEATHERAPI_KEY: str = _env("WEATHERAPI_KEY", "WEATHER_API_KEY")
    GEOCODE_API_KEY: str = _env("GEOCODE_API_KEY", "MAPS_CO_API_KEY")

    # --- Freshness windows (seconds) ---
    CACHE_BITCOIN: int = int(os.getenv("CACHE_BITCOIN", "60"))
    CACHE_STOCKS: int = int(os.getenv("CACHE_STOCKS", "300"))
    CACHE_NEWS: int = int(os.getenv("CACHE_NEWS", "600"))
    CACHE_WEATHER: int = int(os.getenv("CACHE_WEATHER", "1800"))
    CACHE_EARTHQUAKE: int = int(os.getenv("CACHE_EARTHQUAKE", "60"))
    CACHE_WIKIPEDIA: int = int(os.getenv("CACHE_WIKIPEDIA", "120"))

    # --- Upstream call policy ---
    RETRY_ATTEMPTS: int = int(os.getenv("RETRY_ATTEMPTS", "2"))
    RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "1.0"))
    ITEM_DELAY: float = float(os.getenv("ITEM_DELAY", "1.2"))
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "8.0"))

    # Size of each "recently shown" dedup set
    RECENT_SIZE: int = int(os.getenv("RECENT_SIZE", "5"))

    # --- Validation ---
    _RECOMMENDED = {
        "NYT_API_KEY": "News tiles will only show canned headlines",
        "WEATHERAPI_KEY": "Weather falls back to Open-Meteo (no humidity-grade detail)",
        "GEOCODE_API_KEY": "Reverse geocoding will be rejected by geocode.maps.co",
    }

    @classmethod
    def validate(cls) -> list[str]:
        """Log warnings for unset provider keys; return the missing names."""
        missing: list[str] = []
        for var, hint in cls._RECOMMENDED.items():
            if not getattr(cls, var):
                log.warning("Missing env var %s — %s", var, hint)
                missing.append(var)
        if cls.ALPHA_VANTAGE_API_KEY == "demo":
            log.warning(
                "ALPHA_VANTAGE_API_KEY is the shared demo key — "
                "stock and bitcoin backups will be rate limited"
            )
        return missing


settings = Settings()
