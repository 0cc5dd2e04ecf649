# backend/kisan_saathi/core/services/conditions.py
import logging
from typing import Any, Dict, Optional

from kisan_saathi.config import settings
from kisan_saathi.core.adapters import Fetcher
from kisan_saathi.data.cities import FALLBACK_CENTER
from kisan_saathi.errors import KisanError
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.soil import fetch_soil
from kisan_saathi.tools.weather import fetch_weather
from kisan_saathi.utils.cache import SimpleTTLCache, SingleFlight

log = logging.getLogger("kisan_saathi.conditions")


def cell_key(prefix: str, lat: float, lon: float, places: int = 2) -> str:
    """Cache key for a ~1km coordinate cell."""
    return f"{prefix}:{round(lat, places)}:{round(lon, places)}"


def _coords(lat: Optional[float], lon: Optional[float]):
    if lat is None or lon is None:
        return FALLBACK_CENTER.lat, FALLBACK_CENTER.lon
    return lat, lon


class ConditionsService:
    """Weather (Open-Meteo) and soil (SoilGrids) feeds with fixed fallbacks."""

    def __init__(
        self,
        fetcher: Fetcher,
        fallback: Optional[FallbackGenerator] = None,
        weather_cache: Optional[SimpleTTLCache] = None,
        soil_cache: Optional[SimpleTTLCache] = None,
    ):
        self._fetcher = fetcher
        self._fallback = fallback or FallbackGenerator(settings.FALLBACK_SEED)
        self.weather_cache = weather_cache or SimpleTTLCache(settings.WEATHER_CACHE_TTL_SEC, name="weather")
        self.soil_cache = soil_cache or SimpleTTLCache(settings.SOIL_CACHE_TTL_SEC, name="soil")
        self._flight = SingleFlight()

    async def weather(self, lat: Optional[float] = None, lon: Optional[float] = None) -> Dict[str, Any]:
        lat, lon = _coords(lat, lon)
        key = cell_key("weather", lat, lon)
        hit = self.weather_cache.get(key)
        if hit is not None:
            log.info("💾 Weather cache hit: %s", key)
            return hit

        async def load():
            try:
                data = await fetch_weather(self._fetcher, lat, lon)
            except KisanError as e:
                log.warning("⚠️ Weather fetch failed (%s): %s; using fallback-data", e.kind, e)
                return self._fallback.weather()
            self.weather_cache.set(key, data)
            return data

        return await self._flight.run(key, load)

    async def soil(self, lat: Optional[float] = None, lon: Optional[float] = None) -> Dict[str, Any]:
        lat, lon = _coords(lat, lon)
        key = cell_key("soil", lat, lon)
        hit = self.soil_cache.get(key)
        if hit is not None:
            log.info("💾 Soil cache hit: %s", key)
            return hit

        async def load():
            try:
                data = await fetch_soil(self._fetcher, lat, lon)
            except KisanError as e:
                log.warning("⚠️ Soil fetch failed (%s): %s; using fallback-data", e.kind, e)
                return self._fallback.soil()
            self.soil_cache.set(key, data)
            return data

        return await self._flight.run(key, load)
