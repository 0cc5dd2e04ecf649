# backend/kisan_saathi/tools/geo.py
import logging
import math
from typing import Any, NamedTuple, Optional, Sequence

from kisan_saathi.config import settings
from kisan_saathi.data.cities import CityRef, INDIAN_CITIES
from kisan_saathi.errors import KisanError
from kisan_saathi.core.adapters import Fetcher
from kisan_saathi.http import USER_AGENT

log = logging.getLogger("kisan_saathi.geo")

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
BIGDATACLOUD_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"
NEAREST_CITY_MAX_KM = 100.0


class Place(NamedTuple):
    city: str
    state: str
    provider: str


def _text(*values: Any) -> bool:
    return all(isinstance(v, str) and v.strip() for v in values)


def parse_nominatim(data: Any) -> Optional[Place]:
    if not isinstance(data, dict):
        return None
    addr = data.get("address") or {}
    if not isinstance(addr, dict):
        return None
    city = addr.get("city") or addr.get("town") or addr.get("village") or addr.get("hamlet")
    state = addr.get("state")
    if not _text(city, state):
        return None
    return Place(city.strip(), state.strip(), "nominatim")


def parse_bigdatacloud(data: Any) -> Optional[Place]:
    if not isinstance(data, dict):
        return None
    city = data.get("city") or data.get("locality")
    state = data.get("principalSubdivision")
    if not _text(city, state):
        return None
    return Place(city.strip(), state.strip(), "bigdatacloud")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    r = 6371.0
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlmb / 2) ** 2
    return 2 * r * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def nearest_city(
    lat: float,
    lon: float,
    cities: Sequence[CityRef] = INDIAN_CITIES,
    max_km: float = NEAREST_CITY_MAX_KM,
) -> Optional[Place]:
    best, best_km = None, math.inf
    for c in cities:
        d = haversine_km(lat, lon, c.lat, c.lon)
        if d < best_km:
            best, best_km = c, d
    if best is None or best_km >= max_km:
        log.info("⚠️ No known city within %.0fkm of (%s, %s)", max_km, lat, lon)
        return None
    log.info("🎯 Nearest city: %s, %s (%.1fkm)", best.name, best.state, best_km)
    return Place(best.name, best.state, "city_table")


class ReverseGeocoder:
    """Nominatim, then BigDataCloud, then the built-in city table."""

    def __init__(self, fetcher: Fetcher, timeout: float = settings.GEOCODE_TIMEOUT_SEC):
        self._fetcher = fetcher
        self._timeout = timeout

    async def reverse(self, lat: float, lon: float) -> Optional[Place]:
        sources = [
            (
                "Nominatim",
                NOMINATIM_URL,
                {"format": "json", "lat": str(lat), "lon": str(lon), "zoom": "10", "addressdetails": "1"},
                {"User-Agent": USER_AGENT, "Accept": "application/json"},
                parse_nominatim,
            ),
            (
                "BigDataCloud",
                BIGDATACLOUD_URL,
                {"latitude": str(lat), "longitude": str(lon), "localityLanguage": "en"},
                {"Accept": "application/json"},
                parse_bigdatacloud,
            ),
        ]
        for name, url, params, headers, parse in sources:
            try:
                data = await self._fetcher.get_json(url, params=params, headers=headers, timeout=self._timeout)
            except KisanError as e:
                log.warning("❌ %s reverse geocoding failed (%s): %s", name, e.kind, e)
                continue
            place = parse(data)
            if place:
                log.info("✅ %s: %s, %s", name, place.city, place.state)
                return place
            log.warning("⚠️ %s missing city or state", name)

        return nearest_city(lat, lon)
