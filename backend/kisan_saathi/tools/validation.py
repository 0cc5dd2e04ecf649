# backend/kisan_saathi/tools/validation.py
"""
Plausibility rules applied to every location candidate before the cascade
accepts it.
"""
import math
from typing import Iterable, Optional

from kisan_saathi.core.models import LocationRecord


def is_null_island(lat: float, lon: float) -> bool:
    return lat == 0 and lon == 0


def valid_coordinates(lat, lon) -> bool:
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return False
    return not is_null_island(lat, lon)


def is_blocked_city(city: str, blocked: Iterable[str]) -> bool:
    c = (city or "").strip().lower()
    return any(c == b.strip().lower() for b in blocked)


def rejection_reason(record: LocationRecord, blocked_cities: Iterable[str] = ()) -> Optional[str]:
    """Why `record` must be discarded, or None when it is acceptable."""
    if not (record.city or "").strip() or not (record.state or "").strip():
        return "missing city/state"
    if not valid_coordinates(record.lat, record.lon):
        return f"implausible coordinates ({record.lat}, {record.lon})"
    if is_blocked_city(record.city, blocked_cities):
        return f"blocked city '{record.city}'"
    return None


def is_stale(timestamp_ms: int, max_age_sec: float, now_ms: int) -> bool:
    return now_ms - timestamp_ms > max_age_sec * 1000
