# backend/kisan_saathi/tools/heuristics.py
"""
Timezone / device / language heuristics.

For India these are a documented no-op: Asia/Kolkata covers the whole
country, and most devices report English whatever the region, so neither
signal narrows a farmer down to a city. The stage stays in the cascade so
the same pipeline works for geographies where a timezone does pin a region
(pass a `regional_timezones` table for those).
"""
import logging
import time
from typing import Mapping, Optional

from kisan_saathi.core.models import LocationRecord
from kisan_saathi.data.cities import CityRef

log = logging.getLogger("kisan_saathi.heuristics")

# timezone -> country, for zones that span an entire country
SINGLE_TIMEZONE_COUNTRIES: Mapping[str, str] = {
    "Asia/Kolkata": "India",
    "Asia/Calcutta": "India",
}

HEURISTIC_ACCURACY = 60


class HeuristicLocator:
    def __init__(self, regional_timezones: Optional[Mapping[str, CityRef]] = None):
        self._regional = dict(regional_timezones or {})

    def by_timezone(self, tz: Optional[str]) -> Optional[LocationRecord]:
        if not tz:
            return None
        if tz in SINGLE_TIMEZONE_COUNTRIES:
            log.info("⚠️ Timezone %s covers all of %s; not guessing a city", tz, SINGLE_TIMEZONE_COUNTRIES[tz])
            return None
        ref = self._regional.get(tz)
        if ref is None:
            return None
        return LocationRecord(
            city=ref.name,
            state=ref.state,
            lat=ref.lat,
            lon=ref.lon,
            accuracy=HEURISTIC_ACCURACY,
            source="heuristic",
            timestamp=int(time.time() * 1000),
        )

    def by_device(self, user_agent: Optional[str], network_info: Optional[Mapping] = None) -> Optional[LocationRecord]:
        # screen size / connection type say nothing reliable about location
        return None

    def by_language(self, language: Optional[str]) -> Optional[LocationRecord]:
        # en-US is the default almost everywhere
        return None

    def locate(
        self,
        tz: Optional[str] = None,
        language: Optional[str] = None,
        user_agent: Optional[str] = None,
        network_info: Optional[Mapping] = None,
    ) -> Optional[LocationRecord]:
        return (
            self.by_timezone(tz)
            or self.by_language(language)
            or self.by_device(user_agent, network_info)
        )
