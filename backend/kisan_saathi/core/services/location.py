# backend/kisan_saathi/core/services/location.py
"""
Location resolution cascade.

Stages run strictly in order (manual > GPS > IP lookup > heuristic) and the
first one that yields a plausible record wins. A stage that raises a
KisanError or returns None just hands over to the next one; when all of them
come up empty the caller gets the fixed agricultural fallback location,
tagged so the UI can show a low-confidence banner.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from kisan_saathi.config import settings
from kisan_saathi.core.models import LocationRecord, ResolvedLocation
from kisan_saathi.errors import KisanError
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.geo import ReverseGeocoder
from kisan_saathi.tools.gps import GpsFix, SuppliedFixes, acquire_fix
from kisan_saathi.tools.heuristics import HeuristicLocator
from kisan_saathi.tools.ip_lookup import IpLocator
from kisan_saathi.tools.manual import ManualLocationStore
from kisan_saathi.tools.validation import rejection_reason
from kisan_saathi.utils.cache import SimpleTTLCache, SingleFlight

log = logging.getLogger("kisan_saathi.location")

def t(): return time.perf_counter()

MANUAL_CONFIDENCE = 90
GPS_MAX_CONFIDENCE = 95
HEURISTIC_CONFIDENCE = 40


def gps_confidence(accuracy_m: float) -> int:
    """95 for a perfect fix, minus a point per 10m of reported error."""
    return max(0, min(GPS_MAX_CONFIDENCE, round(GPS_MAX_CONFIDENCE - accuracy_m / 10)))


def resolved(record: LocationRecord, confidence: int, reasoning: str,
             provider: Optional[str] = None) -> ResolvedLocation:
    return ResolvedLocation(
        **record.model_dump(),
        confidence=confidence,
        reasoning=reasoning,
        provider=provider,
    )


@dataclass
class LocationSignals:
    """Everything a client can tell us about where it is."""
    client_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    time_zone: Optional[str] = None
    language: Optional[str] = None
    network_info: Dict[str, Any] = field(default_factory=dict)
    gps_fixes: List[GpsFix] = field(default_factory=list)
    manual_location: Optional[LocationRecord] = None
    force_refresh: bool = False


@dataclass(frozen=True)
class CascadeStage:
    name: str
    run: Callable[[LocationSignals], Awaitable[Optional[ResolvedLocation]]]


async def run_cascade(
    stages: Sequence[CascadeStage],
    signals: LocationSignals,
) -> Tuple[Optional[ResolvedLocation], List[str]]:
    """
    Evaluate stages in order; return (first accepted result, stage names tried).

    Whatever a stage returns is checked once more here, so no stage can hand
    back an empty city/state or null-island coordinates.
    """
    attempted: List[str] = []
    for stage in stages:
        attempted.append(stage.name)
        start = t()
        try:
            result = await stage.run(signals)
        except KisanError as e:
            log.warning("❌ Stage %s failed (%s): %s", stage.name, e.kind, e)
            continue
        ms = round((t() - start) * 1000)
        if result is None:
            log.info("↪️  Stage %s: no result (%dms)", stage.name, ms)
            continue
        reason = rejection_reason(result)
        if reason:
            log.warning("🚫 Stage %s result rejected: %s", stage.name, reason)
            continue
        log.info("✅ Stage %s: %s, %s (confidence %d, %dms)", stage.name, result.city, result.state,
                 result.confidence, ms)
        return result.model_copy(update={"attempted": list(attempted)}), attempted
    return None, attempted


class LocationService:
    def __init__(
        self,
        manual_store: ManualLocationStore,
        ip_locator: IpLocator,
        geocoder: ReverseGeocoder,
        heuristics: Optional[HeuristicLocator] = None,
        fallback: Optional[FallbackGenerator] = None,
        cache: Optional[SimpleTTLCache] = None,
        ttl: float = settings.LOCATION_CACHE_TTL_SEC,
        gps_max_attempts: int = settings.GPS_MAX_ATTEMPTS,
        gps_accuracy_threshold_m: float = settings.GPS_ACCURACY_THRESHOLD_M,
        gps_retry_delay: float = settings.GPS_RETRY_DELAY_SEC,
        gps_timeout: float = settings.GPS_TIMEOUT_SEC,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._manual = manual_store
        self._ip = ip_locator
        self._geocoder = geocoder
        self._heuristics = heuristics or HeuristicLocator()
        self._fallback = fallback or FallbackGenerator(settings.FALLBACK_SEED)
        self.cache = cache or SimpleTTLCache(default_ttl=ttl, name="location")
        self._ttl = ttl
        self._gps_max_attempts = gps_max_attempts
        self._gps_threshold = gps_accuracy_threshold_m
        self._gps_retry_delay = gps_retry_delay
        self._gps_timeout = gps_timeout
        self._sleep = sleep
        self._flight = SingleFlight()

    # ---------- stages ----------
    def stages(self) -> List[CascadeStage]:
        return [
            CascadeStage("manual", self.from_manual),
            CascadeStage("gps", self.from_gps),
            CascadeStage("ip_lookup", self.from_ip),
            CascadeStage("heuristic", self.from_heuristics),
        ]

    async def from_manual(self, s: LocationSignals) -> Optional[ResolvedLocation]:
        candidates = [self._manual.load(s.client_id)]
        if s.manual_location is not None:
            candidates.append(self._manual.accept_client_copy(s.manual_location))
        candidates = [c for c in candidates if c is not None]
        if not candidates:
            return None
        newest = max(candidates, key=lambda r: r.timestamp)
        return resolved(newest, MANUAL_CONFIDENCE, "Location entered by the user", provider="manual")

    async def from_gps(self, s: LocationSignals) -> Optional[ResolvedLocation]:
        if not s.gps_fixes:
            return None
        fix = await acquire_fix(
            SuppliedFixes(s.gps_fixes),
            max_attempts=self._gps_max_attempts,
            accuracy_threshold_m=self._gps_threshold,
            retry_delay=self._gps_retry_delay,
            timeout=self._gps_timeout,
            sleep=self._sleep,
        )
        if fix is None:
            return None
        place = await self._geocoder.reverse(fix.lat, fix.lon)
        if place is None:
            log.warning("⚠️ GPS fix (%s, %s) could not be reverse geocoded", fix.lat, fix.lon)
            return None
        record = LocationRecord(
            city=place.city,
            state=place.state,
            lat=fix.lat,
            lon=fix.lon,
            accuracy=fix.accuracy,
            accuracy_unit="meters",
            source="gps",
            timestamp=int(time.time() * 1000),
        )
        return resolved(
            record,
            gps_confidence(fix.accuracy),
            f"GPS fix within {fix.accuracy:.0f}m, reverse geocoded via {place.provider}",
            provider=place.provider,
        )

    async def from_ip(self, s: LocationSignals) -> Optional[ResolvedLocation]:
        found = await self._ip.locate(s.ip_address)
        if found is None:
            return None
        record, provider = found
        return resolved(record, provider.confidence, f"IP geolocation via {provider.name}", provider=provider.name)

    async def from_heuristics(self, s: LocationSignals) -> Optional[ResolvedLocation]:
        record = self._heuristics.locate(s.time_zone, s.language, s.user_agent, s.network_info)
        if record is None:
            return None
        return resolved(record, HEURISTIC_CONFIDENCE, f"Inferred from timezone {s.time_zone}", provider="timezone")

    # ---------- public ----------
    @staticmethod
    def cache_key(s: LocationSignals) -> str:
        return f"enhanced_location:{s.client_id or s.ip_address or 'anonymous'}"

    async def resolve(self, s: LocationSignals) -> ResolvedLocation:
        key = self.cache_key(s)
        if not (s.client_id or s.ip_address):
            # anonymous callers share nothing
            return await self._resolve_fresh(None, s)
        # fresh device/user signals outrank anything cached or in flight
        if s.force_refresh or s.gps_fixes or s.manual_location:
            return await self._resolve_fresh(key, s)
        hit = self.cache.get(key)
        if hit is not None:
            log.info("💾 Location cache hit: %s", key)
            return hit
        return await self._flight.run(key, lambda: self._resolve_fresh(key, s))

    async def _resolve_fresh(self, key: Optional[str], s: LocationSignals) -> ResolvedLocation:
        start = t()
        result, attempted = await run_cascade(self.stages(), s)
        if result is None:
            log.warning("⚠️ All location stages failed (%s); using fallback", ", ".join(attempted))
            return self._fallback.location(attempted)
        if key is not None:
            self.cache.set(key, result, ttl=self._ttl)
        log.info("⏱️  Location resolved via %s in %dms", result.source, round((t() - start) * 1000))
        return result

    def save_manual(self, client_id: str, city: str, state: str, lat: float, lon: float,
                    country: str = "India") -> ResolvedLocation:
        record = self._manual.save(client_id, city, state, lat, lon, country)
        self.cache.delete(self.cache_key(LocationSignals(client_id=client_id)))
        return resolved(record, MANUAL_CONFIDENCE, "Location entered by the user", provider="manual")

    def clear_manual(self, client_id: str) -> None:
        self._manual.forget(client_id)
        self.cache.delete(self.cache_key(LocationSignals(client_id=client_id)))
