# backend/kisan_saathi/tools/ip_lookup.py
import ipaddress
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from kisan_saathi.config import settings
from kisan_saathi.core.models import LocationRecord
from kisan_saathi.errors import KisanError
from kisan_saathi.core.adapters import Fetcher
from kisan_saathi.tools.validation import rejection_reason

log = logging.getLogger("kisan_saathi.ip_lookup")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_float(x: Any) -> Optional[float]:
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _record(city, state, country, lat, lon, accuracy: float) -> Optional[LocationRecord]:
    lat, lon = _to_float(lat), _to_float(lon)
    if not city or not state or lat is None or lon is None:
        return None
    return LocationRecord(
        city=str(city).strip(),
        state=str(state).strip(),
        country=str(country or "India"),
        lat=lat,
        lon=lon,
        accuracy=accuracy,
        source="ip_lookup",
        timestamp=_now_ms(),
    )


# -------------------------------
# Provider parsers (raw JSON -> record or None)
# -------------------------------
def parse_ipinfo(data: Any) -> Optional[LocationRecord]:
    """ipinfo.io: {"city", "region", "country", "loc": "lat,lon"}"""
    if not isinstance(data, dict):
        return None
    loc = data.get("loc")
    if not isinstance(loc, str) or "," not in loc:
        return None
    lat, _, lon = loc.partition(",")
    return _record(data.get("city"), data.get("region"), data.get("country"), lat, lon, accuracy=85)


def parse_ip_api(data: Any) -> Optional[LocationRecord]:
    """ip-api.com: {"status": "success", "city", "regionName", "lat", "lon"}"""
    if not isinstance(data, dict) or data.get("status") != "success":
        return None
    return _record(data.get("city"), data.get("regionName"), data.get("country"),
                   data.get("lat"), data.get("lon"), accuracy=80)


def parse_ipgeolocation(data: Any) -> Optional[LocationRecord]:
    """ipgeolocation.io: {"city", "state_prov", "country_name", "latitude", "longitude"} (strings)"""
    if not isinstance(data, dict):
        return None
    return _record(data.get("city"), data.get("state_prov"), data.get("country_name"),
                   data.get("latitude"), data.get("longitude"), accuracy=75)


# -------------------------------
# Providers
# -------------------------------
@dataclass(frozen=True)
class IpProvider:
    name: str
    url: Callable[[str], str]
    params: Callable[[str], Dict[str, str]]
    parse: Callable[[Any], Optional[LocationRecord]]
    confidence: int


IP_API_FIELDS = "status,message,country,countryCode,region,regionName,city,lat,lon,timezone,query"


def default_providers(ipgeolocation_key: str = settings.IPGEOLOCATION_API_KEY) -> List[IpProvider]:
    providers = [
        IpProvider("ipinfo", lambda ip: f"https://ipinfo.io/{ip}/json", lambda ip: {}, parse_ipinfo, 70),
        IpProvider("ip-api", lambda ip: f"http://ip-api.com/json/{ip}", lambda ip: {"fields": IP_API_FIELDS},
                   parse_ip_api, 65),
    ]
    if ipgeolocation_key:
        providers.append(IpProvider(
            "ipgeolocation",
            lambda ip: "https://api.ipgeolocation.io/ipgeo",
            lambda ip: {"apiKey": ipgeolocation_key, "ip": ip},
            parse_ipgeolocation,
            60,
        ))
    else:
        log.info("IPGEOLOCATION_API_KEY not set; ipgeolocation provider disabled")
    return providers


def is_public_ip(ip: Optional[str]) -> bool:
    if not ip:
        return False
    try:
        return ipaddress.ip_address(ip.strip()).is_global
    except ValueError:
        return False


class IpLocator:
    """Tries each provider in order; first accepted (well-formed, non-blocked) record wins."""

    def __init__(
        self,
        fetcher: Fetcher,
        providers: Optional[List[IpProvider]] = None,
        blocked_cities: Iterable[str] = settings.BLOCKED_IP_CITIES,
        timeout: float = settings.IP_LOOKUP_TIMEOUT_SEC,
    ):
        self._fetcher = fetcher
        self.providers = providers if providers is not None else default_providers()
        self._blocked = tuple(blocked_cities)
        self._timeout = timeout

    async def locate(self, ip: Optional[str]) -> Optional[Tuple[LocationRecord, IpProvider]]:
        if not is_public_ip(ip):
            log.info("🌐 Skipping IP lookup for non-public address %r", ip)
            return None

        for p in self.providers:
            try:
                data = await self._fetcher.get_json(
                    p.url(ip), params=p.params(ip), headers={"Accept": "application/json"}, timeout=self._timeout
                )
            except KisanError as e:
                log.warning("❌ %s lookup failed (%s): %s", p.name, e.kind, e)
                continue

            log.debug("📍 %s raw: %s", p.name, data)
            record = p.parse(data)
            if record is None:
                log.warning("❌ %s response missing city/region/coordinates", p.name)
                continue
            reason = rejection_reason(record, self._blocked)
            if reason:
                log.warning("🚫 %s result rejected: %s", p.name, reason)
                continue
            log.info("✅ %s located %s, %s", p.name, record.city, record.state)
            return record, p
        return None
