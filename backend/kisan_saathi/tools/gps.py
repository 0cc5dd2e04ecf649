# backend/kisan_saathi/tools/gps.py
import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, NamedTuple, Optional

from kisan_saathi.config import settings
from kisan_saathi.core.adapters.base import GpsReader
from kisan_saathi.tools.validation import valid_coordinates

log = logging.getLogger("kisan_saathi.gps")


class GpsFix(NamedTuple):
    lat: float
    lon: float
    accuracy: float  # metres


class SuppliedFixes:
    """GpsReader over readings the client already took; one per attempt."""

    def __init__(self, fixes: Iterable[GpsFix]):
        self._fixes: List[GpsFix] = list(fixes)

    def __len__(self) -> int:
        return len(self._fixes)

    async def read(self) -> Optional[GpsFix]:
        return self._fixes.pop(0) if self._fixes else None


async def acquire_fix(
    reader: GpsReader,
    max_attempts: int = settings.GPS_MAX_ATTEMPTS,
    accuracy_threshold_m: float = settings.GPS_ACCURACY_THRESHOLD_M,
    retry_delay: float = settings.GPS_RETRY_DELAY_SEC,
    timeout: float = settings.GPS_TIMEOUT_SEC,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Optional[GpsFix]:
    """
    Read up to `max_attempts` fixes, waiting retry_delay * attempt between
    them. Fixes coarser than the threshold (network positioning, mostly) or
    with bogus coordinates don't count.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            fix = await asyncio.wait_for(reader.read(), timeout)
        except asyncio.TimeoutError:
            log.warning("❌ [GPS] attempt %d timed out after %ss", attempt, timeout)
        else:
            if fix is None:
                log.info("📍 [GPS] attempt %d: no fix available", attempt)
                return None
            if _acceptable(fix, attempt, accuracy_threshold_m):
                return fix

        if attempt < max_attempts:
            await sleep(retry_delay * attempt)
    return None


def _acceptable(fix: GpsFix, attempt: int, accuracy_threshold_m: float) -> bool:
    if not valid_coordinates(fix.lat, fix.lon):
        log.warning("⚠️ [GPS] attempt %d: invalid coordinates (%s, %s)", attempt, fix.lat, fix.lon)
        return False
    if fix.accuracy > accuracy_threshold_m:
        log.warning("⚠️ [GPS] attempt %d: accuracy %.0fm worse than %.0fm", attempt, fix.accuracy,
                    accuracy_threshold_m)
        return False
    log.info("✅ [GPS] fix accepted on attempt %d (±%.0fm)", attempt, fix.accuracy)
    return True
