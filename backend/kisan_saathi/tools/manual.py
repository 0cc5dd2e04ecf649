# backend/kisan_saathi/tools/manual.py
import logging
from typing import Optional

from kisan_saathi.config import settings
from kisan_saathi.core.models import LocationRecord
from kisan_saathi.errors import ValidationRejected
from kisan_saathi.tools.validation import is_stale, rejection_reason
from kisan_saathi.utils.cache import SimpleTTLCache

log = logging.getLogger("kisan_saathi.manual")

MANUAL_ACCURACY = 95


class ManualLocationStore:
    """User-entered locations per client, kept for MANUAL_LOCATION_MAX_AGE_SEC."""

    def __init__(self, cache: SimpleTTLCache, max_age_sec: float = settings.MANUAL_LOCATION_MAX_AGE_SEC):
        self._cache = cache
        self.max_age_sec = max_age_sec

    def _now_ms(self) -> int:
        return int(self._cache.now() * 1000)

    @staticmethod
    def _key(client_id: str) -> str:
        return f"manual:{client_id}"

    def save(self, client_id: str, city: str, state: str, lat: float, lon: float,
             country: str = "India") -> LocationRecord:
        record = LocationRecord(
            city=city.strip(),
            state=state.strip(),
            country=country,
            lat=lat,
            lon=lon,
            accuracy=MANUAL_ACCURACY,
            source="manual",
            timestamp=self._now_ms(),
        )
        reason = rejection_reason(record)
        if reason:
            raise ValidationRejected(f"Manual location rejected: {reason}")
        self._cache.set(self._key(client_id), record, ttl=self.max_age_sec)
        log.info("💾 Manual location saved for %s: %s, %s", client_id, record.city, record.state)
        return record

    def load(self, client_id: Optional[str]) -> Optional[LocationRecord]:
        if not client_id:
            return None
        return self._cache.get(self._key(client_id))

    def forget(self, client_id: str) -> None:
        self._cache.delete(self._key(client_id))

    def accept_client_copy(self, record: LocationRecord) -> Optional[LocationRecord]:
        """A client-held saved entry counts only while younger than max age."""
        if is_stale(record.timestamp, self.max_age_sec, self._now_ms()):
            log.info("⌛ Client manual location for %s is stale; re-detecting", record.city)
            return None
        return record.model_copy(update={"source": "manual", "accuracy": MANUAL_ACCURACY})
