# backend/kisan_saathi/core/services/market.py
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from kisan_saathi.config import settings
from kisan_saathi.core.adapters import PriceScraper
from kisan_saathi.core.models import MarketPriceRecord, PriceSource
from kisan_saathi.errors import KisanError
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.pricing import process_scraped
from kisan_saathi.utils.cache import SimpleTTLCache, SingleFlight

log = logging.getLogger("kisan_saathi.market")

def t(): return time.perf_counter()


@dataclass(frozen=True)
class PriceLookup:
    data: List[MarketPriceRecord]
    source: PriceSource
    timestamp: int  # epoch millis when the data was produced


def price_key(commodity: str, state: str, market: Optional[str] = None) -> str:
    return f"{commodity}-{state}-{market or 'all'}"


class MarketPriceService:
    """
    Scraped mandi prices behind a TTL cache, with synthetic fallback.

    Real data is cached for PRICE_CACHE_TTL_SEC. Fallback data is cached too,
    but only briefly, so a flapping Agmarknet is retried soon without every
    request paying for a failed scrape.
    """

    def __init__(
        self,
        scraper: PriceScraper,
        fallback: Optional[FallbackGenerator] = None,
        cache: Optional[SimpleTTLCache] = None,
        ttl: float = settings.PRICE_CACHE_TTL_SEC,
        fallback_ttl: float = settings.FALLBACK_PRICE_CACHE_TTL_SEC,
    ):
        self._scraper = scraper
        self._fallback = fallback or FallbackGenerator(settings.FALLBACK_SEED)
        self.cache = cache or SimpleTTLCache(default_ttl=ttl, name="prices")
        self._ttl = ttl
        self._fallback_ttl = fallback_ttl
        self._flight = SingleFlight()

    async def get_prices(self, commodity: str, state: str, market: Optional[str] = None) -> PriceLookup:
        """
        Cached prices for one commodity/state/market.

        A repeat read is labelled "cache" only when the cached entry came from a
        successful scrape. Cached fallback data keeps its "fallback" label and
        expires after the short fallback TTL.
        """
        start = t()
        key = price_key(commodity, state, market)
        hit: Optional[PriceLookup] = self.cache.get(key)
        if hit is not None:
            log.info("💾 Price cache hit: %s (%dms)", key, round((t() - start) * 1000))
            if hit.source == "fallback":
                # still synthetic; don't let the cache label hide that
                return hit
            return PriceLookup(
                data=[r.model_copy(update={"source": "cache"}) for r in hit.data],
                source="cache",
                timestamp=hit.timestamp,
            )
        return await self._flight.run(key, lambda: self._fetch_fresh(key, commodity, state, market))

    async def _fetch_fresh(self, key: str, commodity: str, state: str, market: Optional[str]) -> PriceLookup:
        start = t()
        now_ms = int(self.cache.now() * 1000)
        try:
            rows = await self._scraper.scrape_prices(commodity, state, market)
            lookup = PriceLookup(data=process_scraped(rows), source="scraped", timestamp=now_ms)
            self.cache.set(key, lookup, ttl=self._ttl)
            log.info("✅ %d scraped prices for %s in %dms", len(lookup.data), key, round((t() - start) * 1000))
            return lookup
        except KisanError as e:
            log.warning("⚠️ Scraping failed for %s (%s): %s; using fallback prices", key, e.kind, e)

        lookup = PriceLookup(
            data=self._fallback.market_prices(commodity, state, market),
            source="fallback",
            timestamp=now_ms,
        )
        self.cache.set(key, lookup, ttl=self._fallback_ttl)
        return lookup

    async def refresh(self, commodity: str, state: str, market: Optional[str] = None) -> PriceLookup:
        """Drop cached prices and fetch again."""
        self.cache.clear()
        return await self.get_prices(commodity, state, market)
