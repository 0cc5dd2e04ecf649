"""
Dependency injection container for the application.
Constructs singletons lazily (after the HTTP client exists) and provides
them to routes via Depends. Tests swap them with app.dependency_overrides.
"""
from kisan_saathi.config import settings
from kisan_saathi.core.services.conditions import ConditionsService
from kisan_saathi.core.services.location import LocationService
from kisan_saathi.core.services.market import MarketPriceService
from kisan_saathi.http import HttpFetcher, get_http_client
from kisan_saathi.tools.agmarknet import AgmarknetScraper
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.geo import ReverseGeocoder
from kisan_saathi.tools.heuristics import HeuristicLocator
from kisan_saathi.tools.infer import LocationInferencer
from kisan_saathi.tools.ip_lookup import IpLocator
from kisan_saathi.tools.manual import ManualLocationStore
from kisan_saathi.utils.cache import SimpleTTLCache

# Singletons - created once and reused
_fetcher = None
_fallback = None
_market_service = None
_location_service = None
_conditions_service = None
_inferencer = None


def get_fetcher() -> HttpFetcher:
    """Get singleton fetcher over the global HTTP client."""
    global _fetcher
    if _fetcher is None:
        _fetcher = HttpFetcher(get_http_client())
    return _fetcher


def get_fallback() -> FallbackGenerator:
    global _fallback
    if _fallback is None:
        _fallback = FallbackGenerator(settings.FALLBACK_SEED)
    return _fallback


def get_market_service() -> MarketPriceService:
    """Get singleton market price service."""
    global _market_service
    if _market_service is None:
        _market_service = MarketPriceService(
            scraper=AgmarknetScraper(get_fetcher()),
            fallback=get_fallback(),
            cache=SimpleTTLCache(settings.PRICE_CACHE_TTL_SEC, name="prices"),
        )
    return _market_service


def get_location_service() -> LocationService:
    """Get singleton location cascade."""
    global _location_service
    if _location_service is None:
        fetcher = get_fetcher()
        _location_service = LocationService(
            manual_store=ManualLocationStore(
                SimpleTTLCache(settings.MANUAL_LOCATION_MAX_AGE_SEC, name="manual_locations")
            ),
            ip_locator=IpLocator(fetcher),
            geocoder=ReverseGeocoder(fetcher),
            heuristics=HeuristicLocator(),
            fallback=get_fallback(),
            cache=SimpleTTLCache(settings.LOCATION_CACHE_TTL_SEC, name="location"),
        )
    return _location_service


def get_conditions_service() -> ConditionsService:
    """Get singleton weather/soil service."""
    global _conditions_service
    if _conditions_service is None:
        _conditions_service = ConditionsService(get_fetcher(), fallback=get_fallback())
    return _conditions_service


def get_inferencer() -> LocationInferencer:
    global _inferencer
    if _inferencer is None:
        _inferencer = LocationInferencer(fallback=get_fallback())
    return _inferencer


def cache_sizes() -> dict:
    """Entry counts of whichever caches exist so far."""
    sizes = {}
    if _market_service is not None:
        sizes["prices"] = len(_market_service.cache)
    if _location_service is not None:
        sizes["location"] = len(_location_service.cache)
    if _conditions_service is not None:
        sizes["weather"] = len(_conditions_service.weather_cache)
        sizes["soil"] = len(_conditions_service.soil_cache)
    return sizes
