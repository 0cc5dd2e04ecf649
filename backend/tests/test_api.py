import httpx
import pytest
from fastapi.testclient import TestClient

from kisan_saathi import di
from kisan_saathi.core.models import ScrapedPrice
from kisan_saathi.core.services.conditions import ConditionsService
from kisan_saathi.core.services.location import LocationService
from kisan_saathi.core.services.market import MarketPriceService
from kisan_saathi.errors import FetchError
from kisan_saathi.main import app
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.geo import ReverseGeocoder
from kisan_saathi.tools.infer import LocationInferencer
from kisan_saathi.tools.ip_lookup import IpLocator
from kisan_saathi.tools.manual import ManualLocationStore
from kisan_saathi.utils.cache import SimpleTTLCache
from conftest import make_fetcher


class Scraper:
    def __init__(self, rows=None, error=None):
        self.rows, self.error, self.calls = rows or [], error, 0

    async def scrape_prices(self, commodity, state, market=None, from_date=None, to_date=None):
        self.calls += 1
        if self.error:
            raise self.error
        return [r.model_copy(update={"commodity": commodity, "state": state}) for r in self.rows]


ROW = ScrapedPrice(commodity="Rice", market="Varanasi", state="Uttar Pradesh",
                   min_price=2800, max_price=3200, modal_price=3000, date="18/10/2026")


def _offline(request):
    raise httpx.ConnectError("offline", request=request)


@pytest.fixture
def offline_fetcher():
    fetcher, _ = make_fetcher(_offline)
    return fetcher


@pytest.fixture
def client(offline_fetcher):
    fallback = FallbackGenerator(seed=9)
    location = LocationService(
        manual_store=ManualLocationStore(SimpleTTLCache()),
        ip_locator=IpLocator(offline_fetcher, providers=[]),
        geocoder=ReverseGeocoder(offline_fetcher),
        fallback=fallback,
    )
    app.dependency_overrides[di.get_location_service] = lambda: location
    app.dependency_overrides[di.get_conditions_service] = lambda: ConditionsService(offline_fetcher, fallback)
    app.dependency_overrides[di.get_inferencer] = lambda: LocationInferencer(api_key="", fallback=fallback)
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_scraper(scraper):
    service = MarketPriceService(scraper, fallback=FallbackGenerator(seed=9))
    app.dependency_overrides[di.get_market_service] = lambda: service
    return service


def test_root_and_health(client):
    assert client.get("/").json()["ok"] is True
    health = client.get("/health").json()
    assert health["ok"] is True
    assert health["default_crop"] == "Rice"


def test_unreachable_scraper_returns_fallback(client):
    use_scraper(Scraper(error=FetchError("agmarknet unreachable")))
    r = client.get("/scrape/market-prices", params={"cropType": "Rice", "state": "Uttar Pradesh"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["source"] == "fallback"
    rec = body["data"][0]
    assert rec["commodity"] == "Rice"
    assert rec["commodityHindi"] == "चावल"
    assert rec["minPrice"] <= rec["modalPrice"] <= rec["maxPrice"]


def test_second_call_is_served_from_cache(client):
    scraper = Scraper(rows=[ROW])
    use_scraper(scraper)
    params = {"cropType": "Rice", "state": "Uttar Pradesh"}

    first = client.get("/scrape/market-prices", params=params).json()
    second = client.get("/scrape/market-prices", params=params).json()
    assert first["source"] == "scraped"
    assert second["source"] == "cache"
    assert second["data"][0]["modalPrice"] == 3000
    assert scraper.calls == 1


def test_alias_route_and_defaults(client):
    use_scraper(Scraper(rows=[ROW]))
    body = client.get("/scrape/agmarknet-prices").json()
    assert body["data"][0]["commodity"] == "Rice"
    assert body["data"][0]["state"] == "Uttar Pradesh"


def test_post_forces_refresh(client):
    scraper = Scraper(rows=[ROW])
    use_scraper(scraper)
    client.get("/scrape/market-prices", params={"cropType": "Wheat", "state": "Punjab"})
    r = client.post("/scrape/market-prices", json={"cropType": "Wheat", "state": "Punjab"})
    assert r.json()["source"] == "scraped"
    assert scraper.calls == 2


def test_blank_crop_is_bad_request(client):
    use_scraper(Scraper(rows=[ROW]))
    r = client.get("/scrape/market-prices", params={"cropType": ""})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "invalid_request"


def test_commodity_list(client):
    body = client.get("/scrape/market-prices/commodities").json()
    assert "Mustard" in body["commodities"]
    assert "Punjab" in body["states"]


def test_resolve_with_only_timezone_falls_back(client):
    r = client.post("/location/resolve", json={"timeZone": "Asia/Kolkata", "language": "en-US"})
    assert r.status_code == 200
    body = r.json()
    assert body["source"] == "fallback"
    assert body["confidence"] == 30
    assert body["attempted"] == ["manual", "gps", "ip_lookup", "heuristic"]
    assert body["accuracyUnit"] == "score"


def test_manual_location_round_trip(client):
    saved = client.post("/location/manual", json={
        "clientId": "farmer-7", "city": "Nashik", "state": "Maharashtra", "lat": 19.9975, "lon": 73.7898,
    })
    assert saved.status_code == 200
    assert saved.json()["source"] == "manual"

    body = client.post("/location/resolve", json={"clientId": "farmer-7"}).json()
    assert (body["city"], body["source"], body["confidence"]) == ("Nashik", "manual", 90)


def test_manual_location_requires_fields(client):
    r = client.post("/location/manual", json={"clientId": "farmer-7", "city": "Nashik"})
    assert r.status_code == 400


def test_out_of_range_gps_fix_is_bad_request(client):
    r = client.post("/location/resolve", json={"gpsFixes": [{"lat": 123, "lon": 80, "accuracy": 5}]})
    assert r.status_code == 400


def test_infer_without_api_key_is_server_error(client):
    r = client.post("/location/infer", json={"timeZone": "Asia/Kolkata"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "credential_missing"


def test_weather_and_soil_fallbacks(client):
    weather = client.get("/scrape/weather-data", params={"lat": 25.3, "lon": 82.9, "location": "Varanasi"}).json()
    assert weather["source"] == "fallback-data"
    assert weather["location"] == "Varanasi"
    soil = client.get("/scrape/soil-data", params={"state": "Punjab", "district": "Ludhiana"}).json()
    assert soil["source"] == "fallback-data"
    assert soil["location"] == "Ludhiana, Punjab"


def test_null_island_manual_location_is_rejected(client):
    r = client.post("/location/manual", json={
        "clientId": "farmer-7", "city": "Nashik", "state": "Maharashtra", "lat": 0, "lon": 0,
    })
    assert r.status_code == 400
    assert r.json()["error"] == "validation_rejected"


def test_clearing_manual_location(client):
    client.post("/location/manual", json={
        "clientId": "farmer-8", "city": "Nashik", "state": "Maharashtra", "lat": 19.9975, "lon": 73.7898,
    })
    assert client.delete("/location/manual/farmer-8").json() == {"success": True, "clientId": "farmer-8"}
    body = client.post("/location/resolve", json={"clientId": "farmer-8"}).json()
    assert body["source"] == "fallback"
