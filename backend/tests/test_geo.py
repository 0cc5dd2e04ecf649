import httpx
import pytest

from kisan_saathi.tools.geo import (
    ReverseGeocoder,
    haversine_km,
    nearest_city,
    parse_bigdatacloud,
    parse_nominatim,
)
from conftest import make_fetcher


def test_parse_nominatim_prefers_city_then_town():
    assert parse_nominatim({"address": {"town": "Sarnath", "state": "Uttar Pradesh"}}).city == "Sarnath"
    assert parse_nominatim({"address": {"city": "Varanasi", "town": "X", "state": "Uttar Pradesh"}}).city == "Varanasi"
    assert parse_nominatim({"address": {"city": "Varanasi"}}) is None
    assert parse_nominatim({"error": "Unable to geocode"}) is None


def test_parse_bigdatacloud():
    place = parse_bigdatacloud({"city": "", "locality": "Ramnagar", "principalSubdivision": "Uttar Pradesh"})
    assert (place.city, place.state, place.provider) == ("Ramnagar", "Uttar Pradesh", "bigdatacloud")
    assert parse_bigdatacloud({"city": "Ramnagar"}) is None


def test_haversine_known_distance():
    # Varanasi -> Lucknow is roughly 265km as the crow flies
    assert 250 < haversine_km(25.3176, 82.9739, 26.8467, 80.9462) < 280


def test_nearest_city_within_range():
    place = nearest_city(25.33, 82.99)
    assert (place.city, place.provider) == ("Varanasi", "city_table")


def test_nearest_city_out_of_range():
    # middle of the Arabian Sea
    assert nearest_city(15.0, 65.0) is None


@pytest.mark.anyio
async def test_reverse_falls_back_to_bigdatacloud():
    def handler(request):
        if request.url.host == "nominatim.openstreetmap.org":
            return httpx.Response(500)
        return httpx.Response(200, json={"city": "Varanasi", "principalSubdivision": "Uttar Pradesh"})

    fetcher, rec = make_fetcher(handler)
    place = await ReverseGeocoder(fetcher).reverse(25.3176, 82.9739)
    assert (place.city, place.provider) == ("Varanasi", "bigdatacloud")
    assert rec.requests[0].headers["User-Agent"].startswith("KisanSaathiAI")


@pytest.mark.anyio
async def test_reverse_uses_city_table_when_services_fail():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    fetcher, _ = make_fetcher(handler)
    place = await ReverseGeocoder(fetcher).reverse(26.85, 80.95)
    assert (place.city, place.provider) == ("Lucknow", "city_table")


def test_parsers_reject_non_text_names():
    assert parse_nominatim({"address": {"city": 12345, "state": "Uttar Pradesh"}}) is None
    assert parse_nominatim({"address": {"city": "Varanasi", "state": ["Uttar Pradesh"]}}) is None
    assert parse_nominatim({"address": {"city": "  ", "state": "Uttar Pradesh"}}) is None
    assert parse_bigdatacloud({"city": {"name": "Varanasi"}, "principalSubdivision": "Uttar Pradesh"}) is None
    assert parse_bigdatacloud({"city": "Varanasi", "principalSubdivision": 9}) is None
