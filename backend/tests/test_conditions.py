import httpx
import pytest

from kisan_saathi.core.services.conditions import ConditionsService, cell_key
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.soil import parse_soilgrids, soil_type
from kisan_saathi.tools.weather import farm_advisory, parse_open_meteo
from kisan_saathi.utils.cache import SimpleTTLCache
from conftest import make_fetcher

OPEN_METEO = {
    "current": {
        "temperature_2m": 36.5,
        "relative_humidity_2m": 88,
        "precipitation": 0.4,
        "wind_speed_10m": 12.0,
        "surface_pressure": 1002.1,
        "visibility": 8000,
    },
    "daily": {
        "time": ["2026-10-18", "2026-10-19"],
        "temperature_2m_max": [37.0, 35.2],
        "temperature_2m_min": [26.1, 25.0],
        "precipitation_sum": [2.5, 0.0],
        "precipitation_probability_max": [40, 10],
        "wind_speed_10m_max": [18.0, 15.5],
    },
}


def _layer(name, mean):
    return {"name": name, "depths": [{"label": "0-5cm", "values": {"mean": mean}},
                                     {"label": "5-15cm", "values": {"mean": 1}}]}


SOILGRIDS = {"properties": {"layers": [
    _layer("phh2o", 62), _layer("soc", 40), _layer("nitrogen", 30),
    _layer("clay", 450), _layer("sand", 250), _layer("silt", 300),
]}}


def test_parse_open_meteo():
    parsed = parse_open_meteo(OPEN_METEO)
    cur = parsed["currentWeather"]
    assert cur["temperature"] == 36.5
    assert cur["rainfall"] == 2.5
    assert cur["visibility"] == 8.0
    assert len(parsed["forecast"]) == 2
    assert parse_open_meteo({"daily": {}}) is None


def test_parse_open_meteo_tolerates_malformed_daily_block():
    parsed = parse_open_meteo({**OPEN_METEO, "daily": [1, 2, 3]})
    assert parsed["currentWeather"]["temperature"] == 36.5
    assert parsed["forecast"] == []
    parsed = parse_open_meteo({**OPEN_METEO, "daily": {**OPEN_METEO["daily"], "temperature_2m_max": "hot"}})
    assert parsed["forecast"] == []


def test_farm_advisory_flags_heat_and_humidity():
    adv = farm_advisory({"temperature": 36.5, "humidity": 88, "rainfall": 2.5})
    assert "High temperature - increase irrigation" in adv["cropAdvisory"]
    assert adv["irrigationAdvice"] == "Increase irrigation frequency"
    assert (adv["pestRisk"], adv["diseaseRisk"]) == ("High", "High")


def test_parse_soilgrids_scales_topsoil_values():
    props = parse_soilgrids(SOILGRIDS)
    assert props == {"phh2o": 6.2, "soc": 0.4, "nitrogen": 0.3, "clay": 45.0, "sand": 25.0, "silt": 30.0}
    assert soil_type(props["clay"], props["sand"], props["silt"]) == "Clayey"
    assert parse_soilgrids({"properties": {}}) is None


def test_parse_soilgrids_skips_malformed_entries():
    data = {"properties": {"layers": [
        {"name": ["phh2o"], "depths": []},
        {"name": "soc", "depths": "0-5cm"},
        {"name": "clay", "depths": ["0-5cm", {"label": "0-5cm", "values": [1]}]},
        {"name": "sand", "depths": [{"label": "0-5cm", "values": {"mean": "n/a"}}]},
        _layer("silt", 300),
    ]}}
    assert parse_soilgrids(data) == {"silt": 30.0}
    assert parse_soilgrids({"properties": []}) is None
    assert parse_soilgrids({"properties": {"layers": [_layer("sand", "n/a")]}}) is None


def test_cell_key_rounds_coordinates():
    assert cell_key("weather", 25.31764, 82.97391) == "weather:25.32:82.97"


def _service(handler, clock):
    fetcher, rec = make_fetcher(handler)
    svc = ConditionsService(
        fetcher,
        fallback=FallbackGenerator(seed=1),
        weather_cache=SimpleTTLCache(1800, clock=clock),
        soil_cache=SimpleTTLCache(86400, clock=clock),
    )
    return svc, rec


@pytest.mark.anyio
async def test_weather_is_fetched_then_cached(clock):
    svc, rec = _service(lambda r: httpx.Response(200, json=OPEN_METEO), clock)
    first = await svc.weather(25.3176, 82.9739)
    second = await svc.weather(25.3181, 82.9741)
    assert first["source"] == "open-meteo"
    assert second is first
    assert len(rec.requests) == 1
    assert rec.requests[0].url.params["latitude"] == "25.3176"


@pytest.mark.anyio
async def test_weather_outage_returns_fallback_data(clock):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    svc, _ = _service(handler, clock)
    data = await svc.weather(19.07, 72.87)
    assert data["source"] == "fallback-data"
    assert data["currentWeather"]["pressure"] == 1013


@pytest.mark.anyio
async def test_soil_lookup_and_default_coordinates(clock):
    svc, rec = _service(lambda r: httpx.Response(200, json=SOILGRIDS), clock)
    data = await svc.soil()
    assert data["source"] == "soilgrids"
    assert data["soilType"] == "Clayey"
    assert "Apply lime to increase pH" in data["amendments"]
    assert "Add organic matter (compost/FYM)" in data["amendments"]
    assert "Apply nitrogen fertilizer (Urea)" in data["fertilizers"]
    params = rec.requests[0].url.params
    assert params["lat"] == "25.3176"
    assert params.get_list("property") == ["phh2o", "soc", "nitrogen", "clay", "sand", "silt"]


@pytest.mark.anyio
async def test_soil_bad_payload_returns_fallback(clock):
    svc, _ = _service(lambda r: httpx.Response(200, json={"type": "Feature"}), clock)
    data = await svc.soil(30.9, 75.85)
    assert data["source"] == "fallback-data"
    assert data["soilType"] == "Alluvial"
