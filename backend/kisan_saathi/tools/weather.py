# backend/kisan_saathi/tools/weather.py
import logging
import time
from typing import Any, Dict, List, Optional

from kisan_saathi.config import settings
from kisan_saathi.core.adapters import Fetcher
from kisan_saathi.errors import ParseError

log = logging.getLogger("kisan_saathi.weather")

def t(): return time.perf_counter()

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


def _f(x: Any) -> Optional[float]:
    try:
        return None if x is None else float(x)
    except (TypeError, ValueError):
        return None


def _series(daily: Dict[str, Any], name: str) -> List[Any]:
    values = daily.get(name)
    return values if isinstance(values, list) else []


def parse_open_meteo(data: Any) -> Optional[Dict[str, Any]]:
    """Current conditions + compact daily list, or None if `current` is missing."""
    if not isinstance(data, dict):
        return None
    cur = data.get("current")
    if not isinstance(cur, dict) or _f(cur.get("temperature_2m")) is None:
        return None

    daily = data.get("daily")
    if not isinstance(daily, dict):
        daily = {}
    dtime: List[str] = _series(daily, "time")
    tmax = _series(daily, "temperature_2m_max")
    tmin = _series(daily, "temperature_2m_min")
    rain = _series(daily, "precipitation_sum")
    prob = _series(daily, "precipitation_probability_max")
    wmax = _series(daily, "wind_speed_10m_max")

    forecast = []
    for i in range(min(len(dtime), len(tmax), len(tmin))):
        forecast.append({
            "date": dtime[i],
            "tmaxC": _f(tmax[i]),
            "tminC": _f(tmin[i]),
            "rainMm": _f(rain[i]) if i < len(rain) else None,
            "rainChancePct": _f(prob[i]) if i < len(prob) else None,
            "windKmhMax": _f(wmax[i]) if i < len(wmax) else None,
        })

    today_rain = forecast[0]["rainMm"] if forecast and forecast[0]["rainMm"] is not None else None
    visibility_m = _f(cur.get("visibility"))
    return {
        "currentWeather": {
            "temperature": _f(cur.get("temperature_2m")),
            "humidity": _f(cur.get("relative_humidity_2m")),
            "rainfall": today_rain if today_rain is not None else (_f(cur.get("precipitation")) or 0.0),
            "windSpeed": _f(cur.get("wind_speed_10m")),
            "pressure": _f(cur.get("surface_pressure")),
            "visibility": round(visibility_m / 1000, 1) if visibility_m is not None else None,
        },
        "forecast": forecast,
    }


def farm_advisory(current: Dict[str, Any]) -> Dict[str, Any]:
    temp = current.get("temperature") or 0
    humidity = current.get("humidity") or 0
    rain = current.get("rainfall") or 0

    advisory = []
    if rain > 50:
        advisory.append("Heavy rainfall - ensure proper drainage")
    if temp > 35:
        advisory.append("High temperature - increase irrigation")
    if humidity > 85:
        advisory.append("High humidity - monitor for fungal diseases")
    if not advisory:
        advisory.append("Weather conditions are within normal range")

    if rain > 25:
        irrigation = "Reduce irrigation due to sufficient rainfall"
    elif temp > 35:
        irrigation = "Increase irrigation frequency"
    else:
        irrigation = "Apply irrigation as per crop requirement"

    if humidity > 80 and temp > 25:
        pest = "High"
    elif humidity > 70:
        pest = "Medium"
    else:
        pest = "Low"

    disease = "High" if humidity > 85 else "Medium" if humidity > 75 else "Low"

    return {
        "cropAdvisory": advisory,
        "irrigationAdvice": irrigation,
        "pestRisk": pest,
        "diseaseRisk": disease,
        "fieldActivities": [
            "Plan irrigation schedule" if rain < 10 else "Check field drainage",
            "Apply mulching to conserve moisture" if temp > 30 else "Regular field monitoring",
        ],
    }


async def fetch_weather(
    fetcher: Fetcher,
    lat: float,
    lon: float,
    tz: str = "auto",
    timeout: float = settings.WEATHER_TIMEOUT_SEC,
) -> Dict[str, Any]:
    start = t()
    params = {
        "latitude": lat,
        "longitude": lon,
        "current": "temperature_2m,relative_humidity_2m,precipitation,wind_speed_10m,surface_pressure,visibility",
        "daily": "temperature_2m_max,temperature_2m_min,precipitation_sum,precipitation_probability_max,wind_speed_10m_max",
        "forecast_days": 7,
        "timezone": tz,
        "temperature_unit": "celsius",
        "wind_speed_unit": "kmh",
    }
    data = await fetcher.get_json(OPEN_METEO_URL, params=params, timeout=timeout)
    parsed = parse_open_meteo(data)
    if parsed is None:
        raise ParseError("Open-Meteo response has no current conditions")

    log.info("⏱️  Weather forecast: %dms", round((t() - start) * 1000))
    return {**parsed, **farm_advisory(parsed["currentWeather"]), "source": "open-meteo"}
