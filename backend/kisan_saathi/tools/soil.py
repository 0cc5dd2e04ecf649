# backend/kisan_saathi/tools/soil.py
import logging
import time
from typing import Any, Dict, List, Optional

from kisan_saathi.config import settings
from kisan_saathi.core.adapters import Fetcher
from kisan_saathi.errors import ParseError

log = logging.getLogger("kisan_saathi.soil")

def t(): return time.perf_counter()

SOILGRIDS_URL = "https://rest.isric.org/soilgrids/v2.0/properties/query"
SOIL_PROPERTIES = ("phh2o", "soc", "nitrogen", "clay", "sand", "silt")
TOPSOIL_DEPTH = "0-5cm"

# SoilGrids mapped units -> conventional units
_SCALE = {
    "phh2o": 10.0,     # pH*10 -> pH
    "soc": 100.0,      # dg/kg -> %
    "nitrogen": 100.0, # cg/kg -> g/kg
    "clay": 10.0,      # g/kg -> %
    "sand": 10.0,
    "silt": 10.0,
}


def parse_soilgrids(data: Any) -> Optional[Dict[str, float]]:
    """{property: value} for the topsoil layer; None when nothing usable came back."""
    if not isinstance(data, dict):
        return None
    props = data.get("properties")
    layers = props.get("layers") if isinstance(props, dict) else None
    if not isinstance(layers, list):
        return None

    out: Dict[str, float] = {}
    for layer in layers:
        name = layer.get("name") if isinstance(layer, dict) else None
        if not isinstance(name, str) or name not in _SCALE:
            continue
        depths = layer.get("depths")
        for depth in depths if isinstance(depths, list) else []:
            if not isinstance(depth, dict) or depth.get("label") != TOPSOIL_DEPTH:
                continue
            values = depth.get("values")
            mean = values.get("mean") if isinstance(values, dict) else None
            if mean is None:
                continue
            try:
                out[name] = round(float(mean) / _SCALE[name], 2)
            except (TypeError, ValueError):
                log.warning("⚠️ Unreadable SoilGrids %s value: %r", name, mean)
    return out or None


def soil_type(clay: Optional[float], sand: Optional[float], silt: Optional[float]) -> str:
    if clay is None or sand is None or silt is None:
        return "Unknown"
    if sand >= 70:
        return "Sandy"
    if clay >= 40:
        return "Clayey"
    if silt >= 50:
        return "Silty"
    return "Loamy"


def soil_advice(props: Dict[str, float]) -> Dict[str, List[str]]:
    ph = props.get("phh2o")
    oc = props.get("soc")
    n = props.get("nitrogen")

    amendments = []
    if ph is not None and ph < 6.5:
        amendments.append("Apply lime to increase pH")
    if ph is not None and ph > 8.5:
        amendments.append("Apply gypsum to decrease pH")
    if oc is not None and oc < 0.5:
        amendments.append("Add organic matter (compost/FYM)")

    fertilizers = []
    if n is not None and n < 0.5:
        fertilizers.append("Apply nitrogen fertilizer (Urea)")
    if not fertilizers:
        fertilizers.append("Apply balanced NPK fertilizers as per soil test")

    recommendations = []
    if not amendments:
        recommendations.append("Soil health is good")
    if oc is not None and oc >= 0.75:
        recommendations.append("Organic carbon is healthy; continue organic practices")
    return {"amendments": amendments, "fertilizers": fertilizers, "recommendations": recommendations}


async def fetch_soil(
    fetcher: Fetcher,
    lat: float,
    lon: float,
    timeout: float = settings.SOIL_TIMEOUT_SEC,
) -> Dict[str, Any]:
    start = t()
    params = [
        ("lat", str(lat)),
        ("lon", str(lon)),
        ("depth", TOPSOIL_DEPTH),
        ("value", "mean"),
        *[("property", p) for p in SOIL_PROPERTIES],
    ]
    data = await fetcher.get_json(SOILGRIDS_URL, params=params, timeout=timeout)
    props = parse_soilgrids(data)
    if props is None:
        raise ParseError("SoilGrids returned no topsoil values")

    log.info("⏱️  Soil lookup: %dms", round((t() - start) * 1000))
    return {
        "soilType": soil_type(props.get("clay"), props.get("sand"), props.get("silt")),
        "ph": props.get("phh2o"),
        "organicCarbon": props.get("soc"),
        "nitrogen": props.get("nitrogen"),
        "texture": {k: props.get(k) for k in ("clay", "sand", "silt")},
        **soil_advice(props),
        "testingAdvice": "Test soil every 2-3 years for optimal crop management",
        "source": "soilgrids",
    }
