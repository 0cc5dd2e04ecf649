"""
Weather and soil feeds
"""
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kisan_saathi.core.services.conditions import ConditionsService
from kisan_saathi.di import get_conditions_service
from kisan_saathi.schemas import ConditionsResponse

router = APIRouter(tags=["conditions"], prefix="/scrape")


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


@router.get("/weather-data", response_model=ConditionsResponse)
async def weather_data(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    location: Optional[str] = None,
    service: ConditionsService = Depends(get_conditions_service),
):
    data = await service.weather(lat, lon)
    return ConditionsResponse(data=data, source=data["source"], location=location, timestamp=_now_iso())


@router.get("/soil-data", response_model=ConditionsResponse)
async def soil_data(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    state: Optional[str] = None,
    district: Optional[str] = None,
    service: ConditionsService = Depends(get_conditions_service),
):
    data = await service.soil(lat, lon)
    label = ", ".join(p for p in (district, state) if p) or None
    return ConditionsResponse(data=data, source=data["source"], location=label, timestamp=_now_iso())
