"""
Location endpoints: cascade resolution, manual entry, AI inference
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request

from kisan_saathi.core.models import LocationRecord, ResolvedLocation
from kisan_saathi.core.services.location import LocationService, LocationSignals
from kisan_saathi.di import get_inferencer, get_location_service
from kisan_saathi.schemas import LocationInferRequest, LocationResolveRequest, ManualLocationRequest
from kisan_saathi.tools.gps import GpsFix
from kisan_saathi.tools.infer import LocationInferencer
from kisan_saathi.tools.manual import MANUAL_ACCURACY

router = APIRouter(tags=["location"], prefix="/location")


def _caller_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def to_signals(req: LocationResolveRequest, caller_ip: Optional[str] = None) -> LocationSignals:
    manual = None
    if req.manual_location is not None:
        m = req.manual_location
        manual = LocationRecord(
            city=m.city,
            state=m.state,
            country=m.country,
            lat=m.lat,
            lon=m.lon,
            accuracy=MANUAL_ACCURACY,
            source="manual",
            timestamp=m.timestamp,
        )
    return LocationSignals(
        client_id=req.client_id,
        ip_address=req.ip_address or caller_ip,
        user_agent=req.user_agent,
        time_zone=req.time_zone,
        language=req.language,
        network_info=req.network_info,
        gps_fixes=[GpsFix(f.lat, f.lon, f.accuracy) for f in req.gps_fixes],
        manual_location=manual,
        force_refresh=req.force_refresh,
    )


@router.post("/resolve", response_model=ResolvedLocation)
async def resolve_location(
    req: LocationResolveRequest,
    request: Request,
    service: LocationService = Depends(get_location_service),
):
    """
    Manual > GPS > IP lookup > heuristics, first plausible answer wins.
    Always answers; when nothing works the fallback center comes back with
    source="fallback" and low confidence.
    """
    return await service.resolve(to_signals(req, _caller_ip(request)))


@router.post("/manual", response_model=ResolvedLocation)
async def save_manual_location(
    req: ManualLocationRequest,
    service: LocationService = Depends(get_location_service),
):
    return service.save_manual(req.client_id, req.city, req.state, req.lat, req.lon, req.country)


@router.post("/infer", response_model=ResolvedLocation)
async def infer_location(
    req: LocationInferRequest,
    request: Request,
    inferencer: LocationInferencer = Depends(get_inferencer),
):
    signals = {
        "IP Address": req.ip_address or _caller_ip(request),
        "User Agent": req.user_agent,
        "Timezone": req.time_zone,
        "Language": req.language,
        "Screen Resolution": req.screen_resolution,
        "Network Info": req.network_info,
    }
    return await inferencer.infer(signals)


@router.delete("/manual/{client_id}")
async def clear_manual_location(
    client_id: str,
    service: LocationService = Depends(get_location_service),
):
    service.clear_manual(client_id)
    return {"success": True, "clientId": client_id}
