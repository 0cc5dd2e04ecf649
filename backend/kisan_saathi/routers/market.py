"""
Mandi price endpoints
"""
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kisan_saathi.config import settings
from kisan_saathi.core.services.market import MarketPriceService, PriceLookup
from kisan_saathi.di import get_market_service
from kisan_saathi.schemas import CommodityListResponse, MarketPriceQuery, MarketPriceResponse
from kisan_saathi.tools.agmarknet import available_commodities, available_states

router = APIRouter(tags=["market"], prefix="/scrape")


def iso_ms(ms: int) -> str:
    return dt.datetime.fromtimestamp(ms / 1000, tz=dt.timezone.utc).isoformat()


def _response(lookup: PriceLookup) -> MarketPriceResponse:
    return MarketPriceResponse(data=lookup.data, source=lookup.source, timestamp=iso_ms(lookup.timestamp))


@router.get("/market-prices", response_model=MarketPriceResponse)
@router.get("/agmarknet-prices", response_model=MarketPriceResponse)
async def get_market_prices(
    crop_type: Optional[str] = Query(None, alias="cropType", min_length=1),
    state: Optional[str] = Query(None, min_length=1),
    market: Optional[str] = None,
    service: MarketPriceService = Depends(get_market_service),
):
    """Cached prices if fresh, otherwise scrape Agmarknet (fallback data when that fails)."""
    lookup = await service.get_prices(
        crop_type or settings.DEFAULT_CROP,
        state or settings.DEFAULT_STATE,
        market or None,
    )
    return _response(lookup)


@router.post("/market-prices", response_model=MarketPriceResponse)
@router.post("/agmarknet-prices", response_model=MarketPriceResponse)
async def refresh_market_prices(
    req: Optional[MarketPriceQuery] = None,
    service: MarketPriceService = Depends(get_market_service),
):
    """Force refresh: clears the price cache, then fetches like GET."""
    req = req or MarketPriceQuery()
    lookup = await service.refresh(
        req.crop_type or settings.DEFAULT_CROP,
        req.state or settings.DEFAULT_STATE,
        req.market or None,
    )
    return _response(lookup)


@router.get("/market-prices/commodities", response_model=CommodityListResponse)
async def list_commodities():
    return CommodityListResponse(commodities=available_commodities(), states=available_states())
