from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kisan_saathi.core.models import MarketPriceRecord, PriceSource


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Request models ----------

class MarketPriceQuery(ApiModel):
    crop_type: Optional[str] = Field(None, min_length=1, description="Commodity name (e.g., 'Rice'); defaults to DEFAULT_CROP")
    state: Optional[str] = Field(None, min_length=1, description="Indian state; defaults to DEFAULT_STATE")
    market: Optional[str] = Field(None, description="Specific mandi, or all markets when omitted")


class GpsFixIn(ApiModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    accuracy: float = Field(..., ge=0, description="Reported error radius in metres")


class ManualLocationIn(ApiModel):
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = "India"
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    timestamp: int = Field(..., description="When the user saved it, epoch millis")


class LocationResolveRequest(ApiModel):
    client_id: Optional[str] = Field(None, description="Stable per-browser id; keys the manual store and cache")
    ip_address: Optional[str] = Field(None, description="Defaults to the caller's socket address")
    user_agent: Optional[str] = None
    time_zone: Optional[str] = None
    language: Optional[str] = None
    network_info: Dict[str, Any] = Field(default_factory=dict)
    gps_fixes: List[GpsFixIn] = Field(default_factory=list)
    manual_location: Optional[ManualLocationIn] = None
    force_refresh: bool = False


class ManualLocationRequest(ApiModel):
    client_id: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = "India"
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class LocationInferRequest(ApiModel):
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    time_zone: Optional[str] = None
    language: Optional[str] = None
    network_info: Dict[str, Any] = Field(default_factory=dict)
    screen_resolution: Optional[str] = None


# ---------- Response models ----------

class MarketPriceResponse(ApiModel):
    success: bool = True
    data: List[MarketPriceRecord]
    source: PriceSource
    timestamp: str  # ISO-8601


class CommodityListResponse(ApiModel):
    success: bool = True
    commodities: List[str]
    states: List[str]


class ConditionsResponse(ApiModel):
    success: bool = True
    data: Dict[str, Any]
    source: str
    location: Optional[str] = None
    timestamp: str


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
    message: str
    timestamp: str
