from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal

LocationSource = Literal["gps", "ip_lookup", "manual", "heuristic", "fallback"]
AccuracyUnit = Literal["meters", "score"]
PriceTrend = Literal["increasing", "decreasing", "stable"]
PriceSource = Literal["scraped", "cache", "fallback"]


class DomainModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# Domain models for location resolution
class LocationRecord(DomainModel):
    city: str
    state: str
    country: str = "India"
    lat: float
    lon: float
    # source-declared precision; metres for GPS, a 0-100 score otherwise
    accuracy: float
    accuracy_unit: AccuracyUnit = "score"
    source: LocationSource
    timestamp: int  # epoch millis


class ResolvedLocation(LocationRecord):
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str = ""
    provider: Optional[str] = None
    attempted: List[str] = Field(default_factory=list)


# Domain models for mandi prices
class ScrapedPrice(DomainModel):
    commodity: str
    market: str
    state: str
    min_price: float
    max_price: float
    modal_price: float
    date: str
    arrivals: Optional[str] = None


class MarketPriceRecord(DomainModel):
    commodity: str
    commodity_hindi: str
    market: str
    state: str
    min_price: float
    max_price: float
    modal_price: float
    date: str  # as formatted by the source, not normalized
    trend: PriceTrend = "stable"
    price_change: float = 0
    recommendation: str = ""
    source: PriceSource
