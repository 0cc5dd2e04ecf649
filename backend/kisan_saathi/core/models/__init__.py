from .domain import (
    LocationRecord,
    ResolvedLocation,
    ScrapedPrice,
    MarketPriceRecord,
    LocationSource,
    PriceSource,
    PriceTrend,
)

__all__ = [
    "LocationRecord",
    "ResolvedLocation",
    "ScrapedPrice",
    "MarketPriceRecord",
    "LocationSource",
    "PriceSource",
    "PriceTrend",
]
