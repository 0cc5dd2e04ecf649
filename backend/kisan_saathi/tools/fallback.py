# backend/kisan_saathi/tools/fallback.py
"""
Synthetic but well-formed data for when every real source has failed.

Everything produced here is tagged (source="fallback" / "fallback-data") so
callers can show a disclaimer. Randomness comes from an injected
random.Random, so a seed makes the output reproducible.
"""
import datetime as dt
import random
import time
from typing import Any, Dict, List, Optional

from kisan_saathi.core.models import MarketPriceRecord, ResolvedLocation
from kisan_saathi.data.cities import FALLBACK_CENTER
from kisan_saathi.data.commodities import BASE_PRICES, DEFAULT_BAND, REGIONAL_FACTORS, hindi_name
from kisan_saathi.tools.pricing import TREND_BAND, recommendation_for, trend_from_factor

SEASONAL_RANGE = (0.85, 1.15)
FALLBACK_CONFIDENCE = 30


class FallbackGenerator:
    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    # ---------- market prices ----------
    def market_prices(
        self,
        commodity: str,
        state: str,
        market: Optional[str] = None,
        today: Optional[dt.date] = None,
    ) -> List[MarketPriceRecord]:
        base = BASE_PRICES.get(commodity, DEFAULT_BAND)
        seasonal = self._rng.uniform(*SEASONAL_RANGE)
        regional = REGIONAL_FACTORS.get(state, 1.0)
        factor = seasonal * regional

        # same factor on an ordered band keeps min <= modal <= max
        lo, mid, hi = sorted(round(p * factor) for p in (base.min, base.modal, base.max))

        trend = trend_from_factor(seasonal)
        change = round(mid * TREND_BAND)
        price_change = change if trend == "increasing" else -change if trend == "decreasing" else 0

        day = today or dt.date.today()
        return [MarketPriceRecord(
            commodity=commodity,
            commodity_hindi=hindi_name(commodity),
            market=market or "Local Market",
            state=state,
            min_price=lo,
            max_price=hi,
            modal_price=mid,
            trend=trend,
            date=f"{day.day}/{day.month}/{day.year}",
            price_change=price_change,
            recommendation=recommendation_for(commodity, trend),
            source="fallback",
        )]

    # ---------- location ----------
    def location(self, attempted: Optional[List[str]] = None, reason: str = "") -> ResolvedLocation:
        c = FALLBACK_CENTER
        return ResolvedLocation(
            city=c.name,
            state=c.state,
            lat=c.lat,
            lon=c.lon,
            accuracy=FALLBACK_CONFIDENCE,
            source="fallback",
            timestamp=int(time.time() * 1000),
            confidence=FALLBACK_CONFIDENCE,
            reasoning=reason or f"No location source succeeded; using agricultural center {c.name}, {c.state}",
            provider="default",
            attempted=list(attempted or []),
        )

    # ---------- weather / soil ----------
    def weather(self) -> Dict[str, Any]:
        return {
            "currentWeather": {
                "temperature": 28,
                "humidity": 70,
                "rainfall": 5,
                "windSpeed": 8,
                "pressure": 1013,
                "visibility": 10,
            },
            "forecast": ["Partly cloudy", "Light rain expected"],
            "cropAdvisory": ["Weather conditions are favorable for crop growth"],
            "irrigationAdvice": "Apply irrigation as per crop requirement",
            "pestRisk": "Low",
            "diseaseRisk": "Low",
            "fieldActivities": ["Regular monitoring", "Apply fertilizers as needed"],
            "source": "fallback-data",
        }

    def soil(self) -> Dict[str, Any]:
        return {
            "soilType": "Alluvial",
            "ph": 7.2,
            "organicCarbon": 0.65,
            "nitrogen": 1.2,
            "texture": {"clay": 20.0, "sand": 40.0, "silt": 40.0},
            "recommendations": ["Soil health is good", "Continue organic practices"],
            "fertilizers": ["Apply balanced NPK fertilizers"],
            "amendments": ["Add organic matter regularly"],
            "testingAdvice": "Test soil every 2-3 years",
            "source": "fallback-data",
        }

