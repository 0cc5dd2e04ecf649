# backend/kisan_saathi/tools/pricing.py
import datetime as dt
from typing import Dict, List, Optional, Tuple

from kisan_saathi.core.models import MarketPriceRecord, ScrapedPrice
from kisan_saathi.data.commodities import hindi_name

# +/- band around 1.0 inside which a price move counts as "stable"
TREND_BAND = 0.05

_DATE_FORMATS = ("%d/%m/%Y", "%d %b %Y", "%d-%b-%Y", "%d-%m-%Y", "%Y-%m-%d")


def trend_from_factor(factor: float) -> str:
    if factor > 1 + TREND_BAND:
        return "increasing"
    if factor < 1 - TREND_BAND:
        return "decreasing"
    return "stable"


def price_trend(latest: float, previous: Optional[float]) -> Tuple[str, float]:
    """(trend, priceChange) of `latest` against the prior day's modal price."""
    if not previous or previous <= 0:
        return "stable", 0
    return trend_from_factor(latest / previous), round(latest - previous)


def recommendation_for(commodity: str, trend: str) -> str:
    if trend == "increasing":
        return f"{commodity} prices are rising. Consider selling if you have stock, or wait for better rates."
    if trend == "decreasing":
        return f"{commodity} prices are falling. Good time to buy for processing or wait for further decline."
    return f"{commodity} prices are stable. Normal trading conditions."


def parse_report_date(s: str) -> Optional[dt.date]:
    s = (s or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def process_scraped(rows: List[ScrapedPrice]) -> List[MarketPriceRecord]:
    """
    Scraped rows -> MarketPriceRecord, newest first within each market.

    Each row's trend compares it with the same market's row from the
    previous reported date. Rows are passed through as scraped; nothing
    checks min <= modal <= max here.
    """
    by_market: Dict[str, List[ScrapedPrice]] = {}
    for r in rows:
        by_market.setdefault(r.market, []).append(r)

    out: List[MarketPriceRecord] = []
    for items in by_market.values():
        # unparsable dates sort last, keeping page order among themselves
        ordered = sorted(items, key=lambda r: parse_report_date(r.date) or dt.date.min, reverse=True)
        for i, row in enumerate(ordered):
            prev = next((p for p in ordered[i + 1:] if p.date != row.date), None)
            trend, change = price_trend(row.modal_price, prev.modal_price if prev else None)
            out.append(MarketPriceRecord(
                commodity=row.commodity,
                commodity_hindi=hindi_name(row.commodity),
                market=row.market,
                state=row.state,
                min_price=row.min_price,
                max_price=row.max_price,
                modal_price=row.modal_price,
                date=row.date,
                trend=trend,
                price_change=change,
                recommendation=recommendation_for(row.commodity, trend),
                source="scraped",
            ))
    return out
