# backend/kisan_saathi/tools/agmarknet.py
"""
Agmarknet "Datewise Commodity Report" scraper.

The report is an ASP.NET WebForms page: a GET returns the form with its
__VIEWSTATE / __VIEWSTATEGENERATOR / __EVENTVALIDATION hidden fields, and
only a POST echoing those tokens back returns the price table. Without a
view state there is nothing valid to submit, so we stop before the POST.
"""
import datetime as dt
import logging
import time
from typing import Dict, List, NamedTuple, Optional

from bs4 import BeautifulSoup

from kisan_saathi.config import settings
from kisan_saathi.core.models import ScrapedPrice
from kisan_saathi.errors import NoDataFound, ParseError
from kisan_saathi.core.adapters import Fetcher

log = logging.getLogger("kisan_saathi.agmarknet")

def t(): return time.perf_counter()

REPORT_PATH = "/PriceAndArrivals/DatewiseCommodityReport.aspx"
BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BROWSER_HEADERS = {
    "User-Agent": BROWSER_UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}

_FIELD = "ctl00$ContentPlaceHolder1$"

# UI name -> Agmarknet option value
COMMODITY_MAP: Dict[str, str] = {
    "Rice": "Rice",
    "Wheat": "Wheat",
    "Potato": "Potato",
    "Onion": "Onion",
    "Tomato": "Tomato",
    "Sugarcane": "Sugarcane",
    "Cotton": "Cotton",
    "Maize": "Maize",
    "Soybean": "Soybean",
    "Groundnut": "Groundnut",
    "Mustard": "Mustard Seed",
    "Turmeric": "Turmeric",
    "Chilli": "Chilli",
    "Coriander": "Coriander",
    "Cumin": "Cumin",
    "Ginger": "Ginger",
    "Garlic": "Garlic",
    "Cabbage": "Cabbage",
    "Cauliflower": "Cauliflower",
    "Carrot": "Carrot",
}

STATE_MAP: Dict[str, str] = {
    "Uttar Pradesh": "Uttar Pradesh",
    "Maharashtra": "Maharashtra",
    "Punjab": "Punjab",
    "Haryana": "Haryana",
    "Rajasthan": "Rajasthan",
    "Gujarat": "Gujarat",
    "Madhya Pradesh": "Madhya Pradesh",
    "Bihar": "Bihar",
    "West Bengal": "West Bengal",
    "Karnataka": "Karnataka",
    "Tamil Nadu": "Tamil Nadu",
    "Andhra Pradesh": "Andhra Pradesh",
}


class FormTokens(NamedTuple):
    view_state: str
    view_state_generator: str
    event_validation: str


# -------------------------------
# Parsers (never raise)
# -------------------------------
def _hidden_value(soup: BeautifulSoup, name: str) -> str:
    el = soup.find("input", attrs={"name": name})
    if el is None:
        return ""
    return (el.get("value") or "").strip()


def parse_form_tokens(html: Optional[str]) -> Optional[FormTokens]:
    """Extract the WebForms hidden fields; None when __VIEWSTATE is absent."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    view_state = _hidden_value(soup, "__VIEWSTATE")
    if not view_state:
        return None
    return FormTokens(
        view_state=view_state,
        view_state_generator=_hidden_value(soup, "__VIEWSTATEGENERATOR"),
        event_validation=_hidden_value(soup, "__EVENTVALIDATION"),
    )


def _to_price(text: str) -> Optional[float]:
    try:
        return float(text.replace(",", "").strip())
    except (ValueError, AttributeError):
        return None


def parse_price_table(
    html: Optional[str],
    commodity: str,
    state: str,
    market: Optional[str] = None,
    default_date: str = "",
) -> Optional[List[ScrapedPrice]]:
    """
    Rows of the first GridView table as ScrapedPrice.

    Columns: date, market, arrivals, min, max, modal. Returns None when the
    page has no result table at all.
    """
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table", id=lambda v: bool(v) and "GridView" in v)
    if table is None:
        msg = " ".join(el.get_text(" ", strip=True) for el in soup.select(".error, .alert, .message"))
        if msg:
            log.info("Agmarknet message: %s", msg)
        return None

    out: List[ScrapedPrice] = []
    for i, row in enumerate(table.find_all("tr")):
        if i == 0:
            continue  # header
        cells = [c.get_text(" ", strip=True) for c in row.find_all("td")]
        if len(cells) < 6:
            continue
        min_p = _to_price(cells[3]) or 0.0
        max_p = _to_price(cells[4]) or 0.0
        modal_p = _to_price(cells[5])
        if not modal_p:
            modal_p = float(round((min_p + max_p) / 2))
        if min_p <= 0 and max_p <= 0 and modal_p <= 0:
            continue
        out.append(ScrapedPrice(
            commodity=commodity,
            market=cells[1] or market or "Unknown",
            state=state,
            min_price=min_p,
            max_price=max_p,
            modal_price=modal_p,
            date=cells[0] or default_date,
            arrivals=cells[2] or None,
        ))
    return out


def format_date(d: dt.date) -> str:
    return d.strftime("%d/%m/%Y")


def build_form_payload(
    tokens: FormTokens,
    commodity: str,
    state: str,
    market: Optional[str],
    from_date: str,
    to_date: str,
) -> Dict[str, str]:
    return {
        "__VIEWSTATE": tokens.view_state,
        "__VIEWSTATEGENERATOR": tokens.view_state_generator,
        "__EVENTVALIDATION": tokens.event_validation,
        f"{_FIELD}ddlCommodity": commodity,
        f"{_FIELD}ddlState": state,
        f"{_FIELD}ddlDistrict": "",
        f"{_FIELD}ddlMarket": market or "",
        f"{_FIELD}txtFromDate": from_date,
        f"{_FIELD}txtToDate": to_date,
        f"{_FIELD}btnSubmit": "Submit",
    }


# -------------------------------
# Scraper
# -------------------------------
class AgmarknetScraper:
    def __init__(
        self,
        fetcher: Fetcher,
        base_url: str = settings.AGMARKNET_BASE_URL,
        get_timeout: float = settings.AGMARKNET_GET_TIMEOUT_SEC,
        post_timeout: float = settings.AGMARKNET_POST_TIMEOUT_SEC,
        today=dt.date.today,
    ):
        self._fetcher = fetcher
        self._url = base_url.rstrip("/") + REPORT_PATH
        self._get_timeout = get_timeout
        self._post_timeout = post_timeout
        self._today = today

    @property
    def report_url(self) -> str:
        return self._url

    async def scrape_prices(
        self,
        commodity: str,
        state: str,
        market: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[ScrapedPrice]:
        """
        Fetch form -> extract tokens -> submit form -> parse table.

        Raises FetchError (network/timeout/status), ParseError (no view state)
        or NoDataFound (no table / no usable rows).
        """
        start = t()
        from_date = from_date or format_date(self._today())
        to_date = to_date or from_date
        ag_commodity = COMMODITY_MAP.get(commodity, commodity)
        ag_state = STATE_MAP.get(state, state)
        log.info("🌾 Scraping Agmarknet: %s / %s%s", commodity, state, f" ({market})" if market else "")

        form_html = await self._fetcher.get_text(self._url, headers=BROWSER_HEADERS, timeout=self._get_timeout)
        tokens = parse_form_tokens(form_html)
        if tokens is None:
            raise ParseError("Could not extract __VIEWSTATE from Agmarknet form")

        payload = build_form_payload(tokens, ag_commodity, ag_state, market, from_date, to_date)
        headers = {**BROWSER_HEADERS, "Referer": self._url}
        result_html = await self._fetcher.post_form(self._url, payload, headers=headers, timeout=self._post_timeout)

        rows = parse_price_table(result_html, commodity, state, market, default_date=from_date)
        if not rows:
            raise NoDataFound(f"No Agmarknet price rows for {commodity} in {state}")

        log.info("✅ Scraped %d Agmarknet rows in %dms", len(rows), round((t() - start) * 1000))
        return rows


def available_commodities() -> List[str]:
    return list(COMMODITY_MAP.keys())


def available_states() -> List[str]:
    return list(STATE_MAP.keys())
