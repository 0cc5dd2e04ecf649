from typing import Any, List, Mapping, Optional, Protocol

from ..models import ScrapedPrice


class Fetcher(Protocol):
    async def get_json(self, url: str, *, params=None, headers=None, timeout: float = 15.0) -> Any:
        """GET and decode JSON; raises FetchError/ParseError."""
        ...

    async def get_text(self, url: str, *, params=None, headers=None, timeout: float = 15.0) -> str:
        ...

    async def post_form(self, url: str, data: Mapping[str, Any], *, headers=None, timeout: float = 20.0) -> str:
        ...


class PriceScraper(Protocol):
    async def scrape_prices(
        self,
        commodity: str,
        state: str,
        market: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[ScrapedPrice]:
        """Real market rows, or a KisanError when none could be obtained."""
        ...


class GpsReader(Protocol):
    async def read(self) -> Optional[Any]:
        """Next GPS fix, or None when the device has nothing to offer."""
        ...
