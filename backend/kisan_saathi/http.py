import json
import logging
import time
from typing import Any, Mapping, Optional

import httpx

from kisan_saathi.errors import FetchError, FetchTimeout, HttpStatusError, ParseError

log = logging.getLogger("kisan_saathi.http")

USER_AGENT = "KisanSaathiAI/1.0 (Agricultural Weather App)"

# Global HTTP client instance
client: Optional[httpx.AsyncClient] = None


def t(): return time.perf_counter()


async def init_http():
    """Initialize the global HTTP client with pooled keep-alive connections."""
    global client

    # - connect: 10s (establishing connection)
    # - read: 25s (reading response), callers override per request
    # - write: 10s (sending request)
    # - pool: 30s (getting connection from pool)
    timeout_config = httpx.Timeout(
        connect=10.0,
        read=25.0,
        write=10.0,
        pool=30.0
    )

    client = httpx.AsyncClient(
        timeout=timeout_config,
        http2=True,
        follow_redirects=True,
        limits=httpx.Limits(
            max_keepalive_connections=100,
            max_connections=100,
            keepalive_expiry=30
        ),
        headers={
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": USER_AGENT,
        },
    )


async def close_http():
    """Close the global HTTP client."""
    global client
    if client:
        await client.aclose()
        client = None


def get_http_client() -> httpx.AsyncClient:
    """Get the global HTTP client instance."""
    if client is None:
        raise RuntimeError("HTTP client not initialized. Call init_http() first.")
    return client


class HttpFetcher:
    """
    Single-shot GET/POST against an external endpoint.

    Every failure comes back as a FetchError subclass (timeout, HTTP status,
    network) so callers can fall back without caring about httpx internals.
    There are no retries here: the caller decides what to try next.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._client = http_client

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, Any]] = None,
        timeout: float = 15.0,
    ) -> httpx.Response:
        start = t()
        try:
            r = await self._client.request(
                method, url, params=params, headers=headers, data=data, timeout=timeout
            )
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchTimeout(f"{method} {url} timed out after {timeout}s", url=url) from e
        except httpx.HTTPStatusError as e:
            raise HttpStatusError(e.response.status_code, url=url) from e
        except httpx.HTTPError as e:
            raise FetchError(f"{method} {url} failed: {e}", url=url) from e
        log.debug("⏱️  %s %s -> %s in %dms", method, url, r.status_code, round((t() - start) * 1000))
        return r

    async def get_json(self, url: str, *, params=None, headers=None, timeout: float = 15.0) -> Any:
        r = await self._send("GET", url, params=params, headers=headers, timeout=timeout)
        try:
            return r.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid JSON from {url}") from e

    async def get_text(self, url: str, *, params=None, headers=None, timeout: float = 15.0) -> str:
        r = await self._send("GET", url, params=params, headers=headers, timeout=timeout)
        return r.text

    async def post_form(self, url: str, data: Mapping[str, Any], *, headers=None, timeout: float = 20.0) -> str:
        r = await self._send("POST", url, data=data, headers=headers, timeout=timeout)
        return r.text
