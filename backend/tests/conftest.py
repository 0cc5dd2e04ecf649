from typing import Callable, List

import httpx
import pytest

from kisan_saathi.http import HttpFetcher


@pytest.fixture
def anyio_backend():
    # SingleFlight is built on asyncio futures
    return "asyncio"


class FakeClock:
    def __init__(self, start: float = 1_760_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class Recorder:
    """MockTransport handler wrapper that remembers every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self._handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def hosts(self) -> List[str]:
        return [r.url.host for r in self.requests]


def make_fetcher(handler: Callable[[httpx.Request], httpx.Response]):
    recorder = Recorder(handler)
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return HttpFetcher(client), recorder
