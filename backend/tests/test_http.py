import httpx
import pytest

from kisan_saathi.errors import FetchError, FetchTimeout, HttpStatusError, ParseError
from conftest import make_fetcher


@pytest.mark.anyio
async def test_get_json_ok():
    fetcher, rec = make_fetcher(lambda r: httpx.Response(200, json={"city": "Pune"}))
    data = await fetcher.get_json("https://example.test/geo", params={"q": "x"})
    assert data == {"city": "Pune"}
    assert rec.requests[0].url.params["q"] == "x"


@pytest.mark.anyio
async def test_timeout_maps_to_fetch_timeout():
    def handler(request):
        raise httpx.ConnectTimeout("slow", request=request)

    fetcher, _ = make_fetcher(handler)
    with pytest.raises(FetchTimeout) as exc:
        await fetcher.get_text("https://example.test/")
    assert exc.value.kind == "timeout"


@pytest.mark.anyio
async def test_status_maps_to_http_error():
    fetcher, _ = make_fetcher(lambda r: httpx.Response(503, text="down"))
    with pytest.raises(HttpStatusError) as exc:
        await fetcher.get_json("https://example.test/")
    assert exc.value.status == 503
    assert exc.value.kind == "http_error"


@pytest.mark.anyio
async def test_network_failure_maps_to_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    fetcher, _ = make_fetcher(handler)
    with pytest.raises(FetchError) as exc:
        await fetcher.post_form("https://example.test/", {"a": "1"})
    assert exc.value.kind == "network_error"


@pytest.mark.anyio
async def test_bad_json_is_parse_error():
    fetcher, _ = make_fetcher(lambda r: httpx.Response(200, text="<html>not json</html>"))
    with pytest.raises(ParseError):
        await fetcher.get_json("https://example.test/")
