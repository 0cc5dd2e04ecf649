import asyncio

import pytest

from kisan_saathi.utils.cache import SimpleTTLCache, SingleFlight


def test_read_within_ttl_returns_same_data(clock):
    cache = SimpleTTLCache(default_ttl=1800, clock=clock)
    payload = [{"commodity": "Rice", "modalPrice": 3000}]
    cache.set("Rice-Uttar Pradesh-all", payload)

    clock.advance(1799)
    first = cache.get("Rice-Uttar Pradesh-all")
    second = cache.get("Rice-Uttar Pradesh-all")
    assert first is payload
    assert second is payload


def test_expired_entry_is_dropped_on_read(clock):
    cache = SimpleTTLCache(default_ttl=300, clock=clock)
    cache.set("k", "v")
    assert len(cache) == 1

    clock.advance(300)
    assert cache.get("k") is None
    assert cache.get("k", "default") == "default"
    assert len(cache) == 0


def test_per_key_ttl_overrides_default(clock):
    cache = SimpleTTLCache(default_ttl=1800, clock=clock)
    cache.set("short", 1, ttl=60)
    cache.set("long", 2)

    clock.advance(61)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_entry_keeps_store_time(clock):
    cache = SimpleTTLCache(default_ttl=10, clock=clock)
    entry = cache.set("k", "v")
    clock.advance(4)
    assert cache.get_entry("k") == entry
    assert entry.age(clock()) == 4
    assert entry.fresh(clock())


def test_clear_and_delete(clock):
    cache = SimpleTTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("missing")
    assert list(cache.keys()) == ["b"]
    assert cache.clear() == 1
    assert len(cache) == 0


@pytest.mark.anyio
async def test_single_flight_runs_factory_once_for_concurrent_callers():
    flight = SingleFlight()
    gate = asyncio.Event()
    calls = 0

    async def factory():
        nonlocal calls
        calls += 1
        await gate.wait()
        return "prices"

    t1 = asyncio.ensure_future(flight.run("k", factory))
    t2 = asyncio.ensure_future(flight.run("k", factory))
    await asyncio.sleep(0)
    assert flight.pending("k")

    gate.set()
    assert await asyncio.gather(t1, t2) == ["prices", "prices"]
    assert calls == 1
    assert not flight.pending("k")


@pytest.mark.anyio
async def test_single_flight_shares_failure_and_forgets_key():
    flight = SingleFlight()

    async def boom():
        raise ValueError("scrape failed")

    with pytest.raises(ValueError):
        await flight.run("k", boom)
    assert not flight.pending("k")

    async def ok():
        return 1

    assert await flight.run("k", ok) == 1
