# backend/kisan_saathi/utils/cache.py
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

log = logging.getLogger("kisan_saathi.cache")

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float  # epoch seconds when stored
    ttl: float

    def age(self, now: float) -> float:
        return now - self.timestamp

    def fresh(self, now: float) -> bool:
        return self.age(now) < self.ttl


# -----------------------------
# In-memory TTL cache, expiry checked lazily on read
# -----------------------------
class SimpleTTLCache:
    def __init__(self, default_ttl: float = 600, clock: Callable[[], float] = time.time, name: str = "cache"):
        self._data: dict[str, CacheEntry[Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self.name = name

    def now(self) -> float:
        return self._clock()

    def get_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if not entry.fresh(self.now()):
            # expired → drop
            self._data.pop(key, None)
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.get_entry(key)
        return default if entry is None else entry.data

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> CacheEntry[Any]:
        """Set a value with optional per-key TTL."""
        eff_ttl = ttl if ttl is not None else self._default_ttl
        entry = CacheEntry(data=value, timestamp=self.now(), ttl=eff_ttl)
        self._data[key] = entry
        return entry

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> int:
        """Drop everything; returns count of keys flushed."""
        n = len(self._data)
        self._data.clear()
        log.info("🗑️ %s cleared (%d keys)", self.name, n)
        return n

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)


# -----------------------------
# One in-flight fetch per key
# -----------------------------
class SingleFlight:
    """
    Coalesces concurrent calls for the same key onto one awaitable.

    The first caller for a key runs the factory; callers arriving while it is
    still running await the same task and get the same result (or exception).
    """

    def __init__(self):
        self._inflight: dict[str, asyncio.Future] = {}

    def pending(self, key: str) -> bool:
        return key in self._inflight

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        fut = self._inflight.get(key)
        if fut is not None:
            log.debug("⏳ Joining in-flight fetch: %s", key)
            return await asyncio.shield(fut)

        fut = asyncio.ensure_future(factory())
        self._inflight[key] = fut
        fut.add_done_callback(lambda f, k=key: self._forget(k, f))
        return await asyncio.shield(fut)

    def _forget(self, key: str, fut: asyncio.Future) -> None:
        if self._inflight.get(key) is fut:
            self._inflight.pop(key, None)
