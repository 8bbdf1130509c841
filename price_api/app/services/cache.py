"""Cache abstraction with an in-memory TTL map and an optional Redis backend."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from price_api.app.errors import CacheUnavailable, DataUnavailable
from price_api.app.models import PricePoint, Series, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes, ttl_seconds: Optional[int] = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


@dataclass
class InMemoryCache(CacheBackend):
    """In-process cache with passive expiry on read."""

    store: dict[str, tuple[bytes, Optional[float]]] = field(default_factory=dict)
    clock: Callable[[], float] = time.monotonic
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self.store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self.clock() >= expires_at:
                self.store.pop(key, None)
                return None
            return value

    def set(self, key: str, value: bytes, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self.clock() + ttl_seconds if ttl_seconds else None
        with self._lock:
            self.store[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self.store.pop(key, None)


class RedisCache(CacheBackend):
    """Redis-backed cache; errors surface as ``CacheUnavailable``."""

    def __init__(self, url: str):
        import redis

        self._errors = (redis.RedisError,)
        self.client = redis.Redis.from_url(url, decode_responses=False)

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self.client.get(key)
        except self._errors as exc:
            raise CacheUnavailable(f"Redis get failed for key {key}: {exc}") from exc

    def set(self, key: str, value: bytes, ttl_seconds: Optional[int] = None) -> None:
        try:
            if ttl_seconds:
                self.client.setex(key, ttl_seconds, value)
            else:
                self.client.set(key, value)
        except self._errors as exc:
            raise CacheUnavailable(f"Redis set failed for key {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except self._errors as exc:
            raise CacheUnavailable(f"Redis delete failed for key {key}: {exc}") from exc


def build_series_key(symbol: str, interval: str) -> str:
    """Construct the cache key for one symbol's series at one interval."""

    return f"price:{symbol}:{interval}"


def encode_series(series: Series) -> bytes:
    payload = {
        "symbol": series.symbol,
        "interval": series.interval,
        "data": [
            {"value": point.value, "timestamp": format_timestamp(point.timestamp)}
            for point in series.points
        ],
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode_series(raw: bytes) -> Series:
    payload = json.loads(raw)
    points = [
        PricePoint(timestamp=parse_timestamp(str(item["timestamp"])), value=float(item["value"]))
        for item in payload["data"]
    ]
    return Series.from_points(payload["symbol"], payload["interval"], points)


class SeriesCache:
    """Series-level view over a byte backend.

    Sync backends run in a worker thread so a slow store never blocks the
    event loop. Entries that cannot be decoded are treated as misses.
    """

    def __init__(self, backend: CacheBackend) -> None:
        self.backend = backend

    async def get(self, symbol: str, interval: str) -> Optional[Series]:
        key = build_series_key(symbol, interval)
        raw = await asyncio.to_thread(self.backend.get, key)
        if raw is None:
            return None
        try:
            return decode_series(raw)
        except (ValueError, KeyError, TypeError, DataUnavailable) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

    async def put(self, series: Series, ttl_seconds: int) -> None:
        key = build_series_key(series.symbol, series.interval)
        await asyncio.to_thread(self.backend.set, key, encode_series(series), ttl_seconds)


def get_cache_backend(redis_url: Optional[str] = None) -> CacheBackend:
    """Return the configured cache backend (Redis when a URL is set, else in-memory)."""

    if redis_url:
        try:
            return RedisCache(redis_url)
        except Exception:
            logger.warning("Falling back to in-memory cache; Redis initialization failed", exc_info=True)
    return InMemoryCache()


__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "SeriesCache",
    "build_series_key",
    "decode_series",
    "encode_series",
    "get_cache_backend",
]
