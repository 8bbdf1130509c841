from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from price_api.app.compute.timeline import request_window
from price_api.app.constants import CACHE_TTL_SECONDS
from price_api.app.errors import ConfigurationError
from price_api.app.models import Series
from price_api.app.services.cache import SeriesCache
from price_api.app.services.price_source import PriceSource

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SeriesLoader:
    """Resolve a symbol's series from the cache, falling back to the price source."""

    def __init__(
        self,
        cache: Optional[SeriesCache],
        source: PriceSource,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.cache = cache
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _require_cache(self) -> SeriesCache:
        if self.cache is None:
            raise ConfigurationError("Cache binding not configured")
        return self.cache

    async def load(self, symbol: str, interval: str) -> Series:
        cache = self._require_cache()
        cached = await cache.get(symbol, interval)
        if cached is not None:
            logger.debug("Cache hit for %s (%s)", symbol, interval)
            return cached

        logger.debug("Cache miss for %s (%s)", symbol, interval)
        return await self._fetch_and_store(cache, symbol, interval)

    async def load_many(self, symbols: Iterable[str], interval: str) -> list[Series]:
        """Load every symbol concurrently; any single failure fails the whole call."""

        return list(await asyncio.gather(*(self.load(symbol, interval) for symbol in symbols)))

    async def refresh(self, symbol: str, interval: str) -> Series:
        """Fetch from the source and overwrite the cache entry without reading it first."""

        return await self._fetch_and_store(self._require_cache(), symbol, interval)

    async def _fetch_and_store(self, cache: SeriesCache, symbol: str, interval: str) -> Series:
        start, end, granularity = request_window(interval, self.clock())
        points = await self.source.fetch_historical(symbol, start, end, granularity)
        series = Series.from_points(symbol, interval, points)
        await cache.put(series, self.ttl_seconds)
        return series
