from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Query

from price_api.app.compute.weights import parse_ratios
from price_api.app.config import get_settings
from price_api.app.constants import DEFAULT_INTERVAL
from price_api.app.errors import InvalidInput
from price_api.app.services.cache import SeriesCache, get_cache_backend
from price_api.app.services.loader import SeriesLoader
from price_api.app.services.price_service import PriceService
from price_api.app.services.price_source import AlchemyPriceSource


def parse_symbols(raw: Optional[str]) -> list[str]:
    if raw is None or not raw.strip():
        raise InvalidInput("Missing required parameter: symbols")
    return [item.strip() for item in raw.split(",")]


class SymbolsQuery:
    def __init__(self, symbols: Optional[str] = Query(default=None, description="Comma-separated symbols")):
        self.raw = symbols

    def __call__(self) -> list[str]:
        return parse_symbols(self.raw)


class RatiosQuery:
    def __init__(self, ratios: Optional[str] = Query(default=None, description="Comma-separated weights")):
        self.raw = ratios

    def __call__(self) -> list[float]:
        return parse_ratios(self.raw)


class IntervalQuery:
    def __init__(self, interval: str = Query(default=DEFAULT_INTERVAL, description="24h, 7d or 30d")):
        self.interval = interval

    def __call__(self) -> str:
        return self.interval


@lru_cache(maxsize=1)
def get_price_service() -> PriceService:
    """Build the process-wide service from environment settings."""

    settings = get_settings()
    source = AlchemyPriceSource(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=settings.fetch_timeout_seconds,
    )
    cache = SeriesCache(get_cache_backend(settings.redis_url))
    loader = SeriesLoader(cache=cache, source=source, ttl_seconds=settings.cache_ttl_seconds)
    return PriceService(loader)
