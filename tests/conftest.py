from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

import pytest

from price_api.app.errors import DataUnavailable
from price_api.app.models import PricePoint, Series
from price_api.app.services.cache import InMemoryCache, SeriesCache
from price_api.app.services.loader import SeriesLoader
from price_api.app.services.price_service import PriceService

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2024, 1, 31, tzinfo=timezone.utc)


def minutes(offset: float) -> datetime:
    return BASE + timedelta(minutes=offset)


class FakePriceSource:
    """Price source double that records every fetch."""

    def __init__(self, data: dict[str, list[PricePoint]] | None = None) -> None:
        self.data = dict(data or {})
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, datetime, datetime, str]] = []

    async def fetch_historical(self, symbol: str, start: datetime, end: datetime, granularity: str) -> list[PricePoint]:
        self.calls.append((symbol, start, end, granularity))
        if symbol in self.errors:
            raise self.errors[symbol]
        points = self.data.get(symbol, [])
        if not points:
            raise DataUnavailable(f"No price data available for symbol {symbol} in the specified time range")
        return list(points)

    def fetched_symbols(self) -> list[str]:
        return [call[0] for call in self.calls]


class CountingBackend(InMemoryCache):
    def __init__(self) -> None:
        super().__init__()
        self.sets: list[tuple[str, int | None]] = []

    def set(self, key: str, value: bytes, ttl_seconds: int | None = None) -> None:
        self.sets.append((key, ttl_seconds))
        super().set(key, value, ttl_seconds)


@pytest.fixture
def make_points() -> Callable[..., list[PricePoint]]:
    def _make(pairs: Iterable[tuple[float, float]]) -> list[PricePoint]:
        return [PricePoint(timestamp=minutes(offset), value=float(value)) for offset, value in pairs]

    return _make


@pytest.fixture
def make_series(make_points) -> Callable[..., Series]:
    def _make(symbol: str, pairs: Iterable[tuple[float, float]], interval: str = "24h") -> Series:
        return Series.from_points(symbol, interval, make_points(pairs))

    return _make


@pytest.fixture
def source() -> FakePriceSource:
    return FakePriceSource()


@pytest.fixture
def backend() -> CountingBackend:
    return CountingBackend()


@pytest.fixture
def loader(source: FakePriceSource, backend: CountingBackend) -> SeriesLoader:
    return SeriesLoader(cache=SeriesCache(backend), source=source, ttl_seconds=240, clock=lambda: NOW)


@pytest.fixture
def service(loader: SeriesLoader) -> PriceService:
    return PriceService(loader)
