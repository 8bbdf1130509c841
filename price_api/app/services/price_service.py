from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from price_api.app.compute.aligner import aggregate
from price_api.app.compute.pnl import percent_change
from price_api.app.compute.snapshot import build_snapshot
from price_api.app.compute.weights import normalize_weights
from price_api.app.constants import PNL_INTERVAL, WARM_INTERVAL, get_interval_spec
from price_api.app.errors import InvalidInput
from price_api.app.models import AlignedPoint, BatchSnapshot, PnLResult, Series
from price_api.app.services.loader import SeriesLoader

logger = logging.getLogger(__name__)


def clean_symbols(symbols: Iterable[str]) -> list[str]:
    """Strip symbols and reject empty lists or blank entries."""

    cleaned = [str(symbol).strip() for symbol in symbols]
    if not cleaned:
        raise InvalidInput("At least one symbol is required")
    if any(not symbol for symbol in cleaned):
        raise InvalidInput("Symbols must not be blank")
    return cleaned


class PriceService:
    """Entry points consumed by the HTTP layer and the warm-cache task."""

    def __init__(self, loader: SeriesLoader) -> None:
        self.loader = loader

    async def get_series(self, symbol: str, interval: str) -> Series:
        get_interval_spec(interval)
        (symbol,) = clean_symbols([symbol])
        return await self.loader.load(symbol, interval)

    async def get_aggregate(
        self, symbols: Sequence[str], raw_weights: Sequence[float], interval: str
    ) -> list[AlignedPoint]:
        get_interval_spec(interval)
        symbols = clean_symbols(symbols)
        weights = normalize_weights(raw_weights, expected=len(symbols))
        series = await self.loader.load_many(symbols, interval)
        return aggregate(series, weights, interval)

    async def get_percent_change(self, symbols: Sequence[str], raw_weights: Sequence[float]) -> PnLResult:
        """Gain/loss of the weighted aggregate, always over the long interval."""

        points = await self.get_aggregate(symbols, raw_weights, PNL_INTERVAL)
        return percent_change(points)

    async def get_batch_snapshot(self, symbols: Sequence[str], interval: str) -> BatchSnapshot:
        get_interval_spec(interval)
        symbols = clean_symbols(symbols)
        series = await self.loader.load_many(symbols, interval)
        return build_snapshot(dict(zip(symbols, series)))

    async def refresh_all(self, symbols: Sequence[str], interval: str = WARM_INTERVAL) -> None:
        """Re-fetch and re-cache every symbol; failures are logged per symbol and never raised."""

        async def _refresh(symbol: str) -> None:
            try:
                await self.loader.refresh(symbol, interval)
                logger.info("Cached %s %s price", symbol, interval)
            except Exception:
                logger.warning("Failed to cache %s %s price", symbol, interval, exc_info=True)

        await asyncio.gather(*(_refresh(symbol) for symbol in symbols))
