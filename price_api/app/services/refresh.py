from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from price_api.app.constants import WARM_INTERVAL
from price_api.app.services.price_service import PriceService

logger = logging.getLogger(__name__)


class CacheWarmer:
    """Periodically re-fetch a fixed symbol set so request paths mostly hit the cache."""

    def __init__(
        self,
        service: PriceService,
        symbols: Sequence[str],
        period_seconds: float,
        interval: str = WARM_INTERVAL,
    ) -> None:
        self.service = service
        self.symbols = tuple(symbols)
        self.period_seconds = period_seconds
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="cache-warmer")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

    async def tick(self) -> None:
        await self.service.refresh_all(self.symbols, self.interval)

    async def _loop(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception:  # pragma: no cover - refresh_all already logs per symbol
                logger.exception("Cache warm tick failed")
            await asyncio.sleep(self.period_seconds)
