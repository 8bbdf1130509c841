from __future__ import annotations

import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol, Sequence

import httpx

from price_api.app.config import API_KEY_ENV, DEFAULT_BASE_URL
from price_api.app.errors import ConfigurationError, DataUnavailable, UpstreamError
from price_api.app.models import PricePoint, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    async def fetch_historical(
        self, symbol: str, start: datetime, end: datetime, granularity: str
    ) -> Sequence[PricePoint]:
        ...


class AlchemyPriceSource(PriceSource):
    """Historical token prices from the Alchemy Prices API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def headers(self) -> dict[str, str]:
        return {"accept": "application/json", "content-type": "application/json"}

    async def fetch_historical(
        self, symbol: str, start: datetime, end: datetime, granularity: str
    ) -> list[PricePoint]:
        if not self.api_key:
            raise ConfigurationError(f"Provider API key not configured. Set {API_KEY_ENV}.")

        url = f"{self.base_url}/{self.api_key}/tokens/historical"
        body = {
            "symbol": symbol,
            "startTime": format_timestamp(start),
            "endTime": format_timestamp(end),
            "interval": granularity,
        }
        logger.info("Fetching %s history %s..%s (%s)", symbol, body["startTime"], body["endTime"], granularity)

        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, headers=self.headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body, headers=self.headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to fetch price for {symbol}: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch price for {symbol}: {response.status_code} {response.reason_phrase}. "
                f"Details: {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Price response for {symbol} was not valid JSON") from exc

        points = parse_points(payload, symbol)
        if not points:
            raise DataUnavailable(f"No price data available for symbol {symbol} in the specified time range")
        return points


def parse_points(payload: Any, symbol: str) -> list[PricePoint]:
    """Convert a provider payload into price points, rejecting malformed rows."""

    if not isinstance(payload, dict):
        raise UpstreamError(f"Price response for {symbol} is not a JSON object")
    rows = payload.get("data")
    if rows is None:
        rows = payload.get("points")
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise UpstreamError(f"Price response for {symbol} has a non-list data field")

    points: list[PricePoint] = []
    for row in rows:
        try:
            value = float(Decimal(str(row["value"])))
            timestamp = parse_timestamp(str(row["timestamp"]))
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise UpstreamError(f"Malformed price point for {symbol}: {row!r}") from exc
        if not math.isfinite(value):
            raise UpstreamError(f"Malformed price point for {symbol}: {row!r}")
        points.append(PricePoint(timestamp=timestamp, value=value))
    return points
