from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable

from price_api.app.errors import DataUnavailable


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 instant as returned by the provider (``Z`` suffix allowed)."""

    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class PricePoint:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class Series:
    """Ascending price points for one symbol and interval."""

    symbol: str
    interval: str
    points: tuple[PricePoint, ...]

    @classmethod
    def from_points(cls, symbol: str, interval: str, points: Iterable[PricePoint]) -> "Series":
        ordered = tuple(sorted(points, key=lambda point: point.timestamp))
        if not ordered:
            raise DataUnavailable(f"No price data available for symbol {symbol} ({interval})")
        return cls(symbol=symbol, interval=interval, points=ordered)

    @property
    def first(self) -> PricePoint:
        return self.points[0]

    @property
    def latest(self) -> PricePoint:
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class AlignedPoint:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class WeightVector:
    """Normalised weights (summing to 1) alongside the raw input they came from."""

    weights: tuple[float, ...]
    raw: tuple[float, ...]
    integer_form: bool = False

    def __len__(self) -> int:
        return len(self.weights)


@dataclass(frozen=True)
class PnLResult:
    pnl: float
    first_value: float
    last_value: float
    first_timestamp: datetime
    last_timestamp: datetime


@dataclass(frozen=True)
class BatchSnapshot:
    values: Dict[str, float]
    timestamp: datetime
