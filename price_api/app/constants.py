"""Interval table and service-wide defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict

from price_api.app.errors import InvalidInput


@dataclass(frozen=True)
class IntervalSpec:
    label: str
    window: timedelta
    step: timedelta
    granularity: str


# Lookback window, alignment step and provider granularity per interval.
INTERVAL_SPEC: Dict[str, IntervalSpec] = {
    "24h": IntervalSpec("24h", timedelta(hours=24), timedelta(minutes=5), "5m"),
    "7d": IntervalSpec("7d", timedelta(days=7), timedelta(hours=1), "1h"),
    "30d": IntervalSpec("30d", timedelta(days=30), timedelta(days=1), "1d"),
}

ALLOWED_INTERVALS = tuple(INTERVAL_SPEC)
DEFAULT_INTERVAL = "24h"
PNL_INTERVAL = "30d"

CACHE_TTL_SECONDS = 60 * 4
WARM_SYMBOLS: tuple[str, ...] = ("BTC", "ETH", "BNB", "SOL")
WARM_INTERVAL = "30d"


def get_interval_spec(interval: str) -> IntervalSpec:
    """Return the window settings for an interval label, rejecting unknown labels."""

    spec = INTERVAL_SPEC.get(interval)
    if spec is None:
        allowed = ", ".join(ALLOWED_INTERVALS)
        raise InvalidInput(f"Invalid interval {interval!r}. Allowed values are: {allowed}")
    return spec
