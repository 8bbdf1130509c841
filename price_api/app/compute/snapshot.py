from __future__ import annotations

from typing import Mapping

from price_api.app.errors import DataUnavailable, InvalidInput
from price_api.app.models import BatchSnapshot, Series


def build_snapshot(series_by_symbol: Mapping[str, Series]) -> BatchSnapshot:
    """Latest value per symbol under a single timestamp.

    Each symbol contributes the last point of its series as stored. The
    reported timestamp is the freshest of those latest points, so when the
    series are not equally fresh the values can come from slightly different
    instants. No interpolation is applied to line them up. Symbol keys are
    lowercased.
    """

    if not series_by_symbol:
        raise InvalidInput("At least one symbol is required")

    values: dict[str, float] = {}
    latest_timestamps = []
    for symbol, series in series_by_symbol.items():
        if not series.points:
            raise DataUnavailable(f"No price data available for symbol {symbol}")
        latest = series.points[-1]
        values[symbol.lower()] = latest.value
        latest_timestamps.append(latest.timestamp)

    return BatchSnapshot(values=values, timestamp=max(latest_timestamps))
