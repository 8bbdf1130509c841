"""Alignment of unevenly sampled series onto a regular timeline and their weighted combination.

Each input series is restricted to the window shared by all inputs, resampled
on the interval's fixed step by linear interpolation between its bracketing
known points, then combined with the request weights. Instants are handled as
integer epoch microseconds so a timeline instant that coincides with a known
sample hits that sample exactly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import numpy as np

from price_api.app.compute.timeline import regular_timeline, to_epoch_us
from price_api.app.compute.weights import normalize_weights
from price_api.app.constants import get_interval_spec
from price_api.app.errors import DataUnavailable, InsufficientOverlap, InvalidInput
from price_api.app.models import AlignedPoint, Series, WeightVector

logger = logging.getLogger(__name__)


def common_window(series: Sequence[Series]) -> tuple[datetime, datetime]:
    """Return the ``(start, end)`` window covered by every series.

    Raises:
        InsufficientOverlap: when the series' time ranges do not intersect.
    """

    start = max(item.first.timestamp for item in series)
    end = min(item.latest.timestamp for item in series)
    if start > end:
        symbols = ", ".join(item.symbol for item in series)
        raise InsufficientOverlap(
            f"Series for {symbols} share no common time window "
            f"(latest start {start.isoformat()} is after earliest end {end.isoformat()})"
        )
    return start, end


def known_points(series: Series, start_us: int, end_us: int) -> tuple[np.ndarray, np.ndarray]:
    """Timestamps (epoch us) and values of a series usable inside ``[start_us, end_us]``.

    Duplicate timestamps keep the last value. When the series has no sample
    inside the window, the samples straddling it on either side are returned.
    """

    xs = to_epoch_us([point.timestamp for point in series.points])
    ys = np.array([point.value for point in series.points], dtype=np.float64)

    keep = np.ones(len(xs), dtype=bool)
    keep[:-1] = xs[1:] != xs[:-1]
    xs, ys = xs[keep], ys[keep]

    inside = (xs >= start_us) & (xs <= end_us)
    if inside.any():
        return xs[inside], ys[inside]

    before = int(np.flatnonzero(xs < start_us)[-1])
    after = int(np.flatnonzero(xs > end_us)[0])
    return xs[[before, after]], ys[[before, after]]


def interpolate(timeline_us: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Linearly interpolate ``ys`` (sampled at ``xs``) at every instant of ``timeline_us``.

    Instants before the first or after the last known point are clamped to that
    boundary value. ``t_lo`` is always the last known point at or before ``t``,
    so an exact hit yields the stored value without arithmetic error.
    """

    last = len(xs) - 1
    lo = np.searchsorted(xs, timeline_us, side="right") - 1
    below = lo < 0
    lo = np.clip(lo, 0, last)
    hi = np.where(below, lo, np.minimum(lo + 1, last))

    t_lo = xs[lo]
    span = xs[hi] - t_lo
    v_lo = ys[lo]
    v_hi = ys[hi]

    degenerate = span == 0
    fraction = (timeline_us - t_lo) / np.where(degenerate, 1, span)
    return np.where(degenerate, v_lo, v_lo + (v_hi - v_lo) * fraction)


def interpolate_series(series: Series, timestamps: Sequence[datetime], start: datetime, end: datetime) -> list[float]:
    """Interpolate one series at arbitrary instants using its known points inside ``[start, end]``."""

    bounds = to_epoch_us([start, end])
    xs, ys = known_points(series, int(bounds[0]), int(bounds[1]))
    return [float(value) for value in interpolate(to_epoch_us(list(timestamps)), xs, ys)]


def aggregate(
    series: Sequence[Series],
    weights: WeightVector | Sequence[float],
    interval: str,
) -> list[AlignedPoint]:
    """Combine several series into one weighted series on the interval's regular timeline."""

    if not series:
        raise InvalidInput("At least one series is required")
    if not isinstance(weights, WeightVector):
        weights = normalize_weights(weights, expected=len(series))
    if len(weights) != len(series):
        raise InvalidInput(
            f"Number of series must match number of weights ({len(series)} series, {len(weights)} weights)"
        )
    for item in series:
        if not item.points:
            raise DataUnavailable(f"No price data available for symbol {item.symbol}")

    spec = get_interval_spec(interval)
    start, end = common_window(series)
    timeline = regular_timeline(start, end, spec.step)
    timeline_us = to_epoch_us(timeline)
    bounds = to_epoch_us([start, end])

    matrix = np.vstack(
        [interpolate(timeline_us, *known_points(item, int(bounds[0]), int(bounds[1]))) for item in series]
    )
    w = np.asarray(weights.weights, dtype=np.float64)
    # Renormalised by the weight sum at every instant.
    combined = (w[:, np.newaxis] * matrix).sum(axis=0) / np.full(len(timeline), w.sum())

    logger.debug(
        "Aggregated %d series over %s..%s into %d points (%s)",
        len(series),
        start.isoformat(),
        end.isoformat(),
        len(timeline),
        interval,
    )
    return [AlignedPoint(timestamp=ts, value=float(value)) for ts, value in zip(timeline, combined)]
