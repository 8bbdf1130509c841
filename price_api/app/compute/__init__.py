"""Alignment, aggregation and snapshot computations over price series."""

from price_api.app.compute.aligner import aggregate, common_window, interpolate_series
from price_api.app.compute.pnl import percent_change
from price_api.app.compute.snapshot import build_snapshot
from price_api.app.compute.timeline import regular_timeline, request_window
from price_api.app.compute.weights import normalize_weights, parse_ratios

__all__ = [
    "aggregate",
    "common_window",
    "interpolate_series",
    "percent_change",
    "build_snapshot",
    "regular_timeline",
    "request_window",
    "normalize_weights",
    "parse_ratios",
]
