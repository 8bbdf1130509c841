"""Time helpers shared by the loader and the aligner."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np

from price_api.app.constants import get_interval_spec
from price_api.app.models import ensure_utc

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def request_window(interval: str, now: datetime) -> tuple[datetime, datetime, str]:
    """Return ``(start, end, granularity)`` to request from the provider for an interval."""

    spec = get_interval_spec(interval)
    end = ensure_utc(now)
    return end - spec.window, end, spec.granularity


def regular_timeline(start: datetime, end: datetime, step: timedelta) -> list[datetime]:
    """Instants ``start, start + step, ...`` up to and including ``end``.

    The last instant may fall short of ``end``; nothing past ``end`` is emitted.
    """

    if step <= timedelta(0):
        raise ValueError("step must be positive")
    points: list[datetime] = []
    current = start
    while current <= end:
        points.append(current)
        current = current + step
    return points


def to_epoch_us(values: list[datetime]) -> np.ndarray:
    """Integer microseconds since the epoch, exact for comparisons."""

    return np.array([(ensure_utc(value) - EPOCH) // _MICROSECOND for value in values], dtype=np.int64)
