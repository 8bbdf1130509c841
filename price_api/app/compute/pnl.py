from __future__ import annotations

from typing import Sequence

from price_api.app.errors import DivisionByZero, InvalidInput
from price_api.app.models import AlignedPoint, PnLResult


def percent_change(points: Sequence[AlignedPoint]) -> PnLResult:
    """Percentage change between the first and last points, taken positionally."""

    if not points:
        raise InvalidInput("Percent change needs at least one point")

    first = points[0]
    last = points[-1]
    if first.value == 0:
        raise DivisionByZero(
            f"Percent change is undefined: first value at {first.timestamp.isoformat()} is zero"
        )

    pnl = (last.value - first.value) / first.value * 100
    return PnLResult(
        pnl=pnl,
        first_value=first.value,
        last_value=last.value,
        first_timestamp=first.timestamp,
        last_timestamp=last.timestamp,
    )
