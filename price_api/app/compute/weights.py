from __future__ import annotations

import math
from typing import Iterable

from price_api.app.errors import InvalidInput
from price_api.app.models import WeightVector


def parse_ratios(raw: str | None) -> list[float]:
    """Parse a comma-separated ratio list (``"60,40"`` or ``"0.6,0.4"``)."""

    if raw is None or not raw.strip():
        raise InvalidInput("Missing required parameter: ratios")
    ratios: list[float] = []
    for token in raw.split(","):
        token = token.strip()
        try:
            ratios.append(float(token))
        except ValueError as exc:
            raise InvalidInput(f"Ratio {token!r} is not a number") from exc
    return ratios


def normalize_weights(raw_weights: Iterable[float], expected: int | None = None) -> WeightVector:
    """Validate raw ratios and scale them so they sum to 1.

    Ratios may be fractional (``0.6, 0.4``) or percentage-like integers
    (``60, 40``). Either way every component is divided by the sum of the raw
    input, never by an intermediate normalised value.
    """

    raw: list[float] = []
    for weight in raw_weights:
        if isinstance(weight, bool):
            raise InvalidInput(f"Ratio {weight!r} is not a number")
        try:
            value = float(weight)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Ratio {weight!r} is not a number") from exc
        if not math.isfinite(value):
            raise InvalidInput(f"Ratio {weight!r} must be finite")
        if value < 0:
            raise InvalidInput(f"Ratio {weight!r} must not be negative")
        raw.append(value)

    if not raw:
        raise InvalidInput("At least one ratio is required")
    if expected is not None and len(raw) != expected:
        raise InvalidInput(
            f"Number of symbols must match number of ratios ({expected} symbols, {len(raw)} ratios)"
        )

    total = math.fsum(raw)
    if total <= 0:
        raise InvalidInput("Ratios must not all be zero")

    integer_form = all(value.is_integer() for value in raw)
    weights = tuple(value / total for value in raw)
    return WeightVector(weights=weights, raw=tuple(raw), integer_form=integer_form)
