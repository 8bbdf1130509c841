"""Typed failures raised by the price core.

The HTTP layer maps each kind to a status code; the core itself never retries.
"""

from __future__ import annotations


class PriceServiceError(Exception):
    """Base class for every failure the core reports to its caller."""

    kind = "error"


class ConfigurationError(PriceServiceError):
    """Provider credentials or the cache binding are missing."""

    kind = "configuration_error"


class UpstreamError(PriceServiceError):
    """The provider request failed or returned something unusable."""

    kind = "upstream_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CacheUnavailable(UpstreamError):
    kind = "cache_unavailable"


class DataUnavailable(PriceServiceError):
    """A symbol/window produced no price points."""

    kind = "data_unavailable"


class InsufficientOverlap(PriceServiceError):
    """The requested series share no common time window."""

    kind = "insufficient_overlap"


class InvalidInput(PriceServiceError):
    kind = "invalid_input"


class DivisionByZero(PriceServiceError):
    """Percent change requested against a zero baseline."""

    kind = "division_by_zero"


__all__ = [
    "PriceServiceError",
    "ConfigurationError",
    "UpstreamError",
    "CacheUnavailable",
    "DataUnavailable",
    "InsufficientOverlap",
    "InvalidInput",
    "DivisionByZero",
]
