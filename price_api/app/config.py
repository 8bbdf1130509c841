from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from price_api.app.constants import CACHE_TTL_SECONDS, WARM_SYMBOLS

logger = logging.getLogger(__name__)

API_KEY_ENV = "ALCHEMY_API_KEY"
BASE_URL_ENV = "ALCHEMY_BASE_URL"
REDIS_URL_ENV = "REDIS_URL"
CACHE_TTL_ENV = "PRICE_CACHE_TTL_SECONDS"
FETCH_TIMEOUT_ENV = "PRICE_FETCH_TIMEOUT_SECONDS"
WARM_SYMBOLS_ENV = "PRICE_WARM_SYMBOLS"
WARM_PERIOD_ENV = "PRICE_WARM_INTERVAL_SECONDS"
WARM_ENABLED_ENV = "PRICE_WARM_ENABLED"
CORS_ENV = "API_CORS_ORIGINS"

DEFAULT_BASE_URL = "https://api.g.alchemy.com/prices/v1"


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    base_url: str = DEFAULT_BASE_URL
    redis_url: Optional[str] = None
    cache_ttl_seconds: int = CACHE_TTL_SECONDS
    fetch_timeout_seconds: float = 10.0
    warm_symbols: tuple[str, ...] = WARM_SYMBOLS
    warm_interval_seconds: int = 300
    warm_enabled: bool = True
    cors_origins: str = "*"


def get_settings() -> Settings:
    """Load service settings from environment variables.

    Numeric values that fail to parse fall back to their defaults so a typo in
    the deployment environment does not stop the service from starting. The
    provider key is not required here; its absence is reported when a fetch
    is attempted.
    """

    warm_raw = os.getenv(WARM_SYMBOLS_ENV)
    warm_symbols = WARM_SYMBOLS
    if warm_raw:
        parsed = tuple(item.strip() for item in warm_raw.split(",") if item.strip())
        warm_symbols = parsed or WARM_SYMBOLS

    return Settings(
        api_key=os.getenv(API_KEY_ENV) or None,
        base_url=(os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/"),
        redis_url=os.getenv(REDIS_URL_ENV) or None,
        cache_ttl_seconds=_env_int(CACHE_TTL_ENV, CACHE_TTL_SECONDS),
        fetch_timeout_seconds=_env_float(FETCH_TIMEOUT_ENV, 10.0),
        warm_symbols=warm_symbols,
        warm_interval_seconds=_env_int(WARM_PERIOD_ENV, 300),
        warm_enabled=os.getenv(WARM_ENABLED_ENV, "1").lower() not in {"0", "false", "no"},
        cors_origins=os.getenv(CORS_ENV, "*"),
    )


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", key, raw, default)
        return default


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", key, raw, default)
        return default
