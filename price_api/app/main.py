import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .dependencies import get_price_service
from .errors import (
    ConfigurationError,
    DataUnavailable,
    DivisionByZero,
    InsufficientOverlap,
    InvalidInput,
    PriceServiceError,
    UpstreamError,
)
from .routes import prices
from .schemas import ErrorResponse
from .services.refresh import CacheWarmer

app = FastAPI(title="Price API", version="0.1.0", docs_url="/docs")

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origins] if settings.cors_origins != "*" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
ERROR_STATUS: tuple[tuple[type[PriceServiceError], int], ...] = (
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (DataUnavailable, status.HTTP_404_NOT_FOUND),
    (InsufficientOverlap, 422),
    (DivisionByZero, 422),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

_warmer: Optional[CacheWarmer] = None


def status_for(exc: PriceServiceError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(PriceServiceError)
async def _price_error_handler(request: Request, exc: PriceServiceError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    body = ErrorResponse(
        error=exc.kind,
        detail=str(exc),
        timestamp=datetime.now(timezone.utc),
        symbol=request.path_params.get("symbol") or None,
        interval=request.query_params.get("interval"),
    )
    return JSONResponse(body.model_dump(mode="json", exclude_none=True), status_code=code)


@app.on_event("startup")
async def _start_cache_warmer() -> None:
    if not settings.warm_enabled:
        return
    global _warmer
    if _warmer and _warmer.running:
        return
    _warmer = CacheWarmer(
        get_price_service(),
        symbols=settings.warm_symbols,
        period_seconds=settings.warm_interval_seconds,
    )
    _warmer.start()


@app.on_event("shutdown")
async def _stop_cache_warmer() -> None:
    if not _warmer:
        return
    await _warmer.stop()


@app.get("/health", tags=["health"])
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


app.include_router(prices.router)
