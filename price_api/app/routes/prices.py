from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..dependencies import IntervalQuery, RatiosQuery, SymbolsQuery, get_price_service
from ..models import AlignedPoint
from ..schemas import (
    AggregateResponse,
    BatchResponse,
    ErrorResponse,
    PnLResponse,
    PriceResponse,
    SeriesPoint,
)
from ..services.price_service import PriceService

router = APIRouter(
    tags=["prices"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_points(points: list[AlignedPoint]) -> list[SeriesPoint]:
    return [SeriesPoint(value=point.value, timestamp=point.timestamp) for point in points]


@router.get("/price/{symbol}", response_model=PriceResponse)
async def price(
    symbol: str,
    interval_query: IntervalQuery = Depends(IntervalQuery),
    service: PriceService = Depends(get_price_service),
) -> PriceResponse:
    interval = interval_query()
    series = await service.get_series(symbol, interval)
    return PriceResponse(
        symbol=symbol,
        interval=interval,
        timestamp=_now(),
        data=[SeriesPoint(value=point.value, timestamp=point.timestamp) for point in series.points],
    )


@router.get("/aggregate", response_model=AggregateResponse)
async def aggregate(
    symbols_query: SymbolsQuery = Depends(SymbolsQuery),
    ratios_query: RatiosQuery = Depends(RatiosQuery),
    interval_query: IntervalQuery = Depends(IntervalQuery),
    service: PriceService = Depends(get_price_service),
) -> AggregateResponse:
    interval = interval_query()
    points = await service.get_aggregate(symbols_query(), ratios_query(), interval)
    return AggregateResponse(data=_to_points(points), interval=interval, timestamp=_now())


@router.get("/aggregate/pnl", response_model=PnLResponse)
async def aggregate_pnl(
    symbols_query: SymbolsQuery = Depends(SymbolsQuery),
    ratios_query: RatiosQuery = Depends(RatiosQuery),
    service: PriceService = Depends(get_price_service),
) -> PnLResponse:
    result = await service.get_percent_change(symbols_query(), ratios_query())
    return PnLResponse(
        pnl=result.pnl,
        first_value=result.first_value,
        last_value=result.last_value,
        first_timestamp=result.first_timestamp,
        last_timestamp=result.last_timestamp,
        timestamp=_now(),
    )


@router.get("/batch", response_model=BatchResponse)
async def batch(
    symbols_query: SymbolsQuery = Depends(SymbolsQuery),
    interval_query: IntervalQuery = Depends(IntervalQuery),
    service: PriceService = Depends(get_price_service),
) -> BatchResponse:
    snapshot = await service.get_batch_snapshot(symbols_query(), interval_query())
    return BatchResponse(values=snapshot.values, timestamp=snapshot.timestamp)
