from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SeriesPoint(BaseModel):
    value: float
    timestamp: datetime


class PriceResponse(BaseModel):
    symbol: str
    interval: str
    timestamp: datetime
    data: List[SeriesPoint] = Field(default_factory=list)


class AggregateResponse(BaseModel):
    data: List[SeriesPoint] = Field(default_factory=list)
    interval: str
    timestamp: datetime


class PnLResponse(BaseModel):
    """Gain/loss of a weighted aggregate over the long interval."""

    model_config = ConfigDict(populate_by_name=True)

    pnl: float
    first_value: float = Field(alias="firstValue")
    last_value: float = Field(alias="lastValue")
    first_timestamp: datetime = Field(alias="firstTimestamp")
    last_timestamp: datetime = Field(alias="lastTimestamp")
    timestamp: datetime


class BatchResponse(BaseModel):
    values: Dict[str, float] = Field(default_factory=dict)
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    detail: str
    timestamp: datetime
    symbol: Optional[str] = None
    interval: Optional[str] = None
