"""Analytics result models."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


class Summary(BaseModel):
    """Aggregate performance statistics over a set of trades."""

    total_pnl: float = 0.0
    trade_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    win_rate: float = Field(default=0.0, ge=0, le=100, description="Win rate percentage")
    avg_pnl: float = 0.0
    avg_rr: float = 0.0
    best_ticker: Optional[str] = None
    best_ticker_pnl: float = 0.0

    model_config = {"frozen": True}


class EquityPoint(BaseModel):
    """One point of a cumulative P&L curve."""

    date: date_type
    cumulative_pnl: float

    model_config = {"frozen": True}


class Streak(BaseModel):
    """Consecutive trading-day streaks."""

    current: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class WeekPnl(BaseModel):
    """P&L for one ISO week."""

    start: date_type
    end: date_type
    pnl: float

    model_config = {"frozen": True}


class MonthSummary(BaseModel):
    """Calendar view of one month of trading."""

    year: int
    month: int
    trade_count: int = 0
    total_pnl: float = 0.0
    pnl_by_day: dict[str, float] = Field(default_factory=dict)
    trades_by_day: dict[str, int] = Field(default_factory=dict)
    pnl_by_weekday: dict[str, float] = Field(default_factory=dict)
    best_week: Optional[WeekPnl] = None
    most_profitable_weekday: Optional[str] = None

    model_config = {"frozen": True}


class Reflection(BaseModel):
    """Offline, rule-based coaching over recent trades."""

    trade_count: int = 0
    win_rate: float = 0.0
    avg_pnl: float = 0.0
    total_pnl: float = 0.0
    best_ticker: Optional[str] = None
    best_day: Optional[date_type] = None
    behavior: str = ""
    recommendations: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
