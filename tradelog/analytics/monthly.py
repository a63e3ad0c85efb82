"""Monthly calendar summary."""

from datetime import timedelta
from typing import Iterable

from tradelog.analytics.buckets import WEEKDAYS, bucket_by
from tradelog.analytics.snapshot import TradeLike, as_trades
from tradelog.models import MonthSummary, WeekPnl


def month_summary(trades: Iterable[TradeLike], year: int, month: int) -> MonthSummary:
    """Summarize the trades of one calendar month.

    Weeks run Monday to Sunday; the best week is the first one (in
    chronological order) with the highest P&L. The most profitable weekday
    is None for a month without trades.
    """
    month_trades = sorted(
        (t for t in as_trades(trades) if t.date.year == year and t.date.month == month),
        key=lambda t: t.date,
    )

    pnl_by_day: dict[str, float] = {}
    trades_by_day: dict[str, int] = {}
    pnl_by_week: dict = {}
    for trade in month_trades:
        key = trade.date.isoformat()
        pnl_by_day[key] = pnl_by_day.get(key, 0.0) + trade.pnl
        trades_by_day[key] = trades_by_day.get(key, 0) + 1
        week_start = trade.date - timedelta(days=trade.date.weekday())
        pnl_by_week[week_start] = pnl_by_week.get(week_start, 0.0) + trade.pnl

    best_week = None
    for start, pnl in pnl_by_week.items():
        if best_week is None or pnl > best_week.pnl:
            best_week = WeekPnl(start=start, end=start + timedelta(days=6), pnl=pnl)

    pnl_by_weekday = bucket_by(month_trades, "weekday")
    most_profitable = (
        max(WEEKDAYS, key=lambda day: pnl_by_weekday[day]) if month_trades else None
    )

    return MonthSummary(
        year=year,
        month=month,
        trade_count=len(month_trades),
        total_pnl=sum(t.pnl for t in month_trades),
        pnl_by_day=pnl_by_day,
        trades_by_day=trades_by_day,
        pnl_by_weekday=pnl_by_weekday,
        best_week=best_week,
        most_profitable_weekday=most_profitable,
    )
