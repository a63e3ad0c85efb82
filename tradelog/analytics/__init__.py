"""Trade analytics.

Pure functions over an in-memory snapshot of one user's trades: summary
statistics, P&L buckets, equity curves, streaks and calendar views. The
caller owns the snapshot; nothing here performs I/O or keeps state.
"""

from tradelog.analytics.buckets import (
    DIMENSIONS,
    SESSIONS,
    WEEKDAYS,
    bucket_by,
    filter_trades,
    session_of,
    weekday_of,
)
from tradelog.analytics.monthly import month_summary
from tradelog.analytics.performance import (
    RRPolicy,
    best_weekday,
    consistency_score,
    equity_curve,
    goal_stats,
    summarize,
    worst_ticker,
)
from tradelog.analytics.reflection import reflect
from tradelog.analytics.snapshot import as_trades
from tradelog.analytics.streaks import current_and_max_streak, trading_dates
from tradelog.normalize import to_finite_number

__all__ = [
    "DIMENSIONS",
    "SESSIONS",
    "WEEKDAYS",
    "RRPolicy",
    "as_trades",
    "best_weekday",
    "bucket_by",
    "consistency_score",
    "current_and_max_streak",
    "equity_curve",
    "filter_trades",
    "goal_stats",
    "month_summary",
    "reflect",
    "session_of",
    "summarize",
    "to_finite_number",
    "trading_dates",
    "weekday_of",
    "worst_ticker",
]
