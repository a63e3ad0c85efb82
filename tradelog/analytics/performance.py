"""Performance metrics over a trade snapshot.

All functions are pure: they read a snapshot of trades, never mutate it,
and return zero-valued results for empty input instead of raising.
"""

import math
from enum import Enum
from itertools import groupby
from typing import Iterable, Optional, Union

from tradelog.analytics.buckets import WEEKDAYS, bucket_by
from tradelog.analytics.snapshot import TradeLike, as_trades
from tradelog.models import EquityPoint, Goal, Summary


class RRPolicy(str, Enum):
    """How trades without a known reward:risk count towards the average."""

    # Average only over trades with a logged or derivable R:R.
    DEFINED_ONLY = "defined_only"
    # Unknown R:R counts as 0 and the divisor is the full trade count.
    MISSING_AS_ZERO = "missing_as_zero"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up."""
    return math.floor(value + 0.5)


def _first_extreme(values: dict[str, float], highest: bool = True) -> tuple[Optional[str], float]:
    """Pick the first key holding the max (or min) value."""
    best_key: Optional[str] = None
    best_value = 0.0
    for key, value in values.items():
        if best_key is None or (value > best_value if highest else value < best_value):
            best_key, best_value = key, value
    return best_key, best_value


def summarize(
    trades: Iterable[TradeLike],
    rr_policy: Union[RRPolicy, str] = RRPolicy.DEFINED_ONLY,
) -> Summary:
    """Compute aggregate statistics for a trade snapshot.

    Args:
        trades: Trade snapshot, in any order.
        rr_policy: Denominator policy for the average R:R.

    Returns:
        Summary of totals, win/loss counts, win rate (percent), average P&L,
        average R:R and the best ticker by summed P&L. Ties for the best
        ticker go to the ticker seen first in input order.
    """
    policy = RRPolicy(rr_policy)
    snapshot = as_trades(trades)
    if not snapshot:
        return Summary()

    total_pnl = 0.0
    win_count = 0
    loss_count = 0
    rr_total = 0.0
    rr_count = 0
    by_ticker: dict[str, float] = {}

    for trade in snapshot:
        total_pnl += trade.pnl
        if trade.pnl > 0:
            win_count += 1
        elif trade.pnl < 0:
            loss_count += 1

        rr = trade.rr
        if rr is not None:
            rr_total += rr
            rr_count += 1

        by_ticker[trade.ticker] = by_ticker.get(trade.ticker, 0.0) + trade.pnl

    trade_count = len(snapshot)
    rr_divisor = rr_count if policy is RRPolicy.DEFINED_ONLY else trade_count
    best_ticker, best_ticker_pnl = _first_extreme(by_ticker)

    return Summary(
        total_pnl=total_pnl,
        trade_count=trade_count,
        win_count=win_count,
        loss_count=loss_count,
        win_rate=win_count / trade_count * 100,
        avg_pnl=total_pnl / trade_count,
        avg_rr=rr_total / rr_divisor if rr_divisor else 0.0,
        best_ticker=best_ticker,
        best_ticker_pnl=best_ticker_pnl,
    )


def equity_curve(trades: Iterable[TradeLike], by_day: bool = False) -> list[EquityPoint]:
    """Build the cumulative P&L curve.

    Trades are stably sorted by date, so same-day trades keep their input
    order. One point is emitted per trade, or per day when ``by_day``.
    """
    ordered = sorted(as_trades(trades), key=lambda t: t.date)
    points = []
    running = 0.0

    if by_day:
        for day, day_trades in groupby(ordered, key=lambda t: t.date):
            running += sum(t.pnl for t in day_trades)
            points.append(EquityPoint(date=day, cumulative_pnl=running))
        return points

    for trade in ordered:
        running += trade.pnl
        points.append(EquityPoint(date=trade.date, cumulative_pnl=running))
    return points


def worst_ticker(trades: Iterable[TradeLike]) -> Optional[str]:
    """Ticker with the lowest summed P&L, None if there are no trades."""
    ticker, _ = _first_extreme(bucket_by(trades, "pair"), highest=False)
    return ticker


def best_weekday(trades: Iterable[TradeLike]) -> Optional[str]:
    """Weekday with the highest summed P&L, None if there are no trades."""
    snapshot = as_trades(trades)
    if not snapshot:
        return None
    by_weekday = bucket_by(snapshot, "weekday")
    return max(WEEKDAYS, key=lambda day: by_weekday[day])


def consistency_score(summary: Summary) -> int:
    """Blend win rate and average R:R into a 0-100 score."""
    score = round_half_up(summary.win_rate * 0.8 + summary.avg_rr * 5)
    return max(0, min(100, score))


def goal_stats(goals: Iterable[Goal]) -> dict:
    """Count goals and average their progress.

    Returns:
        Dictionary with ``total``, ``completed`` and ``avg_progress``.
    """
    goals = list(goals)
    total = len(goals)
    completed = sum(1 for g in goals if g.completed)
    avg_progress = round_half_up(sum(g.progress for g in goals) / total) if total else 0
    return {"total": total, "completed": completed, "avg_progress": avg_progress}
