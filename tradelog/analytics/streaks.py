"""Consecutive trading-day streaks."""

from datetime import date, datetime
from typing import Iterable, Optional, Union

from tradelog.analytics.snapshot import TradeLike, as_trades
from tradelog.models import Streak


def _as_date(value: Union[date, str, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def trading_dates(trades: Iterable[TradeLike]) -> set[date]:
    """Distinct dates on which at least one trade was logged."""
    return {trade.date for trade in as_trades(trades)}


def current_and_max_streak(
    trade_dates: Iterable[Union[date, str]],
    as_of: Optional[date] = None,
) -> Streak:
    """Compute the current and longest runs of consecutive trading days.

    Args:
        trade_dates: Dates with at least one trade. Duplicates and
            unparseable entries are ignored.
        as_of: Optional reference day. When given, a run whose last day is
            more than one day before it has lapsed and ``current`` is 0.

    Returns:
        Streak with ``current`` (the run ending on the most recent trading
        day) and ``max`` (the longest run). Both are 0 for no dates.
    """
    days = sorted({d for d in map(_as_date, trade_dates) if d is not None})
    if not days:
        return Streak()

    current = longest = 1
    for previous, day in zip(days, days[1:]):
        if (day - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    if as_of is not None and (as_of - days[-1]).days > 1:
        current = 0

    return Streak(current=current, max=longest)
