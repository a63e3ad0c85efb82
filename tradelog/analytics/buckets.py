"""Session, weekday and instrument bucketing of trades."""

from datetime import date
from typing import Iterable, Optional

from tradelog.analytics.snapshot import TradeLike, as_trades
from tradelog.models import Trade


WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

SESSIONS = ["Morning", "Midday", "Afternoon/NY", "Overnight"]

UNKNOWN_SESSION = "Unknown"

DIMENSIONS = ("pair", "session", "weekday")


def session_of(entry_time: Optional[str]) -> str:
    """Classify a wall-clock entry time into a trading session.

    Only the hour (the integer before ``:``) matters:
    07-11 Morning, 12-15 Midday, 16-23 Afternoon/NY, anything else Overnight.

    Args:
        entry_time: Time string such as ``"09:30"``.

    Returns:
        Session name, or ``"Unknown"`` for a missing or unparseable time.
    """
    if not entry_time:
        return UNKNOWN_SESSION
    head = str(entry_time).split(":", 1)[0].strip()
    try:
        hour = int(head)
    except ValueError:
        return UNKNOWN_SESSION
    if 7 <= hour < 12:
        return "Morning"
    if 12 <= hour < 16:
        return "Midday"
    if 16 <= hour <= 23:
        return "Afternoon/NY"
    return "Overnight"


def weekday_of(day: date) -> str:
    """Weekday name for a date, Sunday-first indexing."""
    return WEEKDAYS[(day.weekday() + 1) % 7]


def _key_for(trade: Trade, dimension: str) -> str:
    if dimension == "pair":
        return trade.ticker
    if dimension == "session":
        return session_of(trade.entry_time)
    return weekday_of(trade.date)


def bucket_by(trades: Iterable[TradeLike], dimension: str) -> dict[str, float]:
    """Sum P&L per bucket of the given dimension.

    Args:
        trades: Trade snapshot.
        dimension: One of ``pair``, ``session`` or ``weekday``.

    Returns:
        Mapping of bucket name to summed P&L. ``weekday`` always holds all
        seven days in Sunday..Saturday order; ``pair`` and ``session`` hold
        observed keys in order of first occurrence.

    Raises:
        ValueError: If ``dimension`` is not a known dimension.
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension '{dimension}', expected one of {DIMENSIONS}")

    buckets: dict[str, float] = dict.fromkeys(WEEKDAYS, 0.0) if dimension == "weekday" else {}
    for trade in as_trades(trades):
        key = _key_for(trade, dimension)
        buckets[key] = buckets.get(key, 0.0) + trade.pnl
    return buckets


def filter_trades(
    trades: Iterable[TradeLike],
    pair: Optional[str] = None,
    session: Optional[str] = None,
    weekday: Optional[str] = None,
) -> list[Trade]:
    """Select trades matching every given filter.

    ``None`` or ``"All"`` disables a filter. Pair matching ignores case.
    """
    def active(value: Optional[str]) -> bool:
        return bool(value) and value != "All"

    selected = []
    for trade in as_trades(trades):
        if active(pair) and trade.ticker != pair.strip().upper():
            continue
        if active(session) and session_of(trade.entry_time) != session:
            continue
        if active(weekday) and weekday_of(trade.date) != weekday:
            continue
        selected.append(trade)
    return selected
