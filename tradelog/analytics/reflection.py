"""Offline, rule-based reflection on recent trades."""

from typing import Iterable

from tradelog.analytics.performance import summarize
from tradelog.analytics.snapshot import TradeLike, as_trades
from tradelog.models import Reflection


STRONG_WIN_RATE = 60.0
WEAK_WIN_RATE = 40.0


def reflect(trades: Iterable[TradeLike], last_n: int = 10) -> Reflection:
    """Coach on the ``last_n`` most recent trades without calling an LLM.

    Args:
        trades: Trade snapshot.
        last_n: How many of the most recent trades to consider.

    Returns:
        Reflection with headline metrics, a behaviour note and
        recommendations.
    """
    recent = sorted(as_trades(trades), key=lambda t: t.date, reverse=True)[: max(last_n, 0)]
    if not recent:
        return Reflection(
            behavior="No trades yet to analyze.",
            recommendations=["Add more trades to improve accuracy."],
        )

    summary = summarize(recent)
    best_trade = max(recent, key=lambda t: t.pnl)

    if summary.win_rate > STRONG_WIN_RATE:
        behavior = "You're showing strong consistency. Keep following your setups."
    else:
        behavior = "Win rate is below average. Focus on trade selection and risk control."

    recommendations = []
    if summary.win_rate < WEAK_WIN_RATE:
        recommendations.append("Tighten your strategy and cut out low-quality setups.")
    if summary.avg_pnl < 0:
        recommendations.append("Losses outweigh gains. Revisit your entry conditions.")
    if summary.win_rate > STRONG_WIN_RATE and summary.avg_pnl > 0:
        recommendations.append("Performance trend is strong. Keep journaling and scaling safely.")

    return Reflection(
        trade_count=summary.trade_count,
        win_rate=summary.win_rate,
        avg_pnl=summary.avg_pnl,
        total_pnl=summary.total_pnl,
        best_ticker=summary.best_ticker,
        best_day=best_trade.date,
        behavior=behavior,
        recommendations=recommendations,
    )
