"""Tests for the monthly calendar summary and offline reflection.

**Feature: trade-journal**
"""

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradelog.analytics import WEEKDAYS, month_summary, reflect
from tradelog.models import Trade


def _trade(day: str, pnl: float, ticker: str = "AAPL") -> Trade:
    return Trade(date=date.fromisoformat(day), ticker=ticker, pnl=pnl)


class TestMonthSummary:
    """Calendar view of one month."""

    @pytest.fixture
    def trades(self):
        return [
            _trade("2024-01-02", 100),  # Tuesday, week of Jan 1
            _trade("2024-01-03", -50),  # Wednesday, week of Jan 1
            _trade("2024-01-09", 200),  # Tuesday, week of Jan 8
            _trade("2024-01-09", -20),
            _trade("2024-02-01", 999),  # other month
        ]

    def test_days_and_totals(self, trades):
        summary = month_summary(trades, 2024, 1)

        assert summary.trade_count == 4
        assert summary.total_pnl == 230
        assert summary.pnl_by_day == {"2024-01-02": 100, "2024-01-03": -50, "2024-01-09": 180}
        assert summary.trades_by_day["2024-01-09"] == 2

    def test_best_week_runs_monday_to_sunday(self, trades):
        week = month_summary(trades, 2024, 1).best_week

        assert week.start == date(2024, 1, 8)
        assert week.end == date(2024, 1, 14)
        assert week.pnl == 180

    def test_best_week_tie_goes_to_earliest(self):
        trades = [_trade("2024-01-02", 50), _trade("2024-01-10", 50)]

        assert month_summary(trades, 2024, 1).best_week.start == date(2024, 1, 1)

    def test_most_profitable_weekday(self, trades):
        summary = month_summary(trades, 2024, 1)

        assert summary.most_profitable_weekday == "Tuesday"
        assert list(summary.pnl_by_weekday) == WEEKDAYS

    def test_empty_month(self, trades):
        summary = month_summary(trades, 2023, 12)

        assert summary.trade_count == 0
        assert summary.total_pnl == 0
        assert summary.best_week is None
        assert summary.most_profitable_weekday is None

    @given(
        pnls=st.lists(st.integers(min_value=-1000, max_value=1000), min_size=1, max_size=31),
    )
    @settings(max_examples=50)
    def test_days_sum_to_month_total(self, pnls):
        start = date(2024, 3, 1)
        trades = [
            Trade(date=start + timedelta(days=i), ticker="NQ", pnl=p) for i, p in enumerate(pnls)
        ]

        summary = month_summary(trades, 2024, 3)

        assert sum(summary.pnl_by_day.values()) == summary.total_pnl == sum(pnls)
        assert sum(summary.pnl_by_weekday.values()) == summary.total_pnl


class TestReflection:
    """Rule-based coaching on the most recent trades."""

    def test_no_trades(self):
        result = reflect([])

        assert result.trade_count == 0
        assert result.behavior == "No trades yet to analyze."
        assert result.recommendations == ["Add more trades to improve accuracy."]

    def test_strong_run(self):
        trades = [_trade("2024-01-02", 50), _trade("2024-01-03", 120, "NQ"), _trade("2024-01-04", 30)]

        result = reflect(trades)

        assert result.win_rate == 100
        assert result.behavior.startswith("You're showing strong consistency")
        assert result.recommendations == [
            "Performance trend is strong. Keep journaling and scaling safely."
        ]
        assert result.best_day == date(2024, 1, 3)
        assert result.best_ticker == "NQ"

    def test_losing_run(self):
        trades = [_trade("2024-01-02", -50), _trade("2024-01-03", -10), _trade("2024-01-04", 5)]

        result = reflect(trades)

        assert result.behavior.startswith("Win rate is below average")
        assert result.recommendations == [
            "Tighten your strategy and cut out low-quality setups.",
            "Losses outweigh gains. Revisit your entry conditions.",
        ]

    def test_only_last_n_trades(self):
        start = date(2024, 1, 1)
        old_losses = [Trade(date=start + timedelta(days=i), ticker="NQ", pnl=-100) for i in range(5)]
        recent_wins = [Trade(date=start + timedelta(days=10 + i), ticker="NQ", pnl=10) for i in range(3)]

        result = reflect(old_losses + recent_wins, last_n=3)

        assert result.trade_count == 3
        assert result.total_pnl == 30
