"""Tests for the tradelog command line.

**Feature: trade-journal**
"""

import json
from datetime import date, timedelta
from unittest.mock import patch

import pytest
import toml
from click.testing import CliRunner

from tradelog.cli.common import console
from tradelog.cli.main import cli
from tradelog.config import get_config_path, get_db_path
from tradelog.db.store import DataStore
from tradelog.models import Insight, Trade


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """A runner whose config and database live in a temporary home."""
    monkeypatch.setenv("TRADELOG_HOME", str(tmp_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    # wide enough that tables never wrap cell text
    monkeypatch.setattr(console, "width", 200)
    return CliRunner()


@pytest.fixture
def signed_in(runner):
    result = runner.invoke(cli, ["init", "--user-id", "me", "--email", "me@example.com"])
    assert result.exit_code == 0, result.output
    return runner


def _store() -> DataStore:
    return DataStore(get_db_path(toml.load(get_config_path())))


def _update_config(section: str, **values) -> None:
    config = toml.load(get_config_path())
    config.setdefault(section, {}).update(values)
    with open(get_config_path(), "w") as f:
        toml.dump(config, f)


class TestSetup:
    """init and whoami."""

    def test_commands_need_config(self, runner):
        result = runner.invoke(cli, ["trades"])

        assert result.exit_code == 1
        assert "Configuration not found" in result.output

    def test_init_writes_config_and_profile(self, signed_in):
        assert get_config_path().exists()
        assert _store().get_profile("me").email == "me@example.com"

    def test_init_does_not_overwrite(self, signed_in):
        result = signed_in.invoke(cli, ["init", "--user-id", "other"])

        assert "Already Initialized" in result.output
        assert toml.load(get_config_path())["user"]["id"] == "me"

    def test_init_without_user_lists_missing(self, runner):
        result = runner.invoke(cli, ["init"])

        assert result.exit_code == 0
        assert "user.id" in result.output

    def test_whoami(self, signed_in):
        result = signed_in.invoke(cli, ["whoami"])

        assert result.exit_code == 0
        assert "me@example.com" in result.output

    def test_missing_user(self, runner):
        runner.invoke(cli, ["init"])

        result = runner.invoke(cli, ["trades"])

        assert result.exit_code == 1
        assert "No user configured" in result.output


class TestJournal:
    """add, edit, delete and trades."""

    def test_add_and_list(self, signed_in):
        result = signed_in.invoke(
            cli, ["add", "aapl", "--pnl", "120.5", "--date", "2024-01-02", "--entry", "09:45"]
        )
        assert result.exit_code == 0, result.output

        trades = _store().list_trades("me")
        assert len(trades) == 1
        assert trades[0].ticker == "AAPL"
        assert trades[0].pnl == 120.5

        listing = signed_in.invoke(cli, ["trades"])
        assert "AAPL" in listing.output
        assert "Morning" in listing.output

    def test_add_loss(self, signed_in):
        result = signed_in.invoke(cli, ["add", "NQ", "--pnl", "-40", "--risked", "20"])

        assert result.exit_code == 0, result.output
        trade = _store().list_trades("me")[0]
        assert trade.pnl == -40
        assert trade.rr == -2
        assert trade.date == date.today()

    def test_edit_by_prefix(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10", "--date", "2024-01-02"])
        trade_id = _store().list_trades("me")[0].id

        result = signed_in.invoke(cli, ["edit", trade_id[:8], "--pnl", "25", "--improve", "Scale out"])

        assert result.exit_code == 0, result.output
        edited = _store().get_trade(trade_id)
        assert edited.pnl == 25
        assert edited.what_to_improve == "Scale out"

    def test_edit_unknown(self, signed_in):
        result = signed_in.invoke(cli, ["edit", "zzzz", "--pnl", "1"])

        assert result.exit_code == 1
        assert "No unique trade" in result.output

    def test_edit_needs_a_field(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL"])
        trade_id = _store().list_trades("me")[0].id

        result = signed_in.invoke(cli, ["edit", trade_id])

        assert result.exit_code == 1

    def test_delete(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10"])
        trade_id = _store().list_trades("me")[0].id

        cancelled = signed_in.invoke(cli, ["delete", trade_id], input="n\n")
        assert _store().get_trade(trade_id) is not None
        assert "Cancelled" in cancelled.output

        result = signed_in.invoke(cli, ["delete", trade_id, "--yes"])
        assert result.exit_code == 0, result.output
        assert _store().get_trade(trade_id) is None

    def test_trades_filters(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10", "--date", "2024-01-02"])
        signed_in.invoke(cli, ["add", "MSFT", "--pnl", "20", "--date", "2024-02-02"])

        result = signed_in.invoke(cli, ["trades", "--month", "2024-02"])

        assert "MSFT" in result.output
        assert "AAPL" not in result.output

    def test_empty_journal(self, signed_in):
        result = signed_in.invoke(cli, ["trades"])

        assert result.exit_code == 0
        assert "No trades found" in result.output


class TestAnalyticsCommands:
    """stats, breakdown, equity, streak and calendar."""

    @pytest.fixture
    def journal(self, signed_in):
        for args in (
            ["AAPL", "--pnl", "100", "--date", "2024-01-02", "--entry", "09:30", "--rr", "2"],
            ["EURUSD", "--pnl", "-50", "--date", "2024-01-03", "--entry", "14:00"],
            ["AAPL", "--pnl", "200", "--date", "2024-01-09", "--entry", "20:15"],
        ):
            result = signed_in.invoke(cli, ["add", *args])
            assert result.exit_code == 0, result.output
        return signed_in

    def test_stats(self, journal):
        result = journal.invoke(cli, ["stats"])

        assert result.exit_code == 0, result.output
        assert "Trade Statistics" in result.output
        assert "+$250.00" in result.output
        assert "66.7%" in result.output

    def test_stats_filtered(self, journal):
        result = journal.invoke(cli, ["stats", "--pair", "eurusd"])

        assert result.exit_code == 0, result.output
        assert "-$50.00" in result.output

    def test_breakdown_by_session(self, journal):
        result = journal.invoke(cli, ["breakdown", "--by", "session"])

        assert result.exit_code == 0, result.output
        for session in ("Morning", "Midday", "Afternoon/NY"):
            assert session in result.output

    def test_breakdown_rejects_unknown_dimension(self, journal):
        result = journal.invoke(cli, ["breakdown", "--by", "month"])

        assert result.exit_code == 2

    def test_equity(self, journal):
        result = journal.invoke(cli, ["equity", "--daily"])

        assert result.exit_code == 0, result.output
        assert "+$250.00" in result.output

    def test_calendar(self, journal):
        result = journal.invoke(cli, ["calendar", "--month", "2024-01"])

        assert result.exit_code == 0, result.output
        assert "January 2024" in result.output
        assert "Tuesday" in result.output

    def test_calendar_bad_month(self, journal):
        result = journal.invoke(cli, ["calendar", "--month", "2024-13"])

        assert result.exit_code == 1

    def test_streak_counts_recent_days(self, signed_in):
        today = date.today()
        for offset in (0, 1, 2, 5):
            day = (today - timedelta(days=offset)).isoformat()
            signed_in.invoke(cli, ["add", "NQ", "--pnl", "5", "--date", day])

        result = signed_in.invoke(cli, ["streak"])

        assert result.exit_code == 0, result.output
        assert "Current streak: 3" in result.output
        assert "Longest streak: 3" in result.output

    def test_subscription_gate(self, journal):
        _update_config("subscription", enforce=True)

        blocked = journal.invoke(cli, ["stats"])
        assert blocked.exit_code == 1
        assert "active subscription" in blocked.output

        journal.invoke(cli, ["subscription", "set", "--status", "active"])
        allowed = journal.invoke(cli, ["stats"])
        assert allowed.exit_code == 0, allowed.output

    @pytest.mark.parametrize("command", ["stats", "breakdown", "equity", "streak"])
    def test_bad_rr_policy_is_reported(self, journal, command):
        _update_config("analytics", rr_policy="average")

        result = journal.invoke(cli, [command])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid configuration" in result.output
        assert "analytics.rr_policy" in result.output

    def test_missing_as_zero_policy(self, journal):
        _update_config("analytics", rr_policy="missing_as_zero")

        result = journal.invoke(cli, ["stats"])

        assert result.exit_code == 0, result.output
        assert "Avg R:R:        0.67" in result.output


class TestGoals:
    """goal add, list, progress and delete."""

    def test_goal_lifecycle(self, signed_in):
        result = signed_in.invoke(cli, ["goal", "add", "Journal every trade", "--deadline", "2024-06-30"])
        assert result.exit_code == 0, result.output
        goal_id = _store().list_goals("me")[0].id

        signed_in.invoke(cli, ["goal", "progress", str(goal_id), "60"])
        signed_in.invoke(cli, ["goal", "progress", str(goal_id), "+50"])
        goal = _store().list_goals("me")[0]
        assert goal.progress == 100
        assert goal.completed

        listing = signed_in.invoke(cli, ["goal", "list"])
        assert "Journal every trade" in listing.output
        assert "Completed:" in listing.output

        signed_in.invoke(cli, ["goal", "delete", str(goal_id)])
        assert _store().list_goals("me") == []

    def test_unknown_goal(self, signed_in):
        result = signed_in.invoke(cli, ["goal", "progress", "99", "10"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestBackupCommands:
    """export and import."""

    def test_export_import_round_trip(self, signed_in, tmp_path):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10", "--date", "2024-01-02"])
        signed_in.invoke(cli, ["add", "NQ", "--pnl", "-5", "--date", "2024-01-03"])
        path = tmp_path / "backup.json"

        exported = signed_in.invoke(cli, ["export", "-o", str(path)])
        assert exported.exit_code == 0, exported.output
        assert len(json.loads(path.read_text())) == 2

        store = _store()
        for trade in store.list_trades("me"):
            store.delete_trade(trade.id)

        imported = signed_in.invoke(cli, ["import", str(path)])
        assert imported.exit_code == 0, imported.output
        assert sorted(t.ticker for t in _store().list_trades("me")) == ["AAPL", "NQ"]

    def test_export_csv_to_stdout(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10", "--date", "2024-01-02"])

        result = signed_in.invoke(cli, ["export"])

        assert result.exit_code == 0
        assert result.output.startswith("id,date,ticker")

    def test_import_reports_skipped(self, signed_in, tmp_path):
        path = tmp_path / "legacy.csv"
        path.write_text("date,ticker,pnl\n2024-01-02,AAPL,10\n,MSFT,5\n")

        result = signed_in.invoke(cli, ["import", str(path)])

        assert result.exit_code == 0, result.output
        assert "Skipped 1" in result.output

    def test_import_unknown_extension(self, signed_in, tmp_path):
        path = tmp_path / "backup.txt"
        path.write_text("[]")

        assert signed_in.invoke(cli, ["import", str(path)]).exit_code == 1
        assert signed_in.invoke(cli, ["import", str(path), "--format", "json"]).exit_code == 0

    def test_import_leaves_other_users_trades(self, signed_in, tmp_path):
        theirs = _store().create_trade(
            Trade(date=date(2024, 1, 2), ticker="NQ", pnl=10), user_id="someone-else"
        )
        path = tmp_path / "backup.json"
        path.write_text(json.dumps([theirs.with_changes({"pnl": 999}).to_record()]))

        result = signed_in.invoke(cli, ["import", str(path)])

        assert result.exit_code == 0, result.output
        assert "Skipped 1 trades owned by another user" in result.output
        assert _store().get_trade(theirs.id).pnl == 10
        assert _store().list_trades("me") == []


class TestCoachCommands:
    """reflect, insights and coach."""

    def test_reflect_offline(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10", "--date", "2024-01-02"])

        result = signed_in.invoke(cli, ["reflect"])

        assert result.exit_code == 0, result.output
        assert "strong consistency" in result.output

    def test_insights_need_api_key(self, signed_in):
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10"])

        result = signed_in.invoke(cli, ["insights"])

        assert result.exit_code == 1
        assert "OpenAI API key not configured" in result.output

    def test_insights_bad_window(self, signed_in, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        _update_config("analytics", insight_window="ten")

        result = signed_in.invoke(cli, ["insights"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "analytics.insight_window" in result.output

    def test_insights_window_from_config(self, signed_in, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        _update_config("analytics", insight_window=7)
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10"])

        with patch("tradelog.agents.coach.CoachAgent") as coach_cls:
            coach_cls.return_value.insights.return_value = Insight(summary="ok")
            result = signed_in.invoke(cli, ["insights"])

        assert result.exit_code == 0, result.output
        assert coach_cls.return_value.insights.call_args.kwargs["window"] == 7

    def test_insights(self, signed_in, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        signed_in.invoke(cli, ["add", "AAPL", "--pnl", "10"])

        with patch("tradelog.agents.coach.CoachAgent") as coach_cls:
            coach_cls.return_value.insights.return_value = Insight(
                summary="Great discipline", strengths=["Patience"]
            )
            result = signed_in.invoke(cli, ["insights", "--window", "5"])

        assert result.exit_code == 0, result.output
        assert "Great discipline" in result.output
        assert "Patience" in result.output
        assert coach_cls.return_value.insights.call_args.kwargs["window"] == 5

    def test_coach(self, signed_in, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        with patch("tradelog.agents.coach.CoachAgent") as coach_cls:
            coach_cls.return_value.chat.return_value = "Trade less after lunch."
            result = signed_in.invoke(cli, ["coach", "Am I overtrading?"])

        assert result.exit_code == 0, result.output
        assert "Trade less after lunch." in result.output

    def test_agent_failure_is_reported(self, signed_in, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        with patch("tradelog.agents.coach.CoachAgent") as coach_cls:
            coach_cls.return_value.chat.side_effect = RuntimeError("rate limited")
            result = signed_in.invoke(cli, ["coach", "Hello?"])

        assert result.exit_code == 1
        assert "rate limited" in result.output


class TestSubscriptionCommands:
    """subscription status and set."""

    def test_status_defaults_inactive(self, signed_in):
        result = signed_in.invoke(cli, ["subscription", "status"])

        assert result.exit_code == 0, result.output
        assert "inactive" in result.output

    def test_set(self, signed_in):
        result = signed_in.invoke(
            cli, ["subscription", "set", "--status", "active", "--until", "2999-01-01"]
        )

        assert result.exit_code == 0, result.output
        assert _store().is_subscription_active("me")
