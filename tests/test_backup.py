"""Tests for journal backup and restore.

**Feature: trade-journal**
"""

import io
import json
from datetime import date

import pytest

from tradelog.backup import (
    EXPORT_COLUMNS,
    export_csv,
    export_json,
    import_csv,
    import_json,
)
from tradelog.models import Trade


@pytest.fixture
def journal():
    return [
        Trade(
            user_id="u1",
            date=date(2024, 1, 2),
            ticker="AAPL",
            pnl=120.5,
            final_rr=1.8,
            entry_time="09:45",
            done_right="Waited for confirmation",
        ),
        Trade(user_id="u1", date=date(2024, 1, 3), ticker="EURUSD", pnl=-40, amount_risked=20),
    ]


class TestCsvBackup:
    """CSV export and restore."""

    def test_restores_exported_trades(self, journal):
        buffer = io.StringIO()

        assert export_csv(journal, buffer) == 2
        buffer.seek(0)
        result = import_csv(buffer)

        assert result.skipped == 0
        assert [t.id for t in result.trades] == [t.id for t in journal]
        assert result.trades[0].final_rr == 1.8
        assert result.trades[0].done_right == "Waited for confirmation"
        assert result.trades[1].final_rr is None
        assert result.trades[1].rr == -2.0

    def test_header_omits_owner(self, journal):
        buffer = io.StringIO()
        export_csv(journal, buffer)

        header = buffer.getvalue().splitlines()[0].split(",")

        assert header == EXPORT_COLUMNS
        assert "user_id" not in header

    def test_restored_trades_have_no_owner(self, journal):
        buffer = io.StringIO()
        export_csv(journal, buffer)
        buffer.seek(0)

        assert all(t.user_id is None for t in import_csv(buffer).trades)

    def test_legacy_columns_and_bad_rows(self):
        source = io.StringIO(
            "date,ticker,pnl,note\n"
            "2024-01-02,aapl,abc,Chased the entry\n"
            ",MSFT,5,\n"
            ",,,\n"
            "2024-01-04,NQ,12.5,\n"
        )

        result = import_csv(source)

        assert result.skipped == 1
        assert [t.ticker for t in result.trades] == ["AAPL", "NQ"]
        assert result.trades[0].pnl == 0.0
        assert result.trades[0].what_to_improve == "Chased the entry"

    def test_row_without_ticker_is_kept(self):
        result = import_csv(io.StringIO("date,ticker,pnl\n2024-01-02,,7\n"))

        assert result.skipped == 0
        assert [(t.ticker, t.pnl) for t in result.trades] == [("", 7.0)]

    def test_file_paths(self, journal, tmp_path):
        path = tmp_path / "journal.csv"

        export_csv(journal, path)

        assert len(import_csv(path).trades) == 2


class TestJsonBackup:
    """JSON export and restore."""

    def test_restores_exported_trades(self, journal, tmp_path):
        path = tmp_path / "journal.json"

        assert export_json(journal, path) == 2
        result = import_json(path)

        assert [t.id for t in result.trades] == [t.id for t in journal]
        assert result.trades[0].created_at == journal[0].created_at
        assert "user_id" not in json.loads(path.read_text())[0]

    def test_unusable_records_are_skipped(self):
        source = io.StringIO(json.dumps([
            {"date": "2024-01-02", "ticker": "AAPL", "pnl": 10},
            {"ticker": "AAPL"},
            "not a record",
        ]))

        result = import_json(source)

        assert len(result.trades) == 1
        assert result.skipped == 2

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            import_json(io.StringIO("{not json"))

    def test_document_must_be_array(self):
        with pytest.raises(ValueError):
            import_json(io.StringIO(json.dumps({"trades": []})))
