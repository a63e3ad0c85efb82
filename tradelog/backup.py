"""Backup and restore of trade journals as CSV or JSON."""

import csv
import json
import logging
from contextlib import nullcontext
from pathlib import Path
from typing import IO, Any, Iterable, NamedTuple, Union

from tradelog.models import Trade

logger = logging.getLogger(__name__)

# Ownership is reassigned on restore, so it is not exported.
EXPORT_COLUMNS = [
    name for name in Trade.model_fields if name != "user_id"
]

Target = Union[str, Path, IO[str]]


class ImportResult(NamedTuple):
    """Trades parsed from a backup, and how many records were unusable."""

    trades: list[Trade]
    skipped: int


def _open(target: Target, mode: str):
    if isinstance(target, (str, Path)):
        return open(target, mode, newline="", encoding="utf-8")
    # caller owns the stream
    return nullcontext(target)


def _records_to_trades(records: Iterable[Any]) -> ImportResult:
    trades = []
    skipped = 0
    for record in records:
        trade = Trade.from_record(record) if isinstance(record, dict) else None
        if trade is None:
            skipped += 1
            continue
        trades.append(trade)
    if skipped:
        logger.warning("Skipped %d unusable records during import", skipped)
    return ImportResult(trades=trades, skipped=skipped)


def export_csv(trades: Iterable[Trade], target: Target) -> int:
    """Write trades as CSV with a header row.

    Args:
        trades: Trades to export.
        target: File path or writable text stream.

    Returns:
        Number of trades written.
    """
    count = 0
    with _open(target, "w") as f:
        writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for trade in trades:
            writer.writerow(
                {k: ("" if v is None else v) for k, v in trade.to_record().items()}
            )
            count += 1
    return count


def import_csv(source: Target) -> ImportResult:
    """Read trades from a CSV backup.

    Columns are matched by header name; unknown columns are ignored. Rows
    without a parseable date are skipped; a blank ticker is kept as "".
    Malformed numbers are normalized to zero.

    Args:
        source: File path or readable text stream.

    Returns:
        ImportResult with parsed trades and the skipped row count.
    """
    with _open(source, "r") as f:
        rows = [
            row
            for row in csv.DictReader(f)
            if any(isinstance(v, str) and v.strip() for v in row.values())
        ]
    return _records_to_trades(rows)


def export_json(trades: Iterable[Trade], target: Target) -> int:
    """Write trades as a JSON array.

    Returns:
        Number of trades written.
    """
    records = [
        {k: v for k, v in trade.to_record().items() if k != "user_id"}
        for trade in trades
    ]
    with _open(target, "w") as f:
        json.dump(records, f, indent=2)
    return len(records)


def import_json(source: Target) -> ImportResult:
    """Read trades from a JSON array backup.

    Raises:
        ValueError: If the document is not valid JSON or not an array.
    """
    with _open(source, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON backup: {e}") from e
    if not isinstance(data, list):
        raise ValueError("JSON backup must be an array of trades")
    return _records_to_trades(data)
