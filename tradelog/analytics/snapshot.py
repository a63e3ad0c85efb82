"""Snapshot coercion shared by the analytics functions."""

from collections.abc import Mapping
from typing import Any, Iterable, Union

from tradelog.models import Trade

TradeLike = Union[Trade, Mapping[str, Any]]


def as_trades(trades: Iterable[TradeLike]) -> list[Trade]:
    """Materialize an iterable of trades or raw records as a list of Trade.

    Raw mappings are normalized through :meth:`Trade.from_record`; records
    without a usable date are dropped; a blank ticker is kept as "". The input is never mutated.
    """
    snapshot = []
    for item in trades or ():
        if isinstance(item, Trade):
            snapshot.append(item)
        elif isinstance(item, Mapping):
            trade = Trade.from_record(item)
            if trade is not None:
                snapshot.append(trade)
    return snapshot
