"""Journal commands for tradelog CLI.

Handles logging, editing, deleting and listing trades.
"""

from datetime import date, timedelta
from typing import Optional

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from tradelog.analytics import SESSIONS, WEEKDAYS, filter_trades, session_of
from tradelog.cli.common import (
    console,
    fail,
    format_pnl,
    get_data_store,
    require_config,
    require_user,
)
from tradelog.db.store import TradeNotFoundError
from tradelog.models import Trade

# CLI option name -> Trade field, shared by add and edit
_TEXT_OPTIONS = {
    "entry": "entry_time",
    "exit_": "exit_time",
    "confluences": "confluences",
    "right": "done_right",
    "wrong": "done_wrong",
    "improve": "what_to_improve",
    "emotions": "emotions",
    "entry_chart": "entry_chart",
    "htf_chart": "htf_chart",
}

SHORT_ID_LENGTH = 8


def trade_options(func):
    """Attach the optional trade-field options shared by add and edit."""
    options = [
        click.option("--date", "trade_date", type=click.DateTime(formats=["%Y-%m-%d"]),
                     default=None, help="Trade date (YYYY-MM-DD)."),
        click.option("--entry", default=None, help="Entry time (HH:MM)."),
        click.option("--exit", "exit_", default=None, help="Exit time (HH:MM)."),
        click.option("--rr", default=None, help="Final reward:risk."),
        click.option("--risked", default=None, help="Amount risked."),
        click.option("--confluences", default=None, help="Confluences for the setup."),
        click.option("--right", default=None, help="What was done right."),
        click.option("--wrong", default=None, help="What was done wrong."),
        click.option("--improve", default=None, help="What to improve."),
        click.option("--emotions", default=None, help="Emotional state."),
        click.option("--entry-chart", default=None, help="Entry chart link or path."),
        click.option("--htf-chart", default=None, help="Higher-timeframe chart link or path."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _fields_from_options(trade_date, rr, risked, **text) -> dict:
    fields = {}
    if trade_date is not None:
        fields["date"] = trade_date.date()
    if rr is not None:
        fields["final_rr"] = rr
    if risked is not None:
        fields["amount_risked"] = risked
    for option, field in _TEXT_OPTIONS.items():
        if text.get(option) is not None:
            fields[field] = text[option]
    return fields


def resolve_trade_id(store, user_id: str, prefix: str) -> str:
    """Expand a (possibly shortened) trade ID to the full ID.

    Raises:
        TradeNotFoundError: If no trade, or more than one, matches.
    """
    matches = [t.id for t in store.list_trades(user_id) if t.id.startswith(prefix)]
    if len(matches) != 1:
        raise TradeNotFoundError(prefix)
    return matches[0]


def _show_trade(trade: Trade, title: str) -> None:
    rr = trade.rr
    console.print(Panel(
        f"[bold]{trade.ticker}[/bold] on {trade.date.isoformat()}"
        f"  {trade.entry_time or '--:--'} -> {trade.exit_time or '--:--'}\n"
        f"P&L: {format_pnl(trade.pnl)}   R:R: {'-' if rr is None else f'{rr:.2f}'}\n"
        f"[dim]ID: {trade.id}[/dim]",
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
    ))


@click.command()
@click.argument("ticker")
@click.option("--pnl", default="0", help="Realized P&L (negative for a loss).")
@trade_options
def add(ticker: str, pnl: str, **options) -> None:
    """Log a trade.

    \b
    Examples:
      tradelog add AAPL --pnl 120.5 --rr 1.8 --entry 09:45
      tradelog add EURUSD --pnl -40 --date 2024-01-02 --wrong "Chased entry"
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    fields = _fields_from_options(**options)
    fields.setdefault("date", date.today())

    try:
        trade = Trade(ticker=ticker, pnl=pnl, **fields)
    except ValidationError as e:
        fail(f"[red]Invalid trade:[/red] {e.errors()[0]['msg']}")

    stored = store.create_trade(trade, user_id=user_id)
    _show_trade(stored, "Trade Logged")


@click.command()
@click.argument("trade_id")
@click.option("--ticker", default=None, help="Instrument symbol.")
@click.option("--pnl", default=None, help="Realized P&L.")
@trade_options
def edit(trade_id: str, ticker: Optional[str], pnl: Optional[str], **options) -> None:
    """Edit a trade's fields.

    TRADE_ID may be shortened to any unique prefix.

    \b
    Examples:
      tradelog edit 3f2a9c1b --pnl 95 --improve "Scale out earlier"
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    patch = _fields_from_options(**options)
    if ticker is not None:
        patch["ticker"] = ticker
    if pnl is not None:
        patch["pnl"] = pnl

    if not patch:
        fail("[yellow]Nothing to change.[/yellow] Pass at least one field option.", title="Edit")

    try:
        updated = store.update_trade(resolve_trade_id(store, user_id, trade_id), patch)
    except TradeNotFoundError:
        fail(f"[red]No unique trade matches '{trade_id}'.[/red]", title="Not Found")
    except ValidationError as e:
        fail(f"[red]Invalid trade:[/red] {e.errors()[0]['msg']}")

    _show_trade(updated, "Trade Updated")


@click.command()
@click.argument("trade_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation.")
def delete(trade_id: str, yes: bool) -> None:
    """Delete a trade.

    TRADE_ID may be shortened to any unique prefix.
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    try:
        full_id = resolve_trade_id(store, user_id, trade_id)
    except TradeNotFoundError:
        fail(f"[red]No unique trade matches '{trade_id}'.[/red]", title="Not Found")

    trade = store.get_trade(full_id)
    if not yes and not click.confirm(
        f"Delete {trade.ticker} on {trade.date.isoformat()} ({trade.pnl:+,.2f})?",
        default=False,
    ):
        console.print("[dim]Cancelled.[/dim]")
        return

    store.delete_trade(full_id)
    console.print(f"[green]Deleted trade {full_id[:SHORT_ID_LENGTH]}.[/green]")


@click.command()
@click.option("--days", type=int, default=None, help="Only the last N days.")
@click.option("--month", default=None, help="Only one month (YYYY-MM).")
@click.option("--pair", default=None, help="Filter by ticker.")
@click.option("--session", type=click.Choice(SESSIONS), default=None, help="Filter by session.")
@click.option("--weekday", type=click.Choice(WEEKDAYS), default=None, help="Filter by weekday.")
def trades(
    days: Optional[int],
    month: Optional[str],
    pair: Optional[str],
    session: Optional[str],
    weekday: Optional[str],
) -> None:
    """List journaled trades.

    \b
    Examples:
      tradelog trades                  # All trades
      tradelog trades --days 7         # Last 7 days
      tradelog trades --month 2024-01 --session Morning
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    journal = store.list_trades(user_id, month=month)
    if days is not None:
        from_date = date.today() - timedelta(days=days)
        journal = [t for t in journal if t.date >= from_date]
    journal = filter_trades(journal, pair=pair, session=session, weekday=weekday)

    if not journal:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trade Journal[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Trade Journal",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Ticker", style="bold")
    table.add_column("Time", justify="center")
    table.add_column("Session")
    table.add_column("P&L", justify="right")
    table.add_column("R:R", justify="right")
    table.add_column("Notes", max_width=30)

    total_pnl = 0.0
    for trade in journal:
        rr = trade.rr
        note = trade.what_to_improve or trade.done_wrong or trade.done_right or "-"
        table.add_row(
            trade.id[:SHORT_ID_LENGTH],
            trade.date.isoformat(),
            trade.ticker,
            f"{trade.entry_time or '--:--'}-{trade.exit_time or '--:--'}",
            session_of(trade.entry_time),
            format_pnl(trade.pnl),
            "-" if rr is None else f"{rr:.2f}",
            (note[:27] + "...") if len(note) > 30 else note,
        )
        total_pnl += trade.pnl

    console.print(table)
    console.print(f"\n[bold]Total P&L:[/bold] {format_pnl(total_pnl)} over {len(journal)} trades")
