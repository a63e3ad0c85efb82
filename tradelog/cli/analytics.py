"""Analytics commands for tradelog CLI.

Handles the performance summary, P&L breakdowns, equity curve,
streaks and the monthly calendar.
"""

import calendar as month_calendar
from datetime import date
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradelog.analytics import (
    DIMENSIONS,
    SESSIONS,
    WEEKDAYS,
    best_weekday,
    bucket_by,
    consistency_score,
    current_and_max_streak,
    equity_curve,
    filter_trades,
    month_summary,
    summarize,
    trading_dates,
    worst_ticker,
)
from tradelog.cli.common import (
    console,
    fail,
    format_pnl,
    get_data_store,
    require_analytics_settings,
    require_config,
    require_subscription,
    require_user,
)


def _load_snapshot(config: dict, **filters) -> list:
    """Fetch the signed-in user's trades after the config and entitlement checks."""
    require_analytics_settings(config)
    user_id = require_user(config)
    store = get_data_store(config)
    require_subscription(config, store, user_id)
    return filter_trades(store.list_trades(user_id), **filters)


def filter_options(func):
    """Attach the pair/session/weekday filters of the analytics views."""
    func = click.option("--weekday", type=click.Choice(WEEKDAYS), default=None,
                        help="Only trades on this weekday.")(func)
    func = click.option("--session", type=click.Choice(SESSIONS), default=None,
                        help="Only trades in this session.")(func)
    func = click.option("--pair", default=None, help="Only trades in this ticker.")(func)
    return func


@click.command()
@filter_options
def stats(pair: Optional[str], session: Optional[str], weekday: Optional[str]) -> None:
    """Show the performance summary.

    \b
    Examples:
      tradelog stats
      tradelog stats --session Morning
    """
    config = require_config()
    snapshot = _load_snapshot(config, pair=pair, session=session, weekday=weekday)
    rr_policy, _ = require_analytics_settings(config)
    summary = summarize(snapshot, rr_policy=rr_policy)

    metrics_text = (
        f"[bold]Performance Summary[/bold]\n\n"
        f"Total P&L:      {format_pnl(summary.total_pnl)}\n"
        f"Total Trades:   {summary.trade_count}\n"
        f"Winning Trades: [green]{summary.win_count}[/green]\n"
        f"Losing Trades:  [red]{summary.loss_count}[/red]\n"
        f"Win Rate:       {summary.win_rate:.1f}%\n"
        f"{'─' * 30}\n"
        f"Avg P&L:        {format_pnl(summary.avg_pnl)}\n"
        f"Avg R:R:        {summary.avg_rr:.2f}\n"
        f"Best Ticker:    {summary.best_ticker or '-'}"
        f" ({format_pnl(summary.best_ticker_pnl)})\n"
        f"Weakest Ticker: {worst_ticker(snapshot) or '-'}\n"
        f"Best Weekday:   {best_weekday(snapshot) or '-'}\n"
        f"Consistency:    {consistency_score(summary)}/100"
    )

    console.print(Panel(
        metrics_text,
        title="[bold cyan]Trade Statistics[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.option("--by", "dimension", type=click.Choice(DIMENSIONS), default="pair",
              show_default=True, help="Bucket dimension.")
@filter_options
def breakdown(dimension: str, pair: Optional[str], session: Optional[str], weekday: Optional[str]) -> None:
    """Show P&L per ticker, session or weekday.

    \b
    Examples:
      tradelog breakdown --by session
      tradelog breakdown --by weekday --pair AAPL
    """
    config = require_config()
    snapshot = _load_snapshot(config, pair=pair, session=session, weekday=weekday)
    buckets = bucket_by(snapshot, dimension)

    if not buckets:
        console.print("[dim]No trades to break down.[/dim]")
        return

    table = Table(
        title=f"P&L by {dimension}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column(dimension.capitalize(), style="bold")
    table.add_column("P&L", justify="right")

    for name, value in buckets.items():
        table.add_row(name, format_pnl(value))

    console.print(table)


@click.command()
@click.option("--daily", is_flag=True, default=False, help="One point per day instead of per trade.")
@filter_options
def equity(daily: bool, pair: Optional[str], session: Optional[str], weekday: Optional[str]) -> None:
    """Show the cumulative P&L curve."""
    config = require_config()
    snapshot = _load_snapshot(config, pair=pair, session=session, weekday=weekday)
    points = equity_curve(snapshot, by_day=daily)

    if not points:
        console.print("[dim]No trades yet.[/dim]")
        return

    table = Table(
        title="Equity Curve",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Equity", justify="right")

    for i, point in enumerate(points, start=1):
        table.add_row(str(i), point.date.isoformat(), format_pnl(point.cumulative_pnl))

    console.print(table)


@click.command()
def streak() -> None:
    """Show the current and longest run of consecutive trading days.

    The current streak counts as lapsed when the last trading day was
    before yesterday.
    """
    config = require_config()
    snapshot = _load_snapshot(config)
    result = current_and_max_streak(trading_dates(snapshot), as_of=date.today())

    console.print(Panel(
        f"Current streak: [bold green]{result.current}[/bold green] day(s)\n"
        f"Longest streak: [bold]{result.max}[/bold] day(s)",
        title="[bold cyan]Trading Streak[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.option("--month", default=None, help="Month to show (YYYY-MM). Defaults to this month.")
def calendar(month: Optional[str]) -> None:
    """Show a month of trading as a calendar."""
    if month:
        try:
            year, month_number = (int(part) for part in month.split("-", 1))
            if not 1 <= month_number <= 12:
                raise ValueError(month)
        except ValueError:
            fail(f"[red]Invalid month '{month}'.[/red] Use YYYY-MM.")
    else:
        today = date.today()
        year, month_number = today.year, today.month

    config = require_config()
    snapshot = _load_snapshot(config)
    result = month_summary(snapshot, year, month_number)

    table = Table(
        title=f"{month_calendar.month_name[month_number]} {year}",
        show_header=True,
        header_style="bold cyan",
        show_lines=True,
    )
    # Sunday-first, matching the weekday buckets
    for name in WEEKDAYS:
        table.add_column(name[:3], justify="center")

    for week in month_calendar.Calendar(firstweekday=6).monthdatescalendar(year, month_number):
        cells = []
        for day in week:
            if day.month != month_number:
                cells.append("")
                continue
            key = day.isoformat()
            if key in result.pnl_by_day:
                cells.append(
                    f"{day.day}\n{format_pnl(result.pnl_by_day[key])}\n"
                    f"[dim]{result.trades_by_day[key]} trade(s)[/dim]"
                )
            else:
                cells.append(f"[dim]{day.day}[/dim]")
        table.add_row(*cells)

    console.print(table)

    lines = [
        f"Trades: {result.trade_count}   Total P&L: {format_pnl(result.total_pnl)}",
        f"Most profitable weekday: {result.most_profitable_weekday or '-'}",
    ]
    if result.best_week:
        week = result.best_week
        lines.append(
            f"Best week: {week.start.isoformat()} to {week.end.isoformat()} ({format_pnl(week.pnl)})"
        )
    console.print(Panel("\n".join(lines), title="[bold]Month Summary[/bold]", border_style="cyan"))
