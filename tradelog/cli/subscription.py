"""Subscription commands for tradelog CLI."""

from datetime import date
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradelog.cli.common import console, fail, get_data_store, require_config, require_user
from tradelog.config import get_user
from tradelog.models.profile import SUBSCRIPTION_STATUSES


@click.group()
def subscription() -> None:
    """Show or record subscription status."""


@subscription.command("status")
def status() -> None:
    """Show the subscription status that gates analytics."""
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    profile = store.get_profile(user_id) or store.ensure_profile(user_id, get_user(config)[1])
    active = profile.is_active(date.today())
    enforced = config.get("subscription", {}).get("enforce", False)

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("User", profile.user_id)
    table.add_row("Status", profile.subscription_status)
    table.add_row("Subscription ID", profile.subscription_id or "-")
    table.add_row(
        "Period ends",
        profile.current_period_end.isoformat() if profile.current_period_end else "-",
    )
    table.add_row("Entitled", "[green]yes[/green]" if active else "[red]no[/red]")
    table.add_row("Enforced", "yes" if enforced else "no")

    console.print(Panel(
        table,
        title="[bold]Subscription[/bold]",
        border_style="green" if active else "yellow",
    ))


@subscription.command("set")
@click.option("--status", "new_status", type=click.Choice(SUBSCRIPTION_STATUSES), required=True,
              help="New subscription status.")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Last day of the paid period (YYYY-MM-DD).")
@click.option("--subscription-id", default=None, help="Billing subscription ID.")
def set_status(new_status: str, until, subscription_id: Optional[str]) -> None:
    """Record the subscription status reported by billing.

    \b
    Examples:
      tradelog subscription set --status active --until 2025-01-31
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    try:
        profile = store.set_subscription(
            user_id,
            new_status,
            subscription_id=subscription_id,
            current_period_end=until.date() if until else None,
        )
    except ValueError as e:
        fail(f"[red]{e}[/red]")

    console.print(f"[green]Subscription for {profile.user_id} is now {profile.subscription_status}.[/green]")
