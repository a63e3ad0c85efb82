"""Account commands for tradelog CLI.

Handles configuration setup and showing the signed-in user.
"""

import click
from rich.panel import Panel
from rich.table import Table

from tradelog.cli.common import console, get_data_store, require_config
from tradelog.config import (
    create_template_config,
    get_config_path,
    get_db_path,
    get_user,
    validate_config,
)


@click.command()
@click.option("--user-id", default="", help="Your user ID.")
@click.option("--email", default="", help="Your email address.")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config.")
def init(user_id: str, email: str, force: bool) -> None:
    """Create a configuration file and the journal database.

    \b
    Examples:
      tradelog init --user-id me --email me@example.com
    """
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print(Panel(
            f"Config already exists at [cyan]{config_path}[/cyan].\n\n"
            "Use [cyan]--force[/cyan] to overwrite it.",
            title="[bold yellow]Already Initialized[/bold yellow]",
            border_style="yellow",
        ))
        return

    create_template_config(user_id=user_id, email=email)
    config = require_config()
    store = get_data_store(config)

    uid, mail = get_user(config)
    if uid:
        store.ensure_profile(uid, mail)

    missing = validate_config(config)
    message = f"Config written to [cyan]{config_path}[/cyan]\nDatabase at [cyan]{store.db_path}[/cyan]"
    if missing:
        message += "\n\n[yellow]Still to fill in:[/yellow]\n" + "\n".join(f"  - {m}" for m in missing)

    console.print(Panel(
        message,
        title="[bold green]tradelog ready[/bold green]",
        border_style="green",
    ))


@click.command()
def whoami() -> None:
    """Show the configured user, database and subscription status."""
    config = require_config()
    user_id, email = get_user(config)

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("User", user_id or "[red]not set[/red]")
    table.add_row("Email", email or "-")
    table.add_row("Config", str(get_config_path()))
    table.add_row("Database", str(get_db_path(config)))

    if user_id:
        store = get_data_store(config)
        active = store.is_subscription_active(user_id)
        table.add_row("Trades", str(len(store.list_trades(user_id))))
        table.add_row(
            "Subscription",
            "[green]active[/green]" if active else "[yellow]inactive[/yellow]",
        )

    problems = validate_config(config)
    if problems:
        table.add_row("Config issues", ", ".join(problems))

    console.print(Panel(table, title="[bold]Account[/bold]", border_style="cyan"))
