"""Helpers shared by tradelog CLI commands."""

from datetime import date
from typing import NoReturn, Optional

from rich.console import Console
from rich.panel import Panel

from tradelog.analytics import RRPolicy
from tradelog.config import (
    DEFAULT_INSIGHT_WINDOW,
    get_config,
    get_config_path,
    get_db_path,
    get_user,
    validate_config,
)

console = Console()


def fail(message: str, title: str = "Error") -> NoReturn:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        message,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def require_config() -> dict:
    """Load configuration or exit with a hint to run ``tradelog init``."""
    config = get_config()

    if config is None:
        fail(
            "[red]Configuration not found.[/red]\n\n"
            "Run [cyan]tradelog init[/cyan] to create a config file."
        )
    return config


def require_user(config: dict) -> str:
    """Return the signed-in user's ID or exit."""
    user_id, _ = get_user(config)
    if not user_id:
        fail(
            "[red]No user configured.[/red]\n\n"
            f"Set [cyan]user.id[/cyan] in [cyan]{get_config_path()}[/cyan].",
            title="Not Signed In",
        )
    return user_id


def require_analytics_settings(config: dict) -> tuple[RRPolicy, int]:
    """Return the configured R:R policy and insight window, or exit.

    Identity problems are left to :func:`require_user`.
    """
    problems = [p for p in validate_config(config) if p.startswith("analytics.")]
    if problems:
        fail(
            "[red]Invalid configuration.[/red]\n\n"
            f"Fix these keys in [cyan]{get_config_path()}[/cyan]:\n"
            + "\n".join(f"  - {p}" for p in problems),
            title="Configuration Error",
        )
    analytics = config.get("analytics", {})
    return (
        RRPolicy(analytics.get("rr_policy", RRPolicy.DEFINED_ONLY.value)),
        analytics.get("insight_window", DEFAULT_INSIGHT_WINDOW),
    )


def get_data_store(config: Optional[dict] = None):
    """Get the data store instance."""
    from tradelog.db.store import DataStore

    return DataStore(get_db_path(config))


def require_subscription(config: dict, store, user_id: str) -> None:
    """Exit unless the user is entitled to analytics views.

    The check only applies when ``[subscription] enforce`` is true.
    """
    if not config.get("subscription", {}).get("enforce", False):
        return
    if not store.is_subscription_active(user_id, today=date.today()):
        fail(
            "[red]An active subscription is required for analytics.[/red]\n\n"
            "Check your status with [cyan]tradelog subscription status[/cyan].",
            title="Subscription Required",
        )


def format_pnl(value: float) -> str:
    """Colour and sign a P&L value for rich output."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else "-"
    return f"[{color}]{sign}${abs(value):,.2f}[/{color}]"
