"""Goal commands for tradelog CLI."""

from typing import Optional

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from tradelog.analytics import goal_stats
from tradelog.cli.common import console, fail, get_data_store, require_config, require_user
from tradelog.db.store import GoalNotFoundError
from tradelog.models import Goal


@click.group()
def goal() -> None:
    """Track personal trading goals."""


@goal.command("add")
@click.argument("title")
@click.option("--description", "-d", default=None, help="Goal details.")
@click.option("--deadline", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Target date (YYYY-MM-DD).")
@click.option("--progress", type=int, default=0, help="Starting progress percentage.")
def add_goal(title: str, description: Optional[str], deadline, progress: int) -> None:
    """Add a goal."""
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    try:
        new_goal = Goal(
            title=title,
            description=description,
            deadline=deadline.date() if deadline else None,
            progress=progress,
        )
    except ValidationError as e:
        fail(f"[red]Invalid goal:[/red] {e.errors()[0]['msg']}")

    stored = store.add_goal(new_goal, user_id=user_id)
    console.print(f"[green]Added goal #{stored.id}: {stored.title}[/green]")


@goal.command("list")
@click.option("--sort", "sort_by", type=click.Choice(["deadline", "progress"]),
              default="deadline", show_default=True, help="Sort order.")
def list_goals(sort_by: str) -> None:
    """List goals with progress."""
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    goals = store.list_goals(user_id, sort_by=sort_by)
    if not goals:
        console.print(Panel(
            "[dim]No goals yet. Add one with[/dim] [cyan]tradelog goal add TITLE[/cyan]",
            title="[bold]Goals[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Goals", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Goal", style="bold")
    table.add_column("Deadline")
    table.add_column("Progress", justify="right")

    for item in goals:
        bar = "█" * (item.progress // 10) + "░" * (10 - item.progress // 10)
        color = "green" if item.completed else "cyan"
        table.add_row(
            str(item.id),
            item.title + (f"\n[dim]{item.description}[/dim]" if item.description else ""),
            item.deadline.isoformat() if item.deadline else "No deadline",
            f"[{color}]{bar} {item.progress}%[/{color}]",
        )

    console.print(table)

    totals = goal_stats(goals)
    console.print(
        f"\n[bold]Total:[/bold] {totals['total']}   "
        f"[bold]Completed:[/bold] {totals['completed']}   "
        f"[bold]Avg progress:[/bold] {totals['avg_progress']}%"
    )


@goal.command("progress")
@click.argument("goal_id", type=int)
@click.argument("value")
def set_progress(goal_id: int, value: str) -> None:
    """Set a goal's progress.

    VALUE is a percentage, or +N to add N points.

    \b
    Examples:
      tradelog goal progress 3 60
      tradelog goal progress 3 +10
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    current = next((g for g in store.list_goals(user_id) if g.id == goal_id), None)
    if current is None:
        fail(f"[red]Goal #{goal_id} not found.[/red]", title="Not Found")

    try:
        progress = current.progress + int(value[1:]) if value.startswith("+") else int(value)
    except ValueError:
        fail(f"[red]Invalid progress '{value}'.[/red]")

    try:
        updated = store.update_goal_progress(goal_id, progress)
    except GoalNotFoundError:
        fail(f"[red]Goal #{goal_id} not found.[/red]", title="Not Found")

    if updated.completed:
        console.print(f"[bold green]Goal #{goal_id} completed![/bold green]")
    else:
        console.print(f"[green]Goal #{goal_id} at {updated.progress}%[/green]")


@goal.command("delete")
@click.argument("goal_id", type=int)
def delete_goal(goal_id: int) -> None:
    """Delete a goal."""
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    if not any(g.id == goal_id for g in store.list_goals(user_id)):
        fail(f"[red]Goal #{goal_id} not found.[/red]", title="Not Found")

    store.delete_goal(goal_id)
    console.print(f"[green]Deleted goal #{goal_id}.[/green]")
