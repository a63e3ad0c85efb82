"""Backup commands for tradelog CLI.

Handles exporting the journal to CSV/JSON and restoring it.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel

from tradelog.backup import export_csv, export_json, import_csv, import_json
from tradelog.cli.common import console, fail, get_data_store, require_config, require_user

FORMATS = ["csv", "json"]


def _infer_format(path: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit
    suffix = path.suffix.lower().lstrip(".")
    if suffix in FORMATS:
        return suffix
    fail(
        f"[red]Cannot tell the format of '{path.name}'.[/red]\n\n"
        "Pass [cyan]--format csv[/cyan] or [cyan]--format json[/cyan].",
    )


@click.command()
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None,
              help="Backup format. Defaults to the output file's extension, or csv.")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="File to write. Defaults to standard output.")
def export(fmt: Optional[str], output: Optional[Path]) -> None:
    """Export all trades to CSV or JSON.

    \b
    Examples:
      tradelog export -o journal.csv
      tradelog export --format json > journal.json
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    journal = store.list_trades(user_id)
    if output is None:
        writer = export_json if fmt == "json" else export_csv
        writer(journal, sys.stdout)
        return

    writer = export_json if _infer_format(output, fmt) == "json" else export_csv
    try:
        count = writer(journal, output)
    except OSError as e:
        fail(f"[red]Could not write {output}:[/red] {e}")

    console.print(f"[green]Exported {count} trades to {output}[/green]")


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None,
              help="Backup format. Defaults to the file extension.")
def import_cmd(path: Path, fmt: Optional[str]) -> None:
    """Restore trades from a CSV or JSON backup.

    Your trades whose ID already exists are overwritten. Records without a
    date, and IDs that belong to another user, are skipped.

    \b
    Examples:
      tradelog import journal.csv
      tradelog import backup.txt --format json
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)

    reader = import_json if _infer_format(path, fmt) == "json" else import_csv
    try:
        result = reader(path)
    except (OSError, ValueError) as e:
        fail(f"[red]Could not read {path}:[/red] {e}", title="Import Failed")

    written = store.upsert_trades(user_id, result.trades)

    message = f"Imported [bold]{written}[/bold] trades from [cyan]{path}[/cyan]"
    if result.skipped:
        message += f"\n[yellow]Skipped {result.skipped} unusable records.[/yellow]"
    taken = len(result.trades) - written
    if taken:
        message += f"\n[yellow]Skipped {taken} trades owned by another user.[/yellow]"
    console.print(Panel(
        message,
        title="[bold green]Import Complete[/bold green]",
        border_style="green",
    ))
