"""Main CLI entry point for tradelog.

This module provides the main click group and lazy loading
for heavy imports to improve startup time.
"""

import logging

import click


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    This improves CLI startup time by only importing
    command modules when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        # Commands whose name is a Python keyword are exposed under another attribute
        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    # Setup
    "init": "tradelog.cli.account",
    "whoami": "tradelog.cli.account",
    # Journal
    "add": "tradelog.cli.journal",
    "edit": "tradelog.cli.journal",
    "delete": "tradelog.cli.journal",
    "trades": "tradelog.cli.journal",
    # Analytics
    "stats": "tradelog.cli.analytics",
    "breakdown": "tradelog.cli.analytics",
    "equity": "tradelog.cli.analytics",
    "streak": "tradelog.cli.analytics",
    "calendar": "tradelog.cli.analytics",
    # Goals
    "goal": "tradelog.cli.goals",
    # Backup
    "export": "tradelog.cli.backup",
    "import": "tradelog.cli.backup",
    # AI coaching
    "reflect": "tradelog.cli.coach",
    "insights": "tradelog.cli.coach",
    "coach": "tradelog.cli.coach",
    # Entitlement
    "subscription": "tradelog.cli.subscription",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradelog")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """tradelog - personal trading journal and performance analytics.

    Log trades, review statistics, streaks and calendars, track goals,
    and get AI coaching on your journal.

    \b
    Quick Start:
      tradelog init --user-id me       # Create a config file
      tradelog add AAPL --pnl 120.5    # Log a trade
      tradelog stats                   # Performance summary
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
