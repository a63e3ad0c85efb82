"""CLI commands for tradelog.

This package provides the command-line interface for tradelog,
including setup, journaling, analytics, goals, backups and coaching.
"""

from tradelog.cli.main import cli, main

__all__ = ["cli", "main"]
