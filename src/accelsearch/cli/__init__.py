"""Command-line interface."""

from accelsearch.cli.accelsearch_cli import accelsearch_command, main

__all__ = ["accelsearch_command", "main"]
