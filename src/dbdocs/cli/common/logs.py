"""Logging setup for the CLI.

Core modules log through the standard `logging` module. The CLI routes
those records to stderr through Rich so they never mix with a diagram
written to stdout.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from dbdocs.cli.common.output import console


def configure_logging(verbose: bool = False) -> None:
    """Install a Rich handler on the root logger (DEBUG when verbose)."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
