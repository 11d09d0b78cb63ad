"""Exit handling utilities for the CLI.

Exit codes:
    0: success
    1: invalid configuration or arguments
    2: database or catalog error
    3: unexpected error (including output I/O)
"""

from typing import NoReturn

import typer

from dbdocs.cli.common.output import out

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_DATABASE = 2
EXIT_UNEXPECTED = 3


def die(msg: str, code: int = EXIT_CONFIG) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = EXIT_OK) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_CONFIG) -> NoReturn:
    """
    Print an error message and exit with a given code, chaining `exc`.

    Exists to satisfy pylint W0707 and to standardize error exits.
    """
    out.error(message)
    raise typer.Exit(code) from exc
