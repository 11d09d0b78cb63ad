"""Output formatting utilities for the CLI.

All human-facing output goes to stderr so that a diagram written to stdout
can be piped or redirected untouched.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from dbdocs.cli.common.tui_style import (
    QUESTIONARY_STYLE_INPUT,
    QUESTIONARY_STYLE_SELECT,
)

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME, stderr=True)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "checked_icon", "unchecked_icon"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be DBDOCS consistent."""
        return f"[DBDOCS] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def select_many(self, message: str, choices: list[str]) -> list[str]:
        """
        Prompt the user to select multiple items from a list.

        Uses questionary checkbox UI to keep the UX consistent.
        Returns a list of selected values, in choice order.
        """
        if not choices:
            return []

        prompt = self._q_try(
            questionary.checkbox,
            self._q(message),
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
            qmark="✦",
            instruction="Use ↑/↓, space, a (all), i (invert), enter",
            pointer="❯",
            checked_icon="▣",
            unchecked_icon="▢",
        )
        picked = prompt.ask()
        return list(picked or [])

    def password(self, message: str) -> str:
        """Prompt for a secret without echoing it. Returns '' if cancelled."""
        prompt = questionary.password(
            self._q(message),
            style=QUESTIONARY_STYLE_INPUT,
            qmark="✦",
        )
        return prompt.ask() or ""

    def schemas_table(self, schemas: list[str], title: str = "Schemas") -> None:
        """Render a table of schema names."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")

        for s in schemas:
            t.add_row(str(s))

        console.print(t)

    def diagram_summary_table(
        self, schemas: Iterable[Any], title: str = "Documented schemas"
    ) -> None:
        """
        Render per-schema object counts.

        Expects objects shaped like dbdocs.core.models.Schema.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok", no_wrap=True)
        t.add_column("Tables", justify="right")
        t.add_column("Views", justify="right")
        t.add_column("Mat. views", justify="right")
        t.add_column("Enums", justify="right")
        t.add_column("Composites", justify="right")
        t.add_column("Relationships", justify="right", style="meta")

        for s in schemas:
            relationships = sum(len(tb.foreign_keys) for tb in s.tables)
            t.add_row(
                s.name,
                str(len(s.tables)),
                str(len(s.views)),
                str(len(s.materialized_views)),
                str(len(s.enums)),
                str(len(s.composite_types)),
                str(relationships),
            )

        console.print(t)


out = Out()
