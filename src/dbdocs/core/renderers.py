"""Entity block renderers.

Each renderer turns one model object into a PlantUML `entity` block:

    <TAB>entity "name" <<stereotype>> {
    <TAB><TAB>member line
    <TAB>}

Headers and closers carry one tab, members two. Every line ends with `\\n`.
Entity names are written as-is and never schema-qualified.
"""

from __future__ import annotations

from dbdocs.core.formatters import LineFormatter, build_line_formatter
from dbdocs.core.models import (
    Column,
    DbCompositeType,
    DbEnum,
    MaterializedView,
    Table,
    View,
)

MEMBER_INDENT = "\t\t"
SEPARATOR = f"{MEMBER_INDENT}--\n"


def _header(name: str, stereotype: str | None = None) -> str:
    if stereotype:
        return f'\tentity "{name}" <<{stereotype}>> {{\n'
    return f'\tentity "{name}" {{\n'


def _closer() -> str:
    return "\t}\n"


class EntityRenderer:
    """
    Renders a table.

    Primary key columns come first, in primary key order, followed by a
    `--` separator and the remaining columns in ordinal order. The separator
    only appears when both groups are non-empty.
    """

    def __init__(self, line_formatter: LineFormatter | None = None):
        self.line_formatter = line_formatter or build_line_formatter()

    def _line(self, table: Table, column: Column) -> str:
        text = self.line_formatter.format(column, "", primary_key=table.primary_key)
        return f"{MEMBER_INDENT}{text}\n"

    def render(self, table: Table) -> str:
        """Return the entity block for `table`."""
        stereotype = (
            f"partitioned: {table.partition_strategy}"
            if table.partition_strategy
            else None
        )
        parts = [_header(table.name, stereotype)]

        pk_names = table.primary_key.column_names if table.primary_key else ()
        by_name = {c.name: c for c in table.columns}
        pk_columns = [by_name[n] for n in pk_names if n in by_name]
        other_columns = [c for c in table.columns if c.name not in pk_names]

        parts.extend(self._line(table, c) for c in pk_columns)
        if pk_columns and other_columns:
            parts.append(SEPARATOR)
        parts.extend(self._line(table, c) for c in other_columns)
        parts.append(_closer())

        if table.partition_names:
            parts.append(f"\t' Partitions: {', '.join(table.partition_names)}\n")
        return "".join(parts)


class _ColumnListRenderer:
    """Flat column list with a fixed stereotype; no key handling."""

    stereotype = ""

    def __init__(self, line_formatter: LineFormatter | None = None):
        self.line_formatter = line_formatter or build_line_formatter(
            bold_primary_keys=False
        )

    def _render(self, name: str, columns: tuple[Column, ...]) -> str:
        parts = [_header(name, self.stereotype)]
        for column in columns:
            parts.append(f"{MEMBER_INDENT}{self.line_formatter.format(column, '')}\n")
        parts.append(_closer())
        return "".join(parts)


class ViewRenderer(_ColumnListRenderer):
    """Renders a view as a `<<view>>` entity."""

    stereotype = "view"

    def render(self, view: View) -> str:
        """Return the entity block for `view`."""
        return self._render(view.name, view.columns)


class MaterializedViewRenderer(_ColumnListRenderer):
    """Renders a materialized view as a `<<materialized_view>>` entity."""

    stereotype = "materialized_view"

    def render(self, view: MaterializedView) -> str:
        """Return the entity block for `view`."""
        return self._render(view.name, view.columns)


class CompositeTypeRenderer:
    """Renders a composite type, one `field : type` line per field."""

    def render(self, composite: DbCompositeType) -> str:
        parts = [_header(composite.type_name, "composite")]
        parts.extend(
            f"{MEMBER_INDENT}{f.name} : {f.type}\n" for f in composite.fields
        )
        parts.append(_closer())
        return "".join(parts)


class EnumRenderer:
    """Renders an enum, one label per line in catalog order."""

    def render(self, enum: DbEnum) -> str:
        parts = [_header(enum.enum_name, "enum")]
        parts.extend(f"{MEMBER_INDENT}{value}\n" for value in enum.values)
        parts.append(_closer())
        return "".join(parts)
