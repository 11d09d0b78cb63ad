"""Composable line and relationship formatters.

Formatters build one line of diagram text in small steps. Each formatter
receives the text produced so far and returns the next version of it, so a
chain such as "base text -> bold primary key -> constraint tags" is
expressed as a `CompositeLineFormatter` over three simple pieces.

The same idea applies to relationship lines: a default formatter writes the
`target -- source` pair, a cardinality formatter replaces the connector and
a referential action formatter appends the ON DELETE / ON UPDATE label.

Formatters are stateless and side-effect-free.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from dbdocs.core.models import (
    Column,
    ForeignKey,
    PrimaryKey,
    ReferentialAction,
    sort_constraints,
)

PLAIN_CONNECTOR = " -- "
OPTIONAL_MANY = " ||--o{ "
MANDATORY_MANY = " ||--|{ "


class LineFormatter(ABC):
    """Abstract base class for column line formatters."""

    @abstractmethod
    def format(
        self, column: Column, current: str, *, primary_key: PrimaryKey | None = None
    ) -> str:
        """
        Return the next version of a column line.

        Args:
            column: Column being rendered.
            current: Line text produced by earlier formatters.
            primary_key: Primary key of the owning table, if any.
        """
        ...


class DefaultLineFormatter(LineFormatter):
    """Writes `name: type`, or `name: type(len)` when a length is known."""

    def format(
        self, column: Column, current: str, *, primary_key: PrimaryKey | None = None
    ) -> str:
        if column.maximum_length > 0:
            return f"{current}{column.name}: {column.data_type}({column.maximum_length})"
        return f"{current}{column.name}: {column.data_type}"


class PrimaryKeyLineFormatter(LineFormatter):
    """Wraps primary key columns in bold markup."""

    def format(
        self, column: Column, current: str, *, primary_key: PrimaryKey | None = None
    ) -> str:
        if primary_key is not None and column.name in primary_key.column_names:
            return f"**{current}**"
        return current


class ConstraintLineFormatter(LineFormatter):
    """Appends constraint tags, e.g. ` <<FK,NULLABLE>>`, in priority order."""

    def format(
        self, column: Column, current: str, *, primary_key: PrimaryKey | None = None
    ) -> str:
        if not column.constraints:
            return current
        tags = ",".join(c.value for c in sort_constraints(column.constraints))
        return f"{current} <<{tags}>>"


class CompositeLineFormatter(LineFormatter):
    """Runs child formatters in order, feeding each the previous output."""

    def __init__(self, formatters: Sequence[LineFormatter]):
        self.formatters = list(formatters)

    def format(
        self, column: Column, current: str, *, primary_key: PrimaryKey | None = None
    ) -> str:
        for formatter in self.formatters:
            current = formatter.format(column, current, primary_key=primary_key)
        return current


def build_line_formatter(*, bold_primary_keys: bool = True) -> LineFormatter:
    """
    Build the standard column line formatter chain.

    Args:
        bold_primary_keys: Set to False for relations without keys (views).
    """
    chain: list[LineFormatter] = [DefaultLineFormatter()]
    if bold_primary_keys:
        chain.append(PrimaryKeyLineFormatter())
    chain.append(ConstraintLineFormatter())
    return CompositeLineFormatter(chain)


class MultiplicityFormatter(ABC):
    """Abstract base class for relationship line formatters."""

    @abstractmethod
    def format(self, fk: ForeignKey, schema_name: str, current: str) -> str:
        """
        Return the next version of a relationship line.

        Args:
            fk: Foreign key being rendered.
            schema_name: Schema that owns the source table.
            current: Line text produced by earlier formatters.
        """
        ...


class DefaultMultiplicityFormatter(MultiplicityFormatter):
    """
    Writes `target -- source`.

    Both ends are schema-qualified when the referenced table lives in a
    different schema than the source table.
    """

    def format(self, fk: ForeignKey, schema_name: str, current: str) -> str:
        if fk.referenced_schema and fk.referenced_schema != schema_name:
            target = f"{fk.referenced_schema}.{fk.target_table}"
            source = f"{schema_name}.{fk.source_table}"
        else:
            target = fk.target_table
            source = fk.source_table
        return f"{current}{target}{PLAIN_CONNECTOR}{source}"


class CardinalityFormatter(MultiplicityFormatter):
    """Replaces the plain connector with crow's foot notation."""

    def format(self, fk: ForeignKey, schema_name: str, current: str) -> str:
        connector = OPTIONAL_MANY if fk.nullable else MANDATORY_MANY
        return current.replace(PLAIN_CONNECTOR, connector, 1)


class ReferentialActionFormatter(MultiplicityFormatter):
    """Appends ` : "ON DELETE ... / ON UPDATE ..."` for non-default actions."""

    def format(self, fk: ForeignKey, schema_name: str, current: str) -> str:
        parts: list[str] = []
        if fk.on_delete is not ReferentialAction.NO_ACTION:
            parts.append(f"ON DELETE {fk.on_delete.display_name}")
        if fk.on_update is not ReferentialAction.NO_ACTION:
            parts.append(f"ON UPDATE {fk.on_update.display_name}")
        if not parts:
            return current
        return f'{current} : "{" / ".join(parts)}"'


class CompositeMultiplicityFormatter(MultiplicityFormatter):
    """Runs child formatters in order, feeding each the previous output."""

    def __init__(self, formatters: Sequence[MultiplicityFormatter]):
        self.formatters = list(formatters)

    def format(self, fk: ForeignKey, schema_name: str, current: str) -> str:
        for formatter in self.formatters:
            current = formatter.format(fk, schema_name, current)
        return current


def build_multiplicity_formatter() -> MultiplicityFormatter:
    """Build the standard relationship line formatter chain."""
    return CompositeMultiplicityFormatter(
        [
            DefaultMultiplicityFormatter(),
            CardinalityFormatter(),
            ReferentialActionFormatter(),
        ]
    )
