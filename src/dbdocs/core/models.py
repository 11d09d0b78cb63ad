"""Core domain models for database schema documentation.

This module defines the immutable value objects that flow through the
documenter: columns, keys, tables, views, user-defined types and the
schema that groups them. Models are free of any database driver or
rendering concerns; catalog readers produce them and renderers consume them.

Collections are stored as tuples so that a built schema can be shared and
rendered any number of times without risk of mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable

from dbdocs.core.errors import ValidationError
from dbdocs.core.logutils import sanitize_for_log

logger = logging.getLogger(__name__)


class Constraint(str, Enum):
    """
    Column-level constraint tags shown in the diagram.

    Values:
        FK: Column participates in a foreign key.
        UNIQUE: Column is covered by a unique constraint.
        AUTO_INCREMENT: Column is fed by a sequence.
        DEFAULT: Column has a default expression.
        CHECK: Column is covered by a check constraint.
        NULLABLE: Column accepts NULL.
        GENERATED: Column is a generated (computed) column.
    """

    FK = "FK"
    UNIQUE = "UNIQUE"
    AUTO_INCREMENT = "AUTO_INCREMENT"
    DEFAULT = "DEFAULT"
    CHECK = "CHECK"
    NULLABLE = "NULLABLE"
    GENERATED = "GENERATED"


# Display order of constraint tags; lower comes first.
CONSTRAINT_PRIORITY: dict[Constraint, int] = {
    Constraint.FK: 0,
    Constraint.UNIQUE: 1,
    Constraint.AUTO_INCREMENT: 2,
    Constraint.DEFAULT: 3,
    Constraint.CHECK: 4,
    Constraint.NULLABLE: 5,
    Constraint.GENERATED: 6,
}


def sort_constraints(constraints: Iterable[Constraint]) -> tuple[Constraint, ...]:
    """Return unique constraints ordered by display priority."""
    return tuple(sorted(set(constraints), key=CONSTRAINT_PRIORITY.__getitem__))


class ReferentialAction(str, Enum):
    """Action taken on a referencing row when the referenced row changes."""

    NO_ACTION = "NO_ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET_NULL"
    SET_DEFAULT = "SET_DEFAULT"

    @property
    def display_name(self) -> str:
        """Return the SQL spelling, e.g. `SET NULL`."""
        return self.value.replace("_", " ")

    @classmethod
    def from_rule(cls, rule: str | None) -> ReferentialAction:
        """
        Decode a catalog delete/update rule such as `SET NULL`.

        Missing values mean NO ACTION. Unknown values are logged and also
        treated as NO ACTION so that one odd rule does not abort a build.
        """
        if not rule:
            return cls.NO_ACTION
        key = rule.strip().upper().replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            logger.warning(
                "Unknown referential action %r, using NO ACTION",
                sanitize_for_log(rule),
            )
            return cls.NO_ACTION


@dataclass(frozen=True)
class Column:
    """
    A column of a table, view or materialized view.

    Attributes:
        name: Column name.
        ordinal_position: 1-based position within the relation.
        data_type: SQL type name, or `USER-DEFINED` until resolved.
        nullable: Whether the column accepts NULL.
        maximum_length: Character length limit; 0 when not applicable.
        constraints: Constraint tags attached to the column.
    """

    name: str
    ordinal_position: int
    data_type: str
    nullable: bool = True
    maximum_length: int = 0
    constraints: frozenset[Constraint] = field(default_factory=frozenset)

    def with_data_type(self, data_type: str) -> Column:
        """Return a copy carrying a different data type."""
        return replace(self, data_type=data_type)

    def with_constraint(self, constraint: Constraint) -> Column:
        """Return a copy with `constraint` added (no-op if already present)."""
        if constraint in self.constraints:
            return self
        return replace(self, constraints=self.constraints | {constraint})


@dataclass(frozen=True)
class PrimaryKey:
    """A primary key and its column names in key order."""

    constraint_name: str
    column_names: tuple[str, ...]


@dataclass(frozen=True)
class ForeignKey:
    """
    A single-column foreign key reference.

    Attributes:
        name: Constraint name.
        source_table: Referencing table.
        source_column: Referencing column.
        target_table: Referenced table.
        target_column: Referenced column.
        referenced_schema: Schema holding the referenced table.
        nullable: Mirrors the nullability of the source column.
        on_delete: Referential action on delete.
        on_update: Referential action on update.
    """

    name: str
    source_table: str
    source_column: str
    target_table: str
    target_column: str
    referenced_schema: str
    nullable: bool = False
    on_delete: ReferentialAction = ReferentialAction.NO_ACTION
    on_update: ReferentialAction = ReferentialAction.NO_ACTION


@dataclass(frozen=True)
class Table:
    """
    A base table with its keys.

    Attributes:
        name: Table name.
        columns: Columns in ordinal order.
        primary_key: Primary key, or None for heap tables.
        foreign_keys: Outgoing foreign keys in catalog order.
        partition_strategy: Partition key definition (e.g. `RANGE (day)`)
            for partitioned parents, otherwise None.
        partition_names: Names of child partitions.
    """

    name: str
    columns: tuple[Column, ...] = ()
    primary_key: PrimaryKey | None = None
    foreign_keys: tuple[ForeignKey, ...] = ()
    partition_strategy: str | None = None
    partition_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.primary_key is None:
            return
        known = {c.name for c in self.columns}
        missing = [n for n in self.primary_key.column_names if n not in known]
        if missing:
            raise ValidationError(
                f"Primary key {self.primary_key.constraint_name!r} on table "
                f"{self.name!r} references unknown columns: {', '.join(missing)}"
            )


@dataclass(frozen=True)
class View:
    """A view and its columns."""

    name: str
    columns: tuple[Column, ...] = ()


@dataclass(frozen=True)
class MaterializedView:
    """A materialized view and its columns."""

    name: str
    columns: tuple[Column, ...] = ()


@dataclass(frozen=True)
class DbEnum:
    """An enumerated type with its labels in catalog sort order."""

    schema_name: str
    enum_name: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompositeField:
    """One attribute of a composite type."""

    name: str
    type: str
    position: int


@dataclass(frozen=True)
class DbCompositeType:
    """A composite (row) type with its fields in declared order."""

    schema_name: str
    type_name: str
    fields: tuple[CompositeField, ...] = ()


@dataclass(frozen=True)
class ColumnKey:
    """Identifies a column within a schema by table and column name."""

    table_name: str
    column_name: str


@dataclass(frozen=True)
class EnumKey:
    """Identifies an enum by schema and type name."""

    schema: str
    name: str


@dataclass(frozen=True)
class UdtReference:
    """The user-defined type a column is declared with."""

    schema: str
    type_name: str


def _check_unique(kind: str, schema: str, names: Iterable[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValidationError(f"Duplicate {kind} {name!r} in schema {schema!r}")
        seen.add(name)


@dataclass(frozen=True)
class Schema:
    """
    A fully built schema, ready to render.

    Entity names are unique per kind (tables, views, materialized views,
    enums, composite types) within the schema.
    """

    name: str
    tables: tuple[Table, ...] = ()
    views: tuple[View, ...] = ()
    materialized_views: tuple[MaterializedView, ...] = ()
    enums: tuple[DbEnum, ...] = ()
    composite_types: tuple[DbCompositeType, ...] = ()

    def __post_init__(self) -> None:
        _check_unique("table", self.name, (t.name for t in self.tables))
        _check_unique("view", self.name, (v.name for v in self.views))
        _check_unique(
            "materialized view", self.name, (m.name for m in self.materialized_views)
        )
        _check_unique("enum", self.name, (e.enum_name for e in self.enums))
        _check_unique(
            "composite type", self.name, (c.type_name for c in self.composite_types)
        )
