"""Catalog reader interface and raw row shapes.

A catalog reader is the only component that talks SQL. It returns raw
rows and models exactly as the database reports them: column data types may
still carry the `USER-DEFINED` marker, foreign keys have not yet been told
whether their source column is nullable, and primary keys arrive as one row
per key column. Resolution and enrichment happen in the builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from dbdocs.core.models import (
    Column,
    ColumnKey,
    CompositeField,
    DbCompositeType,
    ForeignKey,
    UdtReference,
)


@dataclass(frozen=True)
class TableRow:
    """A base table as listed by the catalog."""

    name: str
    partition_strategy: str | None = None


@dataclass(frozen=True)
class PrimaryKeyRow:
    """One column of a primary key, in key order."""

    constraint_name: str
    column_name: str


@dataclass(frozen=True)
class EnumRow:
    """An enum type as listed by the catalog (labels are fetched separately)."""

    schema_name: str
    enum_name: str


@dataclass(frozen=True)
class CompositeFieldRow:
    """One attribute of a composite type, as returned by the catalog."""

    schema_name: str
    type_name: str
    field_name: str | None
    field_type: str | None
    position: int | None


class CatalogReader(Protocol):
    """Interface for reading schema metadata from a database catalog."""

    def list_schemas(self) -> list[str]:
        """Return user schema names."""
        ...

    def list_tables(self, schema: str) -> list[TableRow]:
        """Return base tables (partition children excluded)."""
        ...

    def list_columns(self, schema: str, table: str) -> list[Column]:
        """Return raw columns of a table or view in ordinal order."""
        ...

    def list_primary_key_rows(self, schema: str, table: str) -> list[PrimaryKeyRow]:
        """Return primary key rows in key order (empty if no key)."""
        ...

    def list_foreign_keys(self, schema: str, table: str) -> list[ForeignKey]:
        """Return raw outgoing foreign keys of a table."""
        ...

    def list_enums(self, schema: str) -> list[EnumRow]:
        """Return enum types declared in the schema."""
        ...

    def list_enum_values(self, schema: str, enum_name: str) -> list[str]:
        """Return enum labels in sort order."""
        ...

    def list_composite_types(self, schema: str) -> list[DbCompositeType]:
        """Return standalone composite types declared in the schema."""
        ...

    def list_views(self, schema: str) -> list[str]:
        """Return view names."""
        ...

    def list_materialized_views(self, schema: str) -> list[str]:
        """Return materialized view names."""
        ...

    def list_materialized_view_columns(self, schema: str, name: str) -> list[Column]:
        """Return raw columns of a materialized view."""
        ...

    def get_column_udt_mappings(self, schema: str) -> dict[ColumnKey, UdtReference]:
        """Return the user-defined type of every `USER-DEFINED` column."""
        ...

    def get_partition_children(self, schema: str) -> dict[str, list[str]]:
        """Return partition names keyed by partitioned parent table."""
        ...


class Connection(Protocol):
    """The part of a DB-API connection the builder relies on."""

    def close(self) -> None:
        """Release the connection."""
        ...


class ConnectionFactory(Protocol):
    """Opens a fresh connection for one schema build."""

    def __call__(self) -> Connection:
        ...


class ReaderFactory(Protocol):
    """Creates a catalog reader bound to an open connection."""

    def __call__(self, connection: Connection) -> CatalogReader:
        ...


def group_composite_fields(rows: Iterable[CompositeFieldRow]) -> list[DbCompositeType]:
    """
    Fold per-attribute rows into composite types.

    Rows must arrive ordered by type name then attribute position. A type
    without attributes shows up as a single row with no field name and
    yields a composite type with no fields.
    """
    grouped: dict[tuple[str, str], list[CompositeField]] = {}
    for row in rows:
        fields = grouped.setdefault((row.schema_name, row.type_name), [])
        if row.field_name is None:
            continue
        fields.append(
            CompositeField(
                name=row.field_name,
                type=row.field_type or "",
                position=row.position or len(fields) + 1,
            )
        )
    return [
        DbCompositeType(schema_name=schema, type_name=name, fields=tuple(fields))
        for (schema, name), fields in grouped.items()
    ]
