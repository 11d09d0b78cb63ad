"""Catalog reader over the standard `information_schema` views.

This reader only relies on the SQL-standard catalog, so it documents
tables, columns, keys and views on any engine that exposes it. Engine
specific objects (enums, composite types, materialized views, partitions)
are reported as empty; dialect readers subclass this one to add them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import psycopg2
from psycopg2.extras import RealDictCursor

from dbdocs.core.catalog import (
    Connection,
    EnumRow,
    PrimaryKeyRow,
    TableRow,
)
from dbdocs.core.errors import CatalogError
from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import (
    Column,
    ColumnKey,
    Constraint,
    DbCompositeType,
    ForeignKey,
    ReferentialAction,
    UdtReference,
)

logger = logging.getLogger(__name__)

SCHEMAS_QUERY = """
    SELECT schema_name
    FROM information_schema.schemata
    WHERE schema_name NOT IN ('information_schema', 'pg_catalog', 'pg_toast')
      AND schema_name NOT LIKE 'pg_temp_%%'
      AND schema_name NOT LIKE 'pg_toast_temp_%%'
    ORDER BY schema_name;
"""

TABLES_QUERY = """
    SELECT
      table_name,
      NULL AS partition_key
    FROM information_schema.tables
    WHERE table_schema = %s
      AND table_type = 'BASE TABLE'
    ORDER BY table_name;
"""

COLUMNS_QUERY = """
    SELECT
      c.column_name,
      c.ordinal_position,
      c.is_nullable,
      c.data_type,
      c.character_maximum_length,
      c.numeric_precision,
      c.numeric_scale,
      c.column_default,
      c.is_generated,
      CASE WHEN EXISTS (
          SELECT 1
          FROM information_schema.key_column_usage kcu2
          JOIN information_schema.table_constraints tc2
            ON tc2.constraint_name = kcu2.constraint_name
           AND tc2.table_schema = kcu2.table_schema
           AND tc2.constraint_type = 'UNIQUE'
          WHERE kcu2.table_schema = c.table_schema
            AND kcu2.table_name = c.table_name
            AND kcu2.column_name = c.column_name
      ) THEN true ELSE false END AS is_unique,
      CASE WHEN EXISTS (
          SELECT 1
          FROM information_schema.constraint_column_usage ccu2
          JOIN information_schema.check_constraints cc2
            ON cc2.constraint_name = ccu2.constraint_name
          JOIN information_schema.table_constraints tc2
            ON tc2.constraint_name = cc2.constraint_name
           AND tc2.constraint_type = 'CHECK'
          WHERE ccu2.table_schema = c.table_schema
            AND ccu2.table_name = c.table_name
            AND ccu2.column_name = c.column_name
      ) THEN 'HAS_CHECK' ELSE NULL END AS check_constraint,
      false AS is_auto_increment
    FROM information_schema.columns c
    WHERE c.table_schema = %s
      AND c.table_name = %s
    ORDER BY c.ordinal_position;
"""

PRIMARY_KEY_QUERY = """
    SELECT
      tc.constraint_name,
      kcu.column_name
    FROM information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kcu
      ON tc.constraint_name = kcu.constraint_name
     AND tc.table_schema = kcu.table_schema
     AND tc.table_name = kcu.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
      AND tc.table_schema = %s
      AND tc.table_name = %s
    ORDER BY kcu.ordinal_position;
"""

FOREIGN_KEYS_QUERY = """
    SELECT
      kcu.constraint_name,
      kcu.table_name AS source_table_name,
      kcu.column_name AS source_column,
      ref.table_schema AS referenced_schema,
      ref.table_name AS referenced_table,
      ref.column_name AS referenced_column,
      rc.delete_rule AS on_delete_type,
      rc.update_rule AS on_update_type
    FROM information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kcu
      ON kcu.constraint_schema = tc.constraint_schema
     AND kcu.constraint_name = tc.constraint_name
     AND kcu.table_schema = tc.table_schema
     AND kcu.table_name = tc.table_name
    JOIN information_schema.referential_constraints AS rc
      ON rc.constraint_schema = tc.constraint_schema
     AND rc.constraint_name = tc.constraint_name
    JOIN information_schema.key_column_usage AS ref
      ON ref.constraint_schema = rc.unique_constraint_schema
     AND ref.constraint_name = rc.unique_constraint_name
     AND ref.ordinal_position = kcu.position_in_unique_constraint
    WHERE tc.constraint_type = 'FOREIGN KEY'
      AND tc.table_schema = %s
      AND tc.table_name = %s
    ORDER BY kcu.constraint_name, kcu.ordinal_position;
"""

VIEWS_QUERY = """
    SELECT v.table_name
    FROM information_schema.views v
    WHERE v.table_schema = %s
    ORDER BY v.table_name;
"""


def resolve_data_type(row: Mapping[str, Any]) -> str:
    """Return the display type, folding numeric precision and scale in."""
    data_type = row["data_type"]
    if data_type == "numeric":
        precision = row.get("numeric_precision")
        scale = row.get("numeric_scale")
        if precision is not None and scale is not None:
            return f"numeric({precision},{scale})"
    return data_type


def build_constraints(row: Mapping[str, Any]) -> frozenset[Constraint]:
    """Derive column constraint tags from one column row."""
    constraints: set[Constraint] = set()
    if row.get("is_unique"):
        constraints.add(Constraint.UNIQUE)
    if (row.get("check_constraint") or "").strip():
        constraints.add(Constraint.CHECK)
    if (row.get("column_default") or "").strip():
        constraints.add(Constraint.DEFAULT)
    if row.get("is_auto_increment"):
        constraints.add(Constraint.AUTO_INCREMENT)
    if row.get("is_nullable") == "YES":
        constraints.add(Constraint.NULLABLE)
    if row.get("is_generated") == "ALWAYS":
        constraints.add(Constraint.GENERATED)
    return frozenset(constraints)


def column_from_row(row: Mapping[str, Any]) -> Column:
    """Map one column row onto a raw `Column`."""
    return Column(
        name=row["column_name"],
        ordinal_position=int(row["ordinal_position"]),
        data_type=resolve_data_type(row),
        nullable=row.get("is_nullable") == "YES",
        maximum_length=int(row.get("character_maximum_length") or 0),
        constraints=build_constraints(row),
    )


class InformationSchemaReader:
    """Catalog reader backed by `information_schema` queries."""

    tables_query = TABLES_QUERY
    columns_query = COLUMNS_QUERY
    foreign_keys_query = FOREIGN_KEYS_QUERY

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def _fetch(self, query: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a query and return all rows as dicts keyed by column name."""
        try:
            with self.connection.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, tuple(params))
                return [dict(r) for r in cur.fetchall()]
        except psycopg2.Error as exc:
            raise CatalogError(f"Catalog query failed: {exc}") from exc

    def list_schemas(self) -> list[str]:
        """Return user schema names."""
        return [r["schema_name"] for r in self._fetch(SCHEMAS_QUERY)]

    def list_tables(self, schema: str) -> list[TableRow]:
        """Return base tables in catalog order."""
        tables = [
            TableRow(name=r["table_name"], partition_strategy=r.get("partition_key"))
            for r in self._fetch(self.tables_query, (schema,))
        ]
        logger.info(
            "Discovered: %d tables in schema: %s", len(tables), sanitize_for_log(schema)
        )
        return tables

    def list_columns(self, schema: str, table: str) -> list[Column]:
        """Return raw columns of a table or view."""
        return [
            column_from_row(r) for r in self._fetch(self.columns_query, (schema, table))
        ]

    def list_primary_key_rows(self, schema: str, table: str) -> list[PrimaryKeyRow]:
        """Return primary key rows in key order."""
        return [
            PrimaryKeyRow(constraint_name=r["constraint_name"], column_name=r["column_name"])
            for r in self._fetch(PRIMARY_KEY_QUERY, (schema, table))
        ]

    def list_foreign_keys(self, schema: str, table: str) -> list[ForeignKey]:
        """
        Return one raw foreign key per (source, target) column pair.

        Nullability is filled in by the builder.
        """
        return [
            ForeignKey(
                name=r["constraint_name"],
                source_table=r["source_table_name"],
                source_column=r["source_column"],
                target_table=r["referenced_table"],
                target_column=r["referenced_column"],
                referenced_schema=r["referenced_schema"],
                on_delete=ReferentialAction.from_rule(r.get("on_delete_type")),
                on_update=ReferentialAction.from_rule(r.get("on_update_type")),
            )
            for r in self._fetch(self.foreign_keys_query, (schema, table))
        ]

    def list_views(self, schema: str) -> list[str]:
        """Return view names."""
        views = [r["table_name"] for r in self._fetch(VIEWS_QUERY, (schema,))]
        logger.info(
            "Discovered: %d views in schema: %s", len(views), sanitize_for_log(schema)
        )
        return views

    def list_enums(self, schema: str) -> list[EnumRow]:
        return []

    def list_enum_values(self, schema: str, enum_name: str) -> list[str]:
        return []

    def list_composite_types(self, schema: str) -> list[DbCompositeType]:
        return []

    def list_materialized_views(self, schema: str) -> list[str]:
        return []

    def list_materialized_view_columns(self, schema: str, name: str) -> list[Column]:
        return []

    def get_column_udt_mappings(self, schema: str) -> dict[ColumnKey, UdtReference]:
        return {}

    def get_partition_children(self, schema: str) -> dict[str, list[str]]:
        return {}

