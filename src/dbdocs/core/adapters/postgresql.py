"""PostgreSQL catalog reader.

Extends the `information_schema` reader with the objects only PostgreSQL
knows about: enum and composite types, materialized views, declarative
partitioning and the mapping of `USER-DEFINED` columns to their types.
Queries go through psycopg2, so literal percent signs are doubled.
"""

from __future__ import annotations

import logging

from dbdocs.core.adapters.information_schema import (
    InformationSchemaReader,
    column_from_row,
)
from dbdocs.core.catalog import CompositeFieldRow, EnumRow, group_composite_fields
from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import Column, ColumnKey, DbCompositeType, UdtReference

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT
      t.table_name,
      CASE WHEN c.relkind = 'p' THEN pg_get_partkeydef(c.oid) ELSE NULL END AS partition_key
    FROM information_schema.tables t
    JOIN pg_catalog.pg_class c ON c.relname = t.table_name
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace AND n.nspname = t.table_schema
    WHERE t.table_schema = %s
      AND t.table_type = 'BASE TABLE'
      AND c.relispartition = false
    ORDER BY c.oid;
"""

COLUMNS_QUERY = """
    SELECT
      c.column_name,
      c.ordinal_position,
      c.is_nullable,
      CASE
        WHEN c.data_type = 'ARRAY' THEN SUBSTRING(c.udt_name FROM 2) || '[]'
        ELSE c.data_type
      END AS data_type,
      c.character_maximum_length,
      c.numeric_precision,
      c.numeric_scale,
      c.column_default,
      c.is_generated,
      EXISTS (
        SELECT 1
        FROM information_schema.key_column_usage kcu
        JOIN information_schema.table_constraints uc
          ON kcu.constraint_name = uc.constraint_name
         AND kcu.table_schema = uc.table_schema
         AND uc.constraint_type = 'UNIQUE'
        WHERE kcu.table_schema = c.table_schema
          AND kcu.table_name = c.table_name
          AND kcu.column_name = c.column_name
      ) AS is_unique,
      (
        SELECT STRING_AGG(DISTINCT cc.check_clause, ' AND ')
        FROM information_schema.constraint_column_usage ccu
        JOIN information_schema.check_constraints cc
          ON ccu.constraint_name = cc.constraint_name
         AND ccu.constraint_schema = cc.constraint_schema
        JOIN information_schema.table_constraints tc
          ON tc.constraint_name = cc.constraint_name
         AND tc.constraint_schema = cc.constraint_schema
         AND tc.constraint_type = 'CHECK'
        WHERE ccu.table_schema = c.table_schema
          AND ccu.table_name = c.table_name
          AND ccu.column_name = c.column_name
      ) AS check_constraint,
      COALESCE(c.column_default LIKE 'nextval%%', false) AS is_auto_increment
    FROM information_schema.columns c
    WHERE c.table_schema = %s
      AND c.table_name = %s
    ORDER BY c.ordinal_position;
"""

FOREIGN_KEYS_QUERY = """
    SELECT
      con.conname AS constraint_name,
      src.relname AS source_table_name,
      sa.attname AS source_column,
      tn.nspname AS referenced_schema,
      tgt.relname AS referenced_table,
      ta.attname AS referenced_column,
      CASE con.confdeltype
        WHEN 'r' THEN 'RESTRICT'
        WHEN 'c' THEN 'CASCADE'
        WHEN 'n' THEN 'SET NULL'
        WHEN 'd' THEN 'SET DEFAULT'
        ELSE 'NO ACTION'
      END AS on_delete_type,
      CASE con.confupdtype
        WHEN 'r' THEN 'RESTRICT'
        WHEN 'c' THEN 'CASCADE'
        WHEN 'n' THEN 'SET NULL'
        WHEN 'd' THEN 'SET DEFAULT'
        ELSE 'NO ACTION'
      END AS on_update_type
    FROM pg_catalog.pg_constraint con
    JOIN pg_catalog.pg_class src ON src.oid = con.conrelid
    JOIN pg_catalog.pg_namespace sn ON sn.oid = src.relnamespace
    JOIN pg_catalog.pg_class tgt ON tgt.oid = con.confrelid
    JOIN pg_catalog.pg_namespace tn ON tn.oid = tgt.relnamespace
    CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
      WITH ORDINALITY AS k(source_attnum, target_attnum, position)
    JOIN pg_catalog.pg_attribute sa
      ON sa.attrelid = con.conrelid AND sa.attnum = k.source_attnum
    JOIN pg_catalog.pg_attribute ta
      ON ta.attrelid = con.confrelid AND ta.attnum = k.target_attnum
    WHERE con.contype = 'f'
      AND con.conparentid = 0
      AND sn.nspname = %s
      AND src.relname = %s
    ORDER BY con.conname, k.position;
"""

ENUMS_QUERY = """
    SELECT DISTINCT
      n.nspname AS udt_schema,
      t.typname AS udt_name
    FROM pg_type t
    JOIN pg_namespace n ON t.typnamespace = n.oid
    WHERE n.nspname = %s
      AND t.typtype = 'e'
    ORDER BY t.typname;
"""

ENUM_VALUES_QUERY = """
    SELECT e.enumlabel
    FROM pg_type t
    JOIN pg_enum e ON t.oid = e.enumtypid
    JOIN pg_namespace n ON n.oid = t.typnamespace
    WHERE n.nspname = %s
      AND t.typname = %s
    ORDER BY e.enumsortorder;
"""

UDT_MAPPINGS_QUERY = """
    SELECT
      c.table_name,
      c.column_name,
      c.udt_schema,
      c.udt_name
    FROM information_schema.columns c
    WHERE c.table_schema = %s
      AND c.data_type = 'USER-DEFINED'
    ORDER BY c.table_name, c.ordinal_position;
"""

COMPOSITE_TYPES_QUERY = """
    SELECT
      t.typname AS type_name,
      n.nspname AS schema_name,
      a.attname AS attribute_name,
      pg_catalog.format_type(a.atttypid, a.atttypmod) AS attribute_type,
      a.attnum AS attribute_position
    FROM pg_type t
    JOIN pg_namespace n ON n.oid = t.typnamespace
    LEFT JOIN pg_attribute a
      ON a.attrelid = t.typrelid AND a.attnum > 0 AND NOT a.attisdropped
    WHERE n.nspname = %s
      AND t.typtype = 'c'
      AND t.typrelid != 0
      AND NOT EXISTS (
        SELECT 1 FROM pg_class c
        WHERE c.oid = t.typrelid AND c.relkind IN ('r', 'v', 'm', 'p')
      )
    ORDER BY t.typname, a.attnum;
"""

MATERIALIZED_VIEWS_QUERY = """
    SELECT c.relname AS table_name
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE n.nspname = %s
      AND c.relkind = 'm'
    ORDER BY c.relname;
"""

# information_schema.columns does not cover materialized views.
MATERIALIZED_VIEW_COLUMNS_QUERY = """
    SELECT
      a.attname AS column_name,
      a.attnum AS ordinal_position,
      CASE WHEN a.attnotnull THEN 'NO' ELSE 'YES' END AS is_nullable,
      CASE
        WHEN t.typcategory = 'A' THEN pg_catalog.format_type(et.oid, NULL) || '[]'
        WHEN t.typtype IN ('e', 'c') THEN 'USER-DEFINED'
        WHEN t.typname IN ('varchar', 'bpchar', 'numeric')
          THEN pg_catalog.format_type(t.oid, NULL)
        ELSE pg_catalog.format_type(a.atttypid, a.atttypmod)
      END AS data_type,
      CASE
        WHEN t.typname IN ('varchar', 'bpchar') AND a.atttypmod > 0
          THEN (a.atttypmod - 4)::integer
        ELSE 0
      END AS character_maximum_length,
      CASE WHEN t.typname = 'numeric' AND a.atttypmod > 0
        THEN (((a.atttypmod - 4) >> 16) & 65535)::integer
        ELSE NULL
      END AS numeric_precision,
      CASE WHEN t.typname = 'numeric' AND a.atttypmod > 0
        THEN ((a.atttypmod - 4) & 65535)::integer
        ELSE NULL
      END AS numeric_scale
    FROM pg_catalog.pg_attribute a
    JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    JOIN pg_catalog.pg_type t ON t.oid = a.atttypid
    LEFT JOIN pg_catalog.pg_type et ON et.oid = t.typelem
    WHERE n.nspname = %s
      AND c.relname = %s
      AND c.relkind = 'm'
      AND a.attnum > 0
      AND NOT a.attisdropped
    ORDER BY a.attnum;
"""

MATERIALIZED_VIEW_UDT_MAPPINGS_QUERY = """
    SELECT
      c.relname AS table_name,
      a.attname AS column_name,
      tn.nspname AS udt_schema,
      t.typname AS udt_name
    FROM pg_catalog.pg_attribute a
    JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    JOIN pg_catalog.pg_type t ON t.oid = a.atttypid
    JOIN pg_catalog.pg_namespace tn ON tn.oid = t.typnamespace
    WHERE n.nspname = %s
      AND c.relkind = 'm'
      AND t.typtype IN ('e', 'c')
      AND a.attnum > 0
      AND NOT a.attisdropped
    ORDER BY c.relname, a.attnum;
"""

PARTITION_CHILDREN_QUERY = """
    SELECT
      p.relname AS table_name,
      c.relname AS partition_name
    FROM pg_class p
    JOIN pg_namespace n ON n.oid = p.relnamespace
    JOIN pg_inherits i ON i.inhparent = p.oid
    JOIN pg_class c ON c.oid = i.inhrelid
    WHERE n.nspname = %s
      AND p.relkind = 'p'
    ORDER BY p.relname, c.relname;
"""


class PostgresCatalogReader(InformationSchemaReader):
    """Catalog reader for PostgreSQL 11 and later."""

    tables_query = TABLES_QUERY
    columns_query = COLUMNS_QUERY
    foreign_keys_query = FOREIGN_KEYS_QUERY

    def list_enums(self, schema: str) -> list[EnumRow]:
        """Return enum types declared in the schema, by name."""
        enums = [
            EnumRow(schema_name=r["udt_schema"], enum_name=r["udt_name"])
            for r in self._fetch(ENUMS_QUERY, (schema,))
        ]
        logger.info(
            "Discovered: %d enums in schema: %s", len(enums), sanitize_for_log(schema)
        )
        return enums

    def list_enum_values(self, schema: str, enum_name: str) -> list[str]:
        """Return enum labels in declared sort order."""
        return [
            r["enumlabel"] for r in self._fetch(ENUM_VALUES_QUERY, (schema, enum_name))
        ]

    def list_composite_types(self, schema: str) -> list[DbCompositeType]:
        """Return standalone composite types (table row types excluded)."""
        rows = [
            CompositeFieldRow(
                schema_name=r["schema_name"],
                type_name=r["type_name"],
                field_name=r.get("attribute_name"),
                field_type=r.get("attribute_type"),
                position=r.get("attribute_position"),
            )
            for r in self._fetch(COMPOSITE_TYPES_QUERY, (schema,))
        ]
        types = group_composite_fields(rows)
        logger.info(
            "Discovered: %d composite types in schema: %s",
            len(types),
            sanitize_for_log(schema),
        )
        return types

    def list_materialized_views(self, schema: str) -> list[str]:
        """Return materialized view names."""
        views = [r["table_name"] for r in self._fetch(MATERIALIZED_VIEWS_QUERY, (schema,))]
        logger.info(
            "Discovered: %d materialized views in schema: %s",
            len(views),
            sanitize_for_log(schema),
        )
        return views

    def list_materialized_view_columns(self, schema: str, name: str) -> list[Column]:
        """Return raw columns of a materialized view from `pg_attribute`."""
        return [
            column_from_row(r)
            for r in self._fetch(MATERIALIZED_VIEW_COLUMNS_QUERY, (schema, name))
        ]

    def get_column_udt_mappings(self, schema: str) -> dict[ColumnKey, UdtReference]:
        """Return the declared type of every enum- or composite-typed column."""
        rows = self._fetch(UDT_MAPPINGS_QUERY, (schema,))
        rows += self._fetch(MATERIALIZED_VIEW_UDT_MAPPINGS_QUERY, (schema,))
        return {
            ColumnKey(table_name=r["table_name"], column_name=r["column_name"]): UdtReference(
                schema=r["udt_schema"], type_name=r["udt_name"]
            )
            for r in rows
        }

    def get_partition_children(self, schema: str) -> dict[str, list[str]]:
        """Return child partition names keyed by partitioned parent."""
        children: dict[str, list[str]] = {}
        for r in self._fetch(PARTITION_CHILDREN_QUERY, (schema,)):
            children.setdefault(r["table_name"], []).append(r["partition_name"])
        return children
