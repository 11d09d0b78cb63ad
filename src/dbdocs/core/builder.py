"""Schema building.

The builder drives a catalog reader through one schema at a time and
assembles the results into an immutable `Schema`:

    enums -> composite types -> UDT mappings -> partitions
          -> tables (columns, primary key, foreign keys)
          -> views -> materialized views

Each schema gets its own connection, which is closed exactly once whether
the build succeeds or fails. Failures propagate unchanged; no partially
built schema is ever returned. Schemas are processed sequentially and do
not share any mutable state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from dbdocs.core.catalog import (
    CatalogReader,
    Connection,
    ConnectionFactory,
    ReaderFactory,
    TableRow,
)
from dbdocs.core.keys import (
    collate_primary_key,
    enrich_foreign_keys,
    mark_foreign_key_columns,
)
from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import (
    ColumnKey,
    DbEnum,
    EnumKey,
    MaterializedView,
    Schema,
    Table,
    UdtReference,
    View,
)
from dbdocs.core.resolver import build_enum_index, resolve_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TypeContext:
    """Lookup maps used to resolve column types within one schema."""

    schema: str
    udt_mappings: Mapping[ColumnKey, UdtReference]
    enums_by_key: Mapping[EnumKey, DbEnum]


def _close_after_failure(connection: Connection, name: str) -> None:
    """Close a connection without masking the error that aborted the build."""
    try:
        connection.close()
    except Exception:
        logger.warning(
            "Could not close connection for schema: %s",
            sanitize_for_log(name),
            exc_info=True,
        )


class SchemaBuilder:
    """Builds `Schema` models from a database catalog."""

    def __init__(
        self, connection_factory: ConnectionFactory, reader_factory: ReaderFactory
    ) -> None:
        self.connection_factory = connection_factory
        self.reader_factory = reader_factory

    def build_schemas(self, names: Iterable[str]) -> list[Schema]:
        """Build each named schema in the order given."""
        return [self.build_schema(name) for name in names]

    def build_schema(self, name: str) -> Schema:
        """
        Build one schema using a dedicated connection.

        Raises:
            CatalogError: If the catalog cannot be read or is inconsistent.
        """
        logger.info("Building schema: %s", sanitize_for_log(name))
        connection = self.connection_factory()
        try:
            reader = self.reader_factory(connection)
            schema = self._build(reader, name)
        except Exception:
            logger.error("Failed to build schema: %s", sanitize_for_log(name))
            _close_after_failure(connection, name)
            raise
        connection.close()

        logger.info(
            "Completed schema %s: %d table(s), %d view(s), %d materialized view(s), "
            "%d enum(s), %d composite type(s)",
            sanitize_for_log(name),
            len(schema.tables),
            len(schema.views),
            len(schema.materialized_views),
            len(schema.enums),
            len(schema.composite_types),
        )
        return schema

    def _build(self, reader: CatalogReader, name: str) -> Schema:
        enums = tuple(
            DbEnum(
                schema_name=row.schema_name,
                enum_name=row.enum_name,
                values=tuple(reader.list_enum_values(row.schema_name, row.enum_name)),
            )
            for row in reader.list_enums(name)
        )
        composite_types = tuple(reader.list_composite_types(name))
        types = _TypeContext(
            schema=name,
            udt_mappings=dict(reader.get_column_udt_mappings(name)),
            enums_by_key=build_enum_index(enums),
        )
        partitions = reader.get_partition_children(name)

        tables = tuple(
            self._build_table(reader, row, types, partitions.get(row.name, ()))
            for row in reader.list_tables(name)
        )
        views = tuple(
            View(
                name=view_name,
                columns=resolve_columns(
                    reader.list_columns(name, view_name),
                    table_name=view_name,
                    schema=name,
                    udt_mappings=types.udt_mappings,
                    enums_by_key=types.enums_by_key,
                ),
            )
            for view_name in reader.list_views(name)
        )
        materialized_views = tuple(
            MaterializedView(
                name=view_name,
                columns=resolve_columns(
                    reader.list_materialized_view_columns(name, view_name),
                    table_name=view_name,
                    schema=name,
                    udt_mappings=types.udt_mappings,
                    enums_by_key=types.enums_by_key,
                ),
            )
            for view_name in reader.list_materialized_views(name)
        )
        return Schema(
            name=name,
            tables=tables,
            views=views,
            materialized_views=materialized_views,
            enums=enums,
            composite_types=composite_types,
        )

    def _build_table(
        self,
        reader: CatalogReader,
        row: TableRow,
        types: _TypeContext,
        partition_names: Iterable[str],
    ) -> Table:
        columns = resolve_columns(
            reader.list_columns(types.schema, row.name),
            table_name=row.name,
            schema=types.schema,
            udt_mappings=types.udt_mappings,
            enums_by_key=types.enums_by_key,
        )
        primary_key = collate_primary_key(
            reader.list_primary_key_rows(types.schema, row.name)
        )
        foreign_keys = enrich_foreign_keys(
            reader.list_foreign_keys(types.schema, row.name), columns
        )
        return Table(
            name=row.name,
            columns=mark_foreign_key_columns(columns, foreign_keys),
            primary_key=primary_key,
            foreign_keys=foreign_keys,
            partition_strategy=row.partition_strategy,
            partition_names=tuple(partition_names),
        )
