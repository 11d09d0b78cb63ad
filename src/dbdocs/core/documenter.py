"""Entry points tying configuration, catalog reading and rendering together.

Frontends (the CLI, scripts, tests) should only need this module:

- `generate_diagram(config)` builds every configured schema and returns the
  PlantUML text,
- `list_schemas(config)` returns the user schemas of the database.
"""

from __future__ import annotations

from typing import Callable

from dbdocs.core.adapters.information_schema import InformationSchemaReader
from dbdocs.core.adapters.postgresql import PostgresCatalogReader
from dbdocs.core.builder import SchemaBuilder
from dbdocs.core.catalog import CatalogReader, Connection, ConnectionFactory
from dbdocs.core.config import ConnectionConfig, DatabaseType, DocumenterConfig
from dbdocs.core.connection import connection_factory
from dbdocs.core.diagram import render_diagram
from dbdocs.core.models import Schema

_READERS: dict[DatabaseType, type[InformationSchemaReader]] = {
    DatabaseType.POSTGRESQL: PostgresCatalogReader,
}


def reader_factory(database_type: DatabaseType) -> Callable[[Connection], CatalogReader]:
    """Return the catalog reader class for `database_type`."""
    return _READERS[database_type]


def build_schemas(
    config: DocumenterConfig, *, connect: ConnectionFactory | None = None
) -> list[Schema]:
    """Build every configured schema, in configured order."""
    builder = SchemaBuilder(
        connect or connection_factory(config.connection),
        reader_factory(config.database_type),
    )
    return builder.build_schemas(config.schemas)


def generate_diagram(
    config: DocumenterConfig, *, connect: ConnectionFactory | None = None
) -> str:
    """
    Build the configured schemas and render them as one PlantUML diagram.

    Args:
        config: Validated documenter configuration.
        connect: Optional connection factory; defaults to psycopg2.

    Raises:
        CatalogError: If the catalog cannot be read or is inconsistent.
    """
    return render_diagram(build_schemas(config, connect=connect))


def list_schemas(
    config: ConnectionConfig, *, connect: ConnectionFactory | None = None
) -> list[str]:
    """Return the user schemas visible with `config`'s credentials."""
    conn = (connect or connection_factory(config))()
    try:
        return reader_factory(config.database_type)(conn).list_schemas()
    finally:
        conn.close()
