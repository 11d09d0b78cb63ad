"""Resolution of user-defined column types.

Catalogs report columns declared with an enum or composite type using the
generic `USER-DEFINED` marker. The functions here replace that marker with
the real type name, qualified with its schema when the type lives outside
the schema being documented.

Resolution is fail-open: a column whose type cannot be found keeps the raw
marker and a warning is logged, so one odd column never aborts a diagram.
All inputs are passed explicitly; there is no module-level state.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from dbdocs.core.errors import DuplicateKeyError
from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import Column, ColumnKey, DbEnum, EnumKey, UdtReference

logger = logging.getLogger(__name__)

USER_DEFINED = "USER-DEFINED"


def build_enum_index(enums: Iterable[DbEnum]) -> dict[EnumKey, DbEnum]:
    """
    Index enums by (schema, name).

    Raises:
        DuplicateKeyError: If two enums share the same schema and name.
    """
    index: dict[EnumKey, DbEnum] = {}
    for enum in enums:
        key = EnumKey(schema=enum.schema_name, name=enum.enum_name)
        if key in index:
            raise DuplicateKeyError(
                f"Duplicate enum {enum.schema_name}.{enum.enum_name} in catalog"
            )
        index[key] = enum
    return index


def resolve_column_type(
    column: Column,
    *,
    table_name: str,
    schema: str,
    udt_mappings: Mapping[ColumnKey, UdtReference],
    enums_by_key: Mapping[EnumKey, DbEnum],
) -> Column:
    """
    Return `column` with a `USER-DEFINED` type replaced by its real name.

    Args:
        column: Raw column from the catalog.
        table_name: Relation the column belongs to.
        schema: Schema currently being built.
        udt_mappings: Declared user-defined type per (table, column).
        enums_by_key: Known enums, used for diagnostics only.

    Returns:
        The column unchanged when it is not user-defined or cannot be
        resolved, otherwise a copy with the resolved type name. Length and
        nullability are never touched.
    """
    if column.data_type != USER_DEFINED:
        return column

    ref = udt_mappings.get(ColumnKey(table_name=table_name, column_name=column.name))
    if ref is None:
        logger.warning(
            "No user-defined type mapping for column %s.%s.%s, keeping %s",
            sanitize_for_log(schema),
            sanitize_for_log(table_name),
            sanitize_for_log(column.name),
            USER_DEFINED,
        )
        return column

    if ref.schema == schema:
        return column.with_data_type(ref.type_name)

    logger.debug(
        "Cross-schema type reference: %s.%s uses %s.%s",
        sanitize_for_log(table_name),
        sanitize_for_log(column.name),
        sanitize_for_log(ref.schema),
        sanitize_for_log(ref.type_name),
    )
    if EnumKey(schema=ref.schema, name=ref.type_name) not in enums_by_key:
        logger.warning(
            "Column %s.%s.%s uses %s.%s which is neither a known enum nor in schema %s",
            sanitize_for_log(schema),
            sanitize_for_log(table_name),
            sanitize_for_log(column.name),
            sanitize_for_log(ref.schema),
            sanitize_for_log(ref.type_name),
            sanitize_for_log(schema),
        )
    return column.with_data_type(f"{ref.schema}.{ref.type_name}")


def resolve_columns(
    columns: Iterable[Column],
    *,
    table_name: str,
    schema: str,
    udt_mappings: Mapping[ColumnKey, UdtReference],
    enums_by_key: Mapping[EnumKey, DbEnum],
) -> tuple[Column, ...]:
    """Resolve every column of one relation, keeping order."""
    return tuple(
        resolve_column_type(
            c,
            table_name=table_name,
            schema=schema,
            udt_mappings=udt_mappings,
            enums_by_key=enums_by_key,
        )
        for c in columns
    )
