import logging

import pytest

from dbdocs.core.errors import DuplicateKeyError
from dbdocs.core.models import Column, ColumnKey, DbEnum, EnumKey, UdtReference
from dbdocs.core.resolver import (
    USER_DEFINED,
    build_enum_index,
    resolve_column_type,
    resolve_columns,
)


def _udt(table: str, column: str, schema: str, name: str):
    return {ColumnKey(table, column): UdtReference(schema, name)}


def test_build_enum_index_keys_by_schema_and_name():
    enums = [DbEnum("public", "status"), DbEnum("audit", "status")]

    index = build_enum_index(enums)

    assert set(index) == {EnumKey("public", "status"), EnumKey("audit", "status")}


def test_build_enum_index_rejects_duplicates():
    enums = [DbEnum("public", "status", ("a",)), DbEnum("public", "status", ("b",))]

    with pytest.raises(DuplicateKeyError, match="public.status"):
        build_enum_index(enums)


def test_non_user_defined_column_is_returned_unchanged():
    col = Column("name", 1, "character varying", maximum_length=40)

    resolved = resolve_column_type(
        col, table_name="t", schema="public", udt_mappings={}, enums_by_key={}
    )

    assert resolved is col


def test_same_schema_type_is_unqualified():
    col = Column("status", 2, USER_DEFINED, nullable=False)
    enums = build_enum_index([DbEnum("public", "order_status")])

    resolved = resolve_column_type(
        col,
        table_name="orders",
        schema="public",
        udt_mappings=_udt("orders", "status", "public", "order_status"),
        enums_by_key=enums,
    )

    assert resolved.data_type == "order_status"
    assert resolved.nullable is False


def test_cross_schema_type_is_qualified():
    col = Column("kind", 3, USER_DEFINED)

    resolved = resolve_column_type(
        col,
        table_name="events",
        schema="public",
        udt_mappings=_udt("events", "kind", "shared", "event_kind"),
        enums_by_key={},
    )

    assert resolved.data_type == "shared.event_kind"


def test_missing_mapping_keeps_marker_and_warns(caplog):
    col = Column("mystery", 1, USER_DEFINED)

    with caplog.at_level(logging.WARNING, logger="dbdocs.core.resolver"):
        resolved = resolve_column_type(
            col, table_name="t", schema="public", udt_mappings={}, enums_by_key={}
        )

    assert resolved.data_type == USER_DEFINED
    assert "public.t.mystery" in caplog.text


def test_resolve_columns_keeps_order():
    cols = [Column("a", 1, "integer"), Column("b", 2, USER_DEFINED)]

    resolved = resolve_columns(
        cols,
        table_name="t",
        schema="public",
        udt_mappings=_udt("t", "b", "public", "mood"),
        enums_by_key={},
    )

    assert [(c.name, c.data_type) for c in resolved] == [("a", "integer"), ("b", "mood")]


def test_cross_schema_reference_is_logged_at_debug(caplog):
    col = Column("kind", 3, USER_DEFINED)
    enums = build_enum_index([DbEnum("shared", "event_kind")])

    with caplog.at_level(logging.DEBUG, logger="dbdocs.core.resolver"):
        resolve_column_type(
            col,
            table_name="events",
            schema="public",
            udt_mappings=_udt("events", "kind", "shared", "event_kind"),
            enums_by_key=enums,
        )

    debug = [r for r in caplog.records if r.levelno == logging.DEBUG]
    assert any("Cross-schema" in r.getMessage() for r in debug)
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_unknown_cross_schema_type_warns(caplog):
    col = Column("kind", 3, USER_DEFINED)

    with caplog.at_level(logging.DEBUG, logger="dbdocs.core.resolver"):
        resolved = resolve_column_type(
            col,
            table_name="events",
            schema="public",
            udt_mappings=_udt("events", "kind", "shared", "event_kind"),
            enums_by_key={},
        )

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert resolved.data_type == "shared.event_kind"
    assert len(warnings) == 1
    assert "shared.event_kind" in warnings[0].getMessage()


def test_same_schema_type_does_not_warn(caplog):
    col = Column("mood", 2, USER_DEFINED)

    with caplog.at_level(logging.DEBUG, logger="dbdocs.core.resolver"):
        resolve_column_type(
            col,
            table_name="people",
            schema="public",
            udt_mappings=_udt("people", "mood", "public", "mood"),
            enums_by_key={},
        )

    assert caplog.records == []
