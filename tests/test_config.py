import pytest

from dbdocs.core.config import (
    ConnectionConfig,
    DatabaseType,
    DocumenterConfig,
    parse_schema_list,
)
from dbdocs.core.errors import ValidationError


def _conn(**overrides) -> ConnectionConfig:
    values = dict(host="db.local", database="shop", username="app", password="secret")
    values.update(overrides)
    return ConnectionConfig(**values)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("public", ("public",)),
        (" public , audit ,, ", ("public", "audit")),
        ("audit,public,audit", ("audit", "public")),
        (["a,b", "c"], ("a", "b", "c")),
        (None, ()),
        ("", ()),
    ],
)
def test_parse_schema_list(value, expected):
    assert parse_schema_list(value) == expected


def test_connection_config_defaults():
    conn = _conn()

    assert conn.port == 5432
    assert conn.use_ssl is True
    assert conn.database_type is DatabaseType.POSTGRESQL
    assert conn.database_type.display_name == "PostgreSQL"


@pytest.mark.parametrize("field", ["host", "database", "username", "password"])
def test_connection_config_rejects_blank_fields(field):
    with pytest.raises(ValidationError, match=f"{field} must not be blank"):
        _conn(**{field: "  "})


@pytest.mark.parametrize("port", [0, 70000])
def test_connection_config_rejects_bad_port(port):
    with pytest.raises(ValidationError, match="port"):
        _conn(port=port)


def test_documenter_config_normalizes_schemas():
    config = DocumenterConfig(connection=_conn(), schemas="public, audit, public")

    assert config.schemas == ("public", "audit")
    assert config.database_type is DatabaseType.POSTGRESQL


def test_documenter_config_requires_a_schema():
    with pytest.raises(ValidationError, match="at least one schema"):
        DocumenterConfig(connection=_conn(), schemas=" , ")
