from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from dbdocs.cli.cli import app
from dbdocs.cli.commands import db as db_cmd
from dbdocs.core.errors import CatalogError
from dbdocs.core.models import Schema

runner = CliRunner()

CONNECTION_ARGS = [
    "db",
    "--host",
    "db.local",
    "--database",
    "shop",
    "--username",
    "app",
    "--password",
    "pw",
]


@pytest.fixture(autouse=True)
def _no_env(monkeypatch):
    for name in ("DBDOCS_HOST", "DBDOCS_DATABASE", "DBDOCS_USERNAME", "DBDOCS_PASSWORD", "DBDOCS_SCHEMAS"):
        monkeypatch.delenv(name, raising=False)


def test_generate_writes_diagram_to_stdout(monkeypatch):
    seen = {}

    def fake_build(config):
        seen["config"] = config
        return [Schema(name=n) for n in config.schemas]

    monkeypatch.setattr(db_cmd, "build_schemas", fake_build)

    result = runner.invoke(app, [*CONNECTION_ARGS, "generate", "--schemas", "public,audit"])

    assert result.exit_code == 0
    assert result.stdout.startswith("@startuml\n")
    assert 'package "public" {' in result.stdout
    assert 'package "audit" {' in result.stdout
    assert seen["config"].schemas == ("public", "audit")
    assert seen["config"].connection.host == "db.local"


def test_generate_writes_file_and_summary(monkeypatch, tmp_path):
    monkeypatch.setattr(db_cmd, "build_schemas", lambda config: [Schema(name="public")])
    target = tmp_path / "schema.puml"

    result = runner.invoke(
        app, [*CONNECTION_ARGS, "generate", "-s", "public", "--output", str(target)]
    )

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8").endswith("@enduml\n")


def test_generate_maps_catalog_errors_to_exit_code_2(monkeypatch):
    def fail(config):
        raise CatalogError("connection refused")

    monkeypatch.setattr(db_cmd, "build_schemas", fail)

    result = runner.invoke(app, [*CONNECTION_ARGS, "generate", "-s", "public"])

    assert result.exit_code == 2


def test_generate_maps_unexpected_errors_to_exit_code_3(monkeypatch):
    def fail(config):
        raise KeyError("boom")

    monkeypatch.setattr(db_cmd, "build_schemas", fail)

    result = runner.invoke(app, [*CONNECTION_ARGS, "generate", "-s", "public"])

    assert result.exit_code == 3


def test_missing_connection_options_exit_with_code_1():
    result = runner.invoke(app, ["db", "--host", "db.local", "generate", "-s", "public"])

    assert result.exit_code == 1


def test_generate_without_schemas_uses_picker(monkeypatch):
    monkeypatch.setattr(db_cmd, "list_schemas", lambda connection: ["audit", "public"])
    monkeypatch.setattr(
        db_cmd,
        "out",
        SimpleNamespace(
            select_many=lambda message, choices: choices[1:],
            status=db_cmd.out.status,
            warn=db_cmd.out.warn,
            error=db_cmd.out.error,
        ),
    )
    monkeypatch.setattr(
        db_cmd, "build_schemas", lambda config: [Schema(name=n) for n in config.schemas]
    )

    result = runner.invoke(app, [*CONNECTION_ARGS, "generate"])

    assert result.exit_code == 0
    assert 'package "public" {' in result.stdout
    assert 'package "audit"' not in result.stdout


def test_generate_with_empty_pick_exits_cleanly(monkeypatch):
    monkeypatch.setattr(db_cmd, "list_schemas", lambda connection: ["public"])
    monkeypatch.setattr(
        db_cmd,
        "out",
        SimpleNamespace(
            select_many=lambda message, choices: [],
            status=db_cmd.out.status,
            warn=db_cmd.out.warn,
        ),
    )

    result = runner.invoke(app, [*CONNECTION_ARGS, "generate", "--pick"])

    assert result.exit_code == 0
    assert "@startuml" not in result.stdout


def test_schemas_list_database_error(monkeypatch):
    def fail(connection):
        raise CatalogError("permission denied")

    monkeypatch.setattr(db_cmd, "list_schemas", fail)

    result = runner.invoke(app, [*CONNECTION_ARGS, "schemas-list"])

    assert result.exit_code == 2


def test_schemas_list_prints_schemas(monkeypatch):
    monkeypatch.setattr(db_cmd, "list_schemas", lambda connection: ["audit", "public"])

    result = runner.invoke(app, [*CONNECTION_ARGS, "schemas-list"])

    assert result.exit_code == 0


def test_schemas_list_with_no_schemas_exits_cleanly(monkeypatch):
    monkeypatch.setattr(db_cmd, "list_schemas", lambda connection: [])

    result = runner.invoke(app, [*CONNECTION_ARGS, "schemas-list"])

    assert result.exit_code == 0
