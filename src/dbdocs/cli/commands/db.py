from __future__ import annotations

from pathlib import Path

import typer

from dbdocs.cli.common.context import DbAppContext, build_db_context
from dbdocs.cli.common.exits import (
    EXIT_CONFIG,
    EXIT_DATABASE,
    EXIT_UNEXPECTED,
    exit_from_exc,
    warn_exit,
)
from dbdocs.cli.common.logs import configure_logging
from dbdocs.cli.common.options import (
    DatabaseOpt,
    HostOpt,
    OutputOpt,
    PasswordOpt,
    PickOpt,
    PortOpt,
    SchemasOpt,
    SslOpt,
    UsernameOpt,
    VerboseOpt,
)
from dbdocs.cli.common.output import out
from dbdocs.core.config import DocumenterConfig, parse_schema_list
from dbdocs.core.diagram import render_diagram
from dbdocs.core.documenter import build_schemas, list_schemas
from dbdocs.core.errors import CatalogError, ValidationError

db_app = typer.Typer(
    help="Document a database as a PlantUML diagram.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@db_app.callback()
def _init(
    ctx: typer.Context,
    host: str | None = HostOpt,
    port: int = PortOpt,
    database: str | None = DatabaseOpt,
    username: str | None = UsernameOpt,
    password: str | None = PasswordOpt,
    ssl: bool = SslOpt,
    verbose: bool = VerboseOpt,
):
    """Initialize database connection context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    configure_logging(verbose)
    ctx.obj = build_db_context(
        host=host,
        port=port,
        database=database,
        username=username,
        password=password,
        use_ssl=ssl,
    )


def _list_schemas_or_exit(appctx: DbAppContext) -> list[str]:
    """Fetch schema names and convert catalog failures into CLI exits."""
    try:
        with out.status("Loading schemas..."):
            return list_schemas(appctx.connection)
    except CatalogError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_DATABASE)


@db_app.command("schemas-list")
def schemas_list(ctx: typer.Context):
    """List user schemas in the database."""
    appctx: DbAppContext = ctx.obj
    schemas = _list_schemas_or_exit(appctx)

    if not schemas:
        warn_exit("No schemas found.")

    out.header("Schemas")
    out.info(f"Schemas: {len(schemas)}")
    out.schemas_table(schemas, title=appctx.connection.database)


@db_app.command("generate")
def generate(
    ctx: typer.Context,
    schemas: str | None = SchemasOpt,
    pick: bool = PickOpt,
    output: Path | None = OutputOpt,
):
    """Generate a PlantUML diagram for one or more schemas."""
    appctx: DbAppContext = ctx.obj
    names = parse_schema_list(schemas)

    if pick or not names:
        available = _list_schemas_or_exit(appctx)
        names = tuple(out.select_many("Select schemas to document", available))
        if not names:
            warn_exit("No schemas selected.")

    try:
        config = DocumenterConfig(connection=appctx.connection, schemas=names)
    except ValidationError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_CONFIG)

    try:
        with out.status(f"Reading catalog for {', '.join(config.schemas)}..."):
            built = build_schemas(config)
        diagram = render_diagram(built)
    except ValidationError as exc:
        exit_from_exc(exc, message=f"Inconsistent catalog data: {exc}", code=EXIT_DATABASE)
    except CatalogError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_DATABASE)
    except Exception as exc:
        exit_from_exc(exc, message=f"Unexpected error: {exc}", code=EXIT_UNEXPECTED)

    if output is None:
        typer.echo(diagram, nl=False)
        return

    try:
        output.write_text(diagram, encoding="utf-8")
    except OSError as exc:
        exit_from_exc(exc, message=f"Could not write {output}: {exc}", code=EXIT_UNEXPECTED)

    out.diagram_summary_table(built)
    out.success(f"Diagram written to {output}")
