"""Common CLI options for the CLI."""

import typer

HostOpt = typer.Option(
    None,
    "--host",
    "-H",
    envvar="DBDOCS_HOST",
    help="Database host",
)

PortOpt = typer.Option(
    5432,
    "--port",
    envvar="DBDOCS_PORT",
    help="Database port",
)

DatabaseOpt = typer.Option(
    None,
    "--database",
    "-d",
    envvar="DBDOCS_DATABASE",
    help="Database name",
)

UsernameOpt = typer.Option(
    None,
    "--username",
    "-u",
    envvar="DBDOCS_USERNAME",
    help="Database user",
)

PasswordOpt = typer.Option(
    None,
    "--password",
    envvar="DBDOCS_PASSWORD",
    help="Database password (prompted when omitted)",
    show_default=False,
)

SslOpt = typer.Option(
    True,
    "--ssl/--no-ssl",
    help="Require TLS for the database connection",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Show debug logging on stderr",
)

SchemasOpt = typer.Option(
    None,
    "--schemas",
    "-s",
    envvar="DBDOCS_SCHEMAS",
    help="Comma-separated schemas to document, in output order",
    show_default=False,
)

PickOpt = typer.Option(
    False,
    "--pick",
    help="Pick schemas interactively from the database",
)

OutputOpt = typer.Option(
    None,
    "--output",
    "-o",
    help="Write the diagram to this file instead of stdout",
    dir_okay=False,
)
