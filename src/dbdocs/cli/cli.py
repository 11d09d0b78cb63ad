"""CLI application for database schema documentation."""

import typer

from dbdocs.cli.commands.db import db_app

app = typer.Typer(
    help="dbdocs - database schema to PlantUML diagrams",
    no_args_is_help=True,
)

app.add_typer(db_app, name="db")


if __name__ == "__main__":
    app()
