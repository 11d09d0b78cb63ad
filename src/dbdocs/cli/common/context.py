"""Application context management for the CLI."""

from dataclasses import dataclass

from dbdocs.cli.common.exits import EXIT_CONFIG, die
from dbdocs.cli.common.output import out
from dbdocs.core.config import ConnectionConfig
from dbdocs.core.errors import ValidationError


@dataclass
class DbAppContext:
    """Application context holding the validated connection settings."""

    connection: ConnectionConfig


def build_db_context(
    *,
    host: str | None,
    port: int,
    database: str | None,
    username: str | None,
    password: str | None,
    use_ssl: bool,
) -> DbAppContext:
    """Build and return the application context for database commands.

    Prompts for the password when none was given on the command line or
    in the environment.

    Returns:
        DbAppContext: Context with validated connection settings.
    """
    missing = [
        flag
        for flag, value in (
            ("--host", host),
            ("--database", database),
            ("--username", username),
        )
        if not value
    ]
    if missing:
        die(f"Missing required option(s): {', '.join(missing)}", code=EXIT_CONFIG)

    if not password:
        password = out.password(f"Password for {username}@{host}/{database}:")
    try:
        connection = ConnectionConfig(
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            use_ssl=use_ssl,
        )
    except ValidationError as exc:
        die(f"Invalid connection settings: {exc}", code=EXIT_CONFIG)
    return DbAppContext(connection=connection)
