"""Documenter configuration.

`DocumenterConfig` holds everything needed to connect to a database and
pick the schemas to document. It validates itself on construction so that
the rest of the pipeline can assume a usable configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from dbdocs.core.errors import ValidationError


class DatabaseType(str, Enum):
    """Supported database engines."""

    POSTGRESQL = "postgresql"

    @property
    def display_name(self) -> str:
        return {DatabaseType.POSTGRESQL: "PostgreSQL"}[self]


def parse_schema_list(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """
    Normalize a schema list.

    Accepts a comma-separated string (`"public, audit"`) or an iterable of
    such strings. Blank entries are dropped and duplicates removed while
    keeping first-seen order.
    """
    if value is None:
        return ()
    chunks = [value] if isinstance(value, str) else list(value)
    seen: dict[str, None] = {}
    for chunk in chunks:
        for part in chunk.split(","):
            name = part.strip()
            if name:
                seen.setdefault(name, None)
    return tuple(seen)


def _require(value: str | None, field_name: str) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} must not be blank")


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Settings needed to open a database connection.

    Attributes:
        host: Database host name (scheme and trailing slash are tolerated).
        database: Database name.
        username: Login role.
        password: Login password.
        port: TCP port.
        use_ssl: Require TLS when True, disable it when False.
        database_type: Engine, which selects the catalog reader.
        connect_timeout: Connection timeout in seconds.
    """

    host: str
    database: str
    username: str
    password: str
    port: int = 5432
    use_ssl: bool = True
    database_type: DatabaseType = DatabaseType.POSTGRESQL
    connect_timeout: int = 10

    def __post_init__(self) -> None:
        _require(self.host, "host")
        _require(self.database, "database")
        _require(self.username, "username")
        _require(self.password, "password")
        if not 0 < self.port < 65536:
            raise ValidationError(f"port must be between 1 and 65535, got {self.port}")
        if self.connect_timeout < 1:
            raise ValidationError("connect_timeout must be >= 1")


@dataclass(frozen=True)
class DocumenterConfig:
    """Connection settings plus the schemas to document, in output order."""

    connection: ConnectionConfig
    schemas: tuple[str, ...]

    def __post_init__(self) -> None:
        schemas = parse_schema_list(self.schemas)
        if not schemas:
            raise ValidationError("at least one schema is required")
        object.__setattr__(self, "schemas", schemas)

    @property
    def database_type(self) -> DatabaseType:
        return self.connection.database_type
