"""Database connection helpers.

This module centralizes creation of psycopg2 connections and applies small
normalization rules to the configured host so that values copied from
connection URLs or consoles still work.
"""

from __future__ import annotations

import logging
from functools import partial

import psycopg2
from psycopg2.extensions import connection as PgConnection

from dbdocs.core.catalog import ConnectionFactory
from dbdocs.core.config import ConnectionConfig
from dbdocs.core.errors import CatalogError
from dbdocs.core.logutils import sanitize_for_log

logger = logging.getLogger(__name__)


def _sanitize_host(host: str) -> str:
    """
    Normalize a database host value.

    - Removes a URL scheme (e.g. 'postgresql://')
    - Removes query strings and paths
    - Removes trailing slashes
    """
    host = host.strip()
    if "://" in host:
        host = host.split("://", 1)[1]
    host = host.split("?", 1)[0]
    host = host.split("/", 1)[0]
    return host.rstrip("/")


def connect(config: ConnectionConfig) -> PgConnection:
    """
    Open a read-only connection to the configured database.

    Raises:
        CatalogError: If the driver cannot connect.
    """
    host = _sanitize_host(config.host)
    try:
        conn = psycopg2.connect(
            host=host,
            port=config.port,
            dbname=config.database,
            user=config.username,
            password=config.password,
            sslmode="require" if config.use_ssl else "disable",
            connect_timeout=config.connect_timeout,
            application_name="dbdocs",
        )
    except psycopg2.Error as exc:
        raise CatalogError(
            f"Could not connect to {host}:{config.port}/{config.database}: {exc}"
        ) from exc

    try:
        conn.set_session(readonly=True, autocommit=True)
    except psycopg2.Error as exc:
        conn.close()
        raise CatalogError(f"Could not configure read-only session: {exc}") from exc

    logger.info(
        "Connected to %s database %s",
        config.database_type.display_name,
        sanitize_for_log(config.database),
    )
    return conn


def connection_factory(config: ConnectionConfig) -> ConnectionFactory:
    """Return a zero-argument callable opening a new connection per call."""
    return partial(connect, config)
