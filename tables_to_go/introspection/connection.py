"""Database connection handling."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import mysql.connector
import psycopg2

from ..shared import DB_TYPE_MYSQL, DatabaseConnectionError, Settings


def data_source_name(settings: Settings) -> str:
    """Build a libpq keyword DSN for PostgreSQL."""
    return (
        f"host={settings.host} port={settings.port} user={settings.user} "
        f"dbname={settings.db_name} password={settings.password} sslmode=disable"
    )


def _describe(settings: Settings) -> str:
    using_password = "yes" if settings.password else "no"
    return (
        f"type={settings.db_type!r}, user={settings.user!r}, "
        f"database={settings.db_name!r}, host='{settings.host}:{settings.port}' "
        f"(using password: {using_password})"
    )


def _connect_postgres(settings: Settings) -> Any:
    try:
        connection = psycopg2.connect(data_source_name(settings))
    except psycopg2.Error as e:
        raise DatabaseConnectionError(
            f"Connection to Database ({_describe(settings)}) failed: {e}",
            settings.db_type,
        ) from e

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except psycopg2.Error as e:
        connection.close()
        raise DatabaseConnectionError(f"Ping failed: {e}", settings.db_type) from e

    return connection


def _connect_mysql(settings: Settings) -> Any:
    try:
        connection = mysql.connector.connect(
            host=settings.host,
            port=int(settings.port),
            user=settings.user,
            password=settings.password,
            database=settings.db_name,
        )
    except mysql.connector.Error as e:
        raise DatabaseConnectionError(
            f"Connection to Database ({_describe(settings)}) failed: {e}",
            settings.db_type,
        ) from e

    try:
        connection.ping()
    except mysql.connector.Error as e:
        connection.close()
        raise DatabaseConnectionError(f"Ping failed: {e}", settings.db_type) from e

    return connection


@contextmanager
def open_connection(settings: Settings) -> Iterator[Any]:
    """Open and ping a connection for the configured database type.

    The connection is closed when the block exits, whether or not it
    raised.

    Raises:
        DatabaseConnectionError: If connecting or pinging fails.
    """
    if settings.db_type == DB_TYPE_MYSQL:
        connection = _connect_mysql(settings)
    else:
        connection = _connect_postgres(settings)

    try:
        yield connection
    finally:
        connection.close()
