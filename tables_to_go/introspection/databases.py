"""Per-dialect catalog readers.

Both dialects expose the same three operations through the ``Database``
protocol. They differ only in their catalog queries and in how an
auto-generated primary key shows up in the column metadata, which the
``Column`` model normalizes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Protocol, Sequence

import mysql.connector
import psycopg2

from ..shared import (
    DB_TYPE_MYSQL,
    DB_TYPE_POSTGRES,
    ConfigurationError,
    IntrospectionError,
    QueryPrepareError,
    Settings,
)
from .models import Column, Table

POSTGRES_TABLES_QUERY: Final[str] = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
      AND table_schema = %s
    ORDER BY table_name
"""

POSTGRES_COLUMNS_QUERY: Final[str] = """
    SELECT column_name, data_type, is_nullable, column_default
    FROM information_schema.columns
    WHERE table_name = %s
      AND table_schema = %s
    ORDER BY ordinal_position
"""

MYSQL_TABLES_QUERY: Final[str] = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
      AND table_schema = %s
    ORDER BY table_name
"""

MYSQL_COLUMNS_QUERY: Final[str] = """
    SELECT column_name, data_type, is_nullable, column_default, column_key, extra
    FROM information_schema.columns
    WHERE table_name = %s
      AND table_schema = %s
    ORDER BY ordinal_position
"""


class Database(Protocol):
    """Catalog reader for one database dialect."""

    def list_tables(self) -> list[Table]:
        ...

    def prepare_column_query(self) -> None:
        ...

    def fetch_columns(self, table: Table) -> None:
        ...


@dataclass(frozen=True)
class DatabaseContext:
    """Open connection and settings shared by the dialect readers."""

    connection: Any
    settings: Settings


def _as_text(value: Any) -> Any:
    # mysql-connector may hand back catalog strings as bytes
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value


def _query_tables(
    context: DatabaseContext,
    query: str,
    catalog_schema: str,
    driver_error: type[Exception],
) -> list[Table]:
    try:
        cursor = context.connection.cursor()
        try:
            cursor.execute(query, (catalog_schema,))
            rows = cursor.fetchall()
        finally:
            cursor.close()
    except driver_error as e:
        raise IntrospectionError(f"Failed to list tables: {e}") from e

    return [Table(name=_as_text(row[0])) for row in rows]


def _query_columns(
    cursor: Any,
    query: str,
    table: Table,
    catalog_schema: str,
    driver_error: type[Exception],
) -> Sequence[tuple[Any, ...]]:
    if cursor is None:
        raise IntrospectionError("column query was not prepared", table.name)

    try:
        cursor.execute(query, (table.name, catalog_schema))
        return cursor.fetchall()
    except driver_error as e:
        raise IntrospectionError(f"Failed to fetch columns: {e}", table.name) from e


def _open_cursor(context: DatabaseContext, driver_error: type[Exception]) -> Any:
    try:
        return context.connection.cursor()
    except driver_error as e:
        raise QueryPrepareError(f"Failed to prepare column query: {e}") from e


class PostgresDatabase:
    """Reads tables and columns from a PostgreSQL ``information_schema``.

    Tables are looked up in the configured schema. A serial primary key is
    recognized by its ``nextval(...)`` column default.
    """

    def __init__(self, context: DatabaseContext) -> None:
        self.context = context
        self._column_cursor: Any = None

    def list_tables(self) -> list[Table]:
        return _query_tables(
            self.context,
            POSTGRES_TABLES_QUERY,
            self.context.settings.schema,
            psycopg2.Error,
        )

    def prepare_column_query(self) -> None:
        self._column_cursor = _open_cursor(self.context, psycopg2.Error)

    def fetch_columns(self, table: Table) -> None:
        rows = _query_columns(
            self._column_cursor,
            POSTGRES_COLUMNS_QUERY,
            table,
            self.context.settings.schema,
            psycopg2.Error,
        )
        for name, data_type, is_nullable, column_default in rows:
            table.columns.append(
                Column(
                    name=name,
                    data_type=data_type,
                    is_nullable=is_nullable,
                    column_default=column_default,
                )
            )


class MySQLDatabase:
    """Reads tables and columns from a MySQL ``information_schema``.

    The catalog schema is the configured database name. The column query
    also returns the key role and extra attributes used to detect
    ``auto_increment`` primary keys.
    """

    def __init__(self, context: DatabaseContext) -> None:
        self.context = context
        self._column_cursor: Any = None

    def list_tables(self) -> list[Table]:
        return _query_tables(
            self.context,
            MYSQL_TABLES_QUERY,
            self.context.settings.db_name,
            mysql.connector.Error,
        )

    def prepare_column_query(self) -> None:
        self._column_cursor = _open_cursor(self.context, mysql.connector.Error)

    def fetch_columns(self, table: Table) -> None:
        rows = _query_columns(
            self._column_cursor,
            MYSQL_COLUMNS_QUERY,
            table,
            self.context.settings.db_name,
            mysql.connector.Error,
        )
        for name, data_type, is_nullable, column_default, column_key, extra in rows:
            table.columns.append(
                Column(
                    name=_as_text(name),
                    data_type=_as_text(data_type),
                    is_nullable=_as_text(is_nullable),
                    column_default=_as_text(column_default),
                    column_key=_as_text(column_key) or "",
                    extra=_as_text(extra) or "",
                )
            )


def select_database(context: DatabaseContext) -> Database:
    """Pick the catalog reader matching the configured database type."""
    db_type = context.settings.db_type
    if db_type == DB_TYPE_MYSQL:
        return MySQLDatabase(context)
    if db_type == DB_TYPE_POSTGRES:
        return PostgresDatabase(context)
    raise ConfigurationError(f"type of database {db_type!r} not supported!", setting="db_type")
