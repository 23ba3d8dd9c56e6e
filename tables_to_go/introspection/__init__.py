"""Schema introspection - reads tables and columns from database catalogs."""

from .models import Column, Table
from .databases import (
    Database,
    DatabaseContext,
    MySQLDatabase,
    PostgresDatabase,
    select_database,
)
from .connection import data_source_name, open_connection

__all__ = [
    "Column",
    "Table",
    "Database",
    "DatabaseContext",
    "MySQLDatabase",
    "PostgresDatabase",
    "select_database",
    "data_source_name",
    "open_connection",
]
