"""Shared utilities for tables-to-go."""

from .naming import (
    OUTPUT_FORMAT_CAMEL_CASE,
    OUTPUT_FORMAT_ORIGINAL,
    camel_case,
    normalize_name,
    title_case,
)
from .errors import (
    TablesToGoError,
    ConfigurationError,
    DatabaseConnectionError,
    IntrospectionError,
    QueryPrepareError,
    EmissionError,
)
from .settings import (
    DB_TYPE_MYSQL,
    DB_TYPE_POSTGRES,
    Settings,
    load_settings_file,
    verify_settings,
)

__all__ = [
    # Naming utilities
    "OUTPUT_FORMAT_CAMEL_CASE",
    "OUTPUT_FORMAT_ORIGINAL",
    "camel_case",
    "normalize_name",
    "title_case",
    # Errors
    "TablesToGoError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "QueryPrepareError",
    "EmissionError",
    # Settings
    "DB_TYPE_MYSQL",
    "DB_TYPE_POSTGRES",
    "Settings",
    "load_settings_file",
    "verify_settings",
]
