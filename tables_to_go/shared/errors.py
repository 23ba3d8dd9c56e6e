"""Custom exceptions for tables-to-go."""

from __future__ import annotations


class TablesToGoError(Exception):
    """Base exception for all generator errors."""

    def __init__(self, message: str, context: str | None = None) -> None:
        self.context = context
        full_message = f"{message}" if not context else f"[{context}] {message}"
        super().__init__(full_message)


class ConfigurationError(TablesToGoError):
    """Raised when the run settings are invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        context: str | None = None,
    ) -> None:
        self.setting = setting
        if setting:
            message = f"Setting '{setting}': {message}"
        super().__init__(message, context)


class DatabaseConnectionError(TablesToGoError):
    """Raised when the database handle cannot be acquired or pinged."""

    def __init__(self, message: str, db_type: str) -> None:
        self.db_type = db_type
        super().__init__(f"Database '{db_type}': {message}")


class IntrospectionError(TablesToGoError):
    """Raised when a catalog query fails."""

    def __init__(self, message: str, table: str | None = None) -> None:
        self.table = table
        if table:
            message = f"Table '{table}': {message}"
        super().__init__(message)


class QueryPrepareError(IntrospectionError):
    """Raised when the column query cannot be prepared."""


class EmissionError(TablesToGoError):
    """Raised when a generated file cannot be written."""

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message, path)
