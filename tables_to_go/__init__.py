"""Generate Go structs from PostgreSQL and MySQL table definitions."""

__version__ = "1.0.0"
