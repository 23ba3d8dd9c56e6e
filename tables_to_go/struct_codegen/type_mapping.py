"""Mapping of catalog column types to Go field types."""

from __future__ import annotations

from typing import Final

# Postgres names first, then the MySQL names not already covered
INTEGER_TYPES: Final[frozenset[str]] = frozenset({
    "integer",
    "bigint",
    "bigserial",
    "smallint",
    "smallserial",
    "serial",
    "int",
    "tinyint",
    "mediumint",
})

FLOAT_TYPES: Final[frozenset[str]] = frozenset({
    "double precision",
    "numeric",
    "decimal",
    "real",
    "float",
    "double",
})

TEXT_TYPES: Final[frozenset[str]] = frozenset({
    "character varying",
    "character",
    "text",
    "char",
    "varchar",
    "binary",
    "varbinary",
    "blob",
})

TEMPORAL_TYPES: Final[frozenset[str]] = frozenset({
    "time",
    "timestamp",
    "time with time zone",
    "timestamp with time zone",
    "time without time zone",
    "timestamp without time zone",
    "date",
    "datetime",
    "year",
})

BOOLEAN_TYPES: Final[frozenset[str]] = frozenset({"boolean"})

# (raw types, non-null Go type, nullable Go type)
GO_TYPE_TABLE: Final[tuple[tuple[frozenset[str], str, str], ...]] = (
    (INTEGER_TYPES, "int", "sql.NullInt64"),
    (FLOAT_TYPES, "float64", "sql.NullFloat64"),
    (TEXT_TYPES, "string", "sql.NullString"),
    (TEMPORAL_TYPES, "time.Time", "pq.NullTime"),
    (BOOLEAN_TYPES, "bool", "sql.NullBool"),
)

FALLBACK_GO_TYPE: Final[str] = "sql.NullString"


def map_column_type(data_type: str, is_nullable: str) -> tuple[str, bool]:
    """Resolve the Go type for a catalog column.

    Args:
        data_type: Raw catalog type name, e.g. ``"character varying"``.
        is_nullable: The catalog's ``"YES"``/``"NO"`` nullability flag.

    Returns:
        The Go type and whether the column is temporal.

    Unknown types map to ``sql.NullString`` regardless of nullability.
    """
    for raw_types, go_type, nullable_go_type in GO_TYPE_TABLE:
        if data_type in raw_types:
            is_temporal = raw_types is TEMPORAL_TYPES
            if is_nullable == "YES":
                return nullable_go_type, is_temporal
            return go_type, is_temporal

    return FALLBACK_GO_TYPE, False
