"""Table and column records populated by catalog introspection."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Column:
    """A single catalog column.

    ``is_nullable`` keeps the catalog's ``"YES"``/``"NO"`` string.
    ``column_key`` and ``extra`` are only filled on MySQL.
    """

    name: str
    data_type: str
    is_nullable: str
    column_default: str | None = None
    column_key: str = ""
    extra: str = ""

    @property
    def nullable(self) -> bool:
        return self.is_nullable == "YES"

    @property
    def is_serial_primary_key(self) -> bool:
        """Whether the column is an auto-generated primary key."""
        # pg: sequence-backed default
        if self.column_default and "nextval" in self.column_default:
            return True
        # mysql
        return "PRI" in self.column_key and "auto_increment" in self.extra


@dataclass(slots=True)
class Table:
    """A base table and its columns in ordinal order."""

    name: str
    columns: list[Column] = field(default_factory=list)
