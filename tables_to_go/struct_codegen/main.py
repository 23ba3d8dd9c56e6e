"""
Struct Code Generator - Generates Go structs from database tables.

Reads the table catalog of a PostgreSQL or MySQL database and writes one
Go file per table, each holding a struct whose fields mirror the table's
columns. Fields can carry Masterminds ``structable`` annotations and the
struct can embed ``structable.Recorder``.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable, Final, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..introspection import (
    Column,
    Database,
    DatabaseContext,
    Table,
    open_connection,
    select_database,
)
from ..shared import (
    EmissionError,
    Settings,
    TablesToGoError,
    load_settings_file,
    normalize_name,
    verify_settings,
)
from .formatting import format_source
from .type_mapping import map_column_type

NULL_SAFETY_IMPORT: Final[str] = "database/sql"
TIME_IMPORT: Final[str] = "time"
NULL_TIME_IMPORT: Final[str] = "github.com/lib/pq"
RECORDER_IMPORT: Final[str] = "github.com/Masterminds/structable"

SERIAL_PRIMARY_KEY_MARKERS: Final[str] = ",PRIMARY_KEY,SERIAL,AUTO_INCREMENT"

SOURCE_EXTENSION: Final[str] = ".go"

# Template configuration
TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

Formatter = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class StructField:
    """A single rendered struct field."""

    name: str
    field_type: str
    tag: str


@dataclass(frozen=True, slots=True)
class StructSpec:
    """A generated struct and the file it was written to."""

    struct_name: str
    path: Path


@dataclass
class GeneratorContext:
    """Context for code generation with cached resources."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
        )
        self._struct_template = self.template_env.get_template("struct.go.j2")

    @property
    def struct_template(self):
        return self._struct_template


def _annotation(column: Column) -> str:
    """Build the ``stbl`` annotation for a column."""
    markers = SERIAL_PRIMARY_KEY_MARKERS if column.is_serial_primary_key else ""
    return f'stbl:"{column.name}{markers}"'


def _field_tag(column: Column, settings: Settings) -> str:
    parts: list[str] = []
    if not settings.structable_only:
        parts.append(f'db:"{column.name}"')
    if settings.annotations_enabled:
        parts.append(_annotation(column))
    return " ".join(parts)


def _build_fields(
    table: Table,
    settings: Settings,
) -> tuple[list[StructField], bool, int]:
    """Build struct fields for every column of a table.

    Returns:
        The fields in column order, whether any column is nullable, and
        the number of temporal columns.
    """
    struct_fields: list[StructField] = []
    has_nullable = False
    temporal_count = 0

    for column in table.columns:
        field_type, is_temporal = map_column_type(column.data_type, column.is_nullable)
        struct_fields.append(
            StructField(
                name=normalize_name(column.name, settings.output_format),
                field_type=field_type,
                tag=_field_tag(column, settings),
            )
        )

        if column.nullable:
            has_nullable = True
        if is_temporal:
            temporal_count += 1

    return struct_fields, has_nullable, temporal_count


def _select_imports(
    has_nullable: bool,
    temporal_count: int,
    recorder: bool,
) -> tuple[list[str], list[str]]:
    """Pick the standard library and third-party imports a struct needs."""
    std_imports: list[str] = []
    third_party_imports: list[str] = []

    if has_nullable:
        std_imports.append(NULL_SAFETY_IMPORT)

    if temporal_count > 0:
        # Nullable temporal columns need pq.NullTime; this replaces "time"
        if has_nullable:
            third_party_imports.append(NULL_TIME_IMPORT)
        else:
            std_imports.append(TIME_IMPORT)

    if recorder:
        third_party_imports.append(RECORDER_IMPORT)

    return std_imports, third_party_imports


def struct_name_for(table_name: str, settings: Settings) -> str:
    """Derive the Go type name for a table."""
    return normalize_name(
        f"{settings.prefix}{table_name}{settings.suffix}",
        settings.output_format,
    )


def render_struct(
    table: Table,
    settings: Settings,
    ctx: GeneratorContext,
) -> tuple[str, str]:
    """Render the Go source for a table.

    Returns:
        The struct name and the unformatted source.
    """
    struct_name = struct_name_for(table.name, settings)
    struct_fields, has_nullable, temporal_count = _build_fields(table, settings)
    std_imports, third_party_imports = _select_imports(
        has_nullable, temporal_count, settings.recorder_enabled
    )

    rendered = ctx.struct_template.render(
        package_name=settings.package_name,
        std_imports=std_imports,
        third_party_imports=third_party_imports,
        struct_name=struct_name,
        fields=struct_fields,
        recorder=settings.recorder_enabled,
    )
    return struct_name, rendered


def write_struct(
    table: Table,
    settings: Settings,
    ctx: GeneratorContext,
    formatter: Formatter = format_source,
) -> StructSpec:
    """Render, format and write the struct file for a table.

    An existing file with the same name is overwritten.

    Raises:
        EmissionError: If the file cannot be written.
    """
    struct_name, rendered = render_struct(table, settings, ctx)
    output_path = Path(settings.output_path) / f"{struct_name}{SOURCE_EXTENSION}"

    try:
        output_path.write_text(formatter(rendered), encoding="utf-8")
    except OSError as e:
        raise EmissionError(f"Failed to write struct file: {e}", str(output_path)) from e

    return StructSpec(struct_name=struct_name, path=output_path)


def generate(
    database: Database,
    settings: Settings,
    formatter: Formatter = format_source,
) -> list[StructSpec]:
    """Generate one struct file per table of an introspected database.

    Tables are processed one after another; the first failure aborts the
    run and files written for earlier tables are left in place.

    Returns:
        The generated structs in table order.
    """
    ctx = GeneratorContext()

    tables = database.list_tables()
    if settings.verbose:
        print(f"> count of tables: {len(tables)}")

    database.prepare_column_query()

    specs: list[StructSpec] = []
    for table in tables:
        if settings.verbose:
            print(f"> processing table {table.name!r}")

        database.fetch_columns(table)
        specs.append(write_struct(table, settings, ctx, formatter))

    return specs


def run(settings: Settings, formatter: Formatter = format_source) -> list[StructSpec]:
    """Verify settings, connect and generate structs for every table.

    Raises:
        TablesToGoError: On invalid settings or any database or file error.
    """
    settings = verify_settings(settings)

    with open_connection(settings) as connection:
        database = select_database(DatabaseContext(connection=connection, settings=settings))
        print(f"running for {settings.db_type!r}...")
        specs = generate(database, settings, formatter)

    print("done!")
    return specs


def build_parser() -> argparse.ArgumentParser:
    defaults = Settings()
    parser = argparse.ArgumentParser(
        description="Generate Go structs from PostgreSQL or MySQL tables",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with settings; command line options take precedence",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=defaults.verbose)
    parser.add_argument(
        "-t",
        "--type",
        dest="db_type",
        default=defaults.db_type,
        help="Type of database to use (pg, mysql)",
    )
    parser.add_argument("-u", "--user", default=defaults.user, help="User to connect with")
    parser.add_argument(
        "-p", "--password", default=defaults.password, help="Password of the user"
    )
    parser.add_argument(
        "-d", "--database", dest="db_name", default=defaults.db_name, help="Database name"
    )
    parser.add_argument(
        "-s", "--schema", default=defaults.schema, help="Schema name (pg only)"
    )
    parser.add_argument("--host", default=defaults.host, help="Host of the database")
    parser.add_argument(
        "--port",
        default="",
        help="Port of the database (defaults to the database type's standard port)",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_path",
        default=defaults.output_path,
        help="Existing directory the struct files are written to",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="output_format",
        default=defaults.output_format,
        help="Naming of struct and field names: 'c' camel case, 'o' original",
    )
    parser.add_argument(
        "--package",
        dest="package_name",
        default=defaults.package_name,
        help="Package name of the generated files",
    )
    parser.add_argument("--prefix", default=defaults.prefix, help="Prefix for struct names")
    parser.add_argument("--suffix", default=defaults.suffix, help="Suffix for struct names")
    parser.add_argument(
        "--structable",
        action="store_true",
        default=defaults.structable,
        help="Add Masterminds/structable annotations",
    )
    parser.add_argument(
        "--structable-only",
        action="store_true",
        default=defaults.structable_only,
        help="Add only Masterminds/structable annotations, without db tags",
    )
    parser.add_argument(
        "--structable-recorder",
        action="store_true",
        default=defaults.structable_recorder,
        help="Embed structable.Recorder (requires --structable or --structable-only)",
    )
    return parser


def parse_settings(argv: Sequence[str] | None = None) -> Settings:
    """Build settings from the command line and an optional settings file.

    Raises:
        ConfigurationError: If the settings file is invalid.
    """
    parser = build_parser()
    known, _ = parser.parse_known_args(argv)
    if known.config is not None:
        parser.set_defaults(**load_settings_file(known.config))

    args = parser.parse_args(argv)
    return Settings(**{f.name: getattr(args, f.name) for f in fields(Settings)})


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    try:
        settings = parse_settings(argv)
        specs = run(settings)
        if settings.verbose:
            print(f"Generated {len(specs)} struct file(s) into {settings.output_path}")
    except TablesToGoError as e:
        raise SystemExit(f"Error: {e}") from e


if __name__ == "__main__":
    main()
