"""Struct Code Generator - Generates Go structs from database tables."""

from .main import (
    StructField,
    StructSpec,
    GeneratorContext,
    generate,
    main,
    run,
    write_struct,
)
from .type_mapping import map_column_type
from .formatting import format_source

__all__ = [
    "StructField",
    "StructSpec",
    "GeneratorContext",
    "generate",
    "main",
    "run",
    "write_struct",
    "map_column_type",
    "format_source",
]
