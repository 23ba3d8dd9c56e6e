"""Naming utilities for code generation."""

from __future__ import annotations

import re
from functools import lru_cache

OUTPUT_FORMAT_CAMEL_CASE = "c"
OUTPUT_FORMAT_ORIGINAL = "o"

_SEPARATORS = re.compile(r"[\W_]+")


@lru_cache(maxsize=1024)
def title_case(value: str) -> str:
    """Upper-case the first character of an identifier.

    The identifier is treated as a single word, so the remaining
    characters are left as they are.

    Examples:
        >>> title_case("user_id")
        'User_id'
        >>> title_case("Users")
        'Users'
    """
    return value[:1].upper() + value[1:]


@lru_cache(maxsize=1024)
def camel_case(value: str) -> str:
    """Convert an identifier to CamelCase.

    Uses caching for repeated calls with the same input.

    Examples:
        >>> camel_case("user_id")
        'UserId'
        >>> camel_case("created-at")
        'CreatedAt'
        >>> camel_case("UserId")
        'UserId'
    """
    parts = [part for part in _SEPARATORS.split(value) if part]
    if not parts:
        # Nothing but separators; keep the identifier rather than erase it
        return title_case(value)
    if len(parts) == 1:
        return title_case(parts[0])
    return "".join(part.lower().capitalize() for part in parts)


def normalize_name(value: str, output_format: str) -> str:
    """Normalize a raw catalog identifier for the configured output style."""
    name = title_case(value)
    if output_format == OUTPUT_FORMAT_CAMEL_CASE:
        name = camel_case(name)
    return name
