"""Run settings, settings-file loading and verification."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml

from .errors import ConfigurationError
from .naming import OUTPUT_FORMAT_CAMEL_CASE, OUTPUT_FORMAT_ORIGINAL

DB_TYPE_POSTGRES: Final[str] = "pg"
DB_TYPE_MYSQL: Final[str] = "mysql"

SUPPORTED_DB_TYPES: Final[tuple[str, ...]] = (DB_TYPE_POSTGRES, DB_TYPE_MYSQL)
SUPPORTED_OUTPUT_FORMATS: Final[tuple[str, ...]] = (
    OUTPUT_FORMAT_CAMEL_CASE,
    OUTPUT_FORMAT_ORIGINAL,
)

DEFAULT_PORTS: Final[dict[str, str]] = {
    DB_TYPE_POSTGRES: "5432",
    DB_TYPE_MYSQL: "3306",
}


@dataclass(frozen=True, slots=True)
class Settings:
    """Read-only configuration for a single generator run."""

    verbose: bool = False
    db_type: str = DB_TYPE_POSTGRES
    user: str = "postgres"
    password: str = ""
    db_name: str = "postgres"
    schema: str = "public"
    host: str = "127.0.0.1"
    port: str = "5432"
    output_path: str = "./output"
    output_format: str = OUTPUT_FORMAT_CAMEL_CASE
    package_name: str = "dto"
    prefix: str = ""
    suffix: str = ""
    structable: bool = False
    structable_only: bool = False
    structable_recorder: bool = False

    @property
    def annotations_enabled(self) -> bool:
        """Whether ``stbl`` annotations are attached to fields."""
        return self.structable or self.structable_only

    @property
    def recorder_enabled(self) -> bool:
        """Whether the ``structable.Recorder`` embed is generated."""
        return self.structable_recorder and self.annotations_enabled


SETTING_NAMES: Final[frozenset[str]] = frozenset(
    f.name for f in dataclasses.fields(Settings)
)


def load_settings_file(settings_path: Path) -> dict[str, Any]:
    """Load setting overrides from a YAML file.

    Args:
        settings_path: Path to the settings file.

    Returns:
        Mapping of setting name to value.

    Raises:
        ConfigurationError: If the file cannot be read, parsed, or names
            an unknown setting.
    """
    try:
        content = settings_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read settings file: {e}", context=str(settings_path)
        ) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", context=str(settings_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Settings root must be a mapping", context=str(settings_path)
        )

    unknown = sorted(str(key) for key in data if key not in SETTING_NAMES)
    if unknown:
        raise ConfigurationError(
            f"Unknown setting(s): {', '.join(unknown)}", context=str(settings_path)
        )

    # Ports are kept as strings so an empty value can fall back to the default
    if data.get("port") is not None:
        data["port"] = str(data["port"])

    return data


def verify_settings(settings: Settings) -> Settings:
    """Validate settings and return a copy with derived values filled in.

    The returned settings carry an absolute output path and, when the port
    was left empty, the default port of the selected database type.

    Raises:
        ConfigurationError: If any setting is unsupported or invalid.
    """
    if settings.db_type not in SUPPORTED_DB_TYPES:
        raise ConfigurationError(
            f"type of database {settings.db_type!r} not supported! "
            f"{list(SUPPORTED_DB_TYPES)}",
            setting="db_type",
        )

    if settings.output_format not in SUPPORTED_OUTPUT_FORMATS:
        raise ConfigurationError(
            f"output format {settings.output_format!r} not supported! "
            f"{list(SUPPORTED_OUTPUT_FORMATS)}",
            setting="output_format",
        )

    output_path = Path(settings.output_path)
    if not output_path.exists():
        raise ConfigurationError(
            f"output file path {settings.output_path!r} does not exist!",
            setting="output_path",
        )
    if not output_path.is_dir():
        raise ConfigurationError(
            f"output file path {settings.output_path!r} is not a directory!",
            setting="output_path",
        )

    if not settings.package_name:
        raise ConfigurationError(
            "name of package can not be empty!", setting="package_name"
        )

    port = settings.port or DEFAULT_PORTS[settings.db_type]
    if not port.isdigit():
        raise ConfigurationError(f"port {port!r} is not a number!", setting="port")

    return dataclasses.replace(
        settings,
        output_path=str(output_path.resolve()),
        port=port,
    )
