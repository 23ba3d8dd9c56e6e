from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from tables_to_go.introspection.models import Column, Table
from tables_to_go.shared.errors import (
    ConfigurationError,
    EmissionError,
    IntrospectionError,
)
from tables_to_go.shared.settings import Settings
from tables_to_go.struct_codegen.main import (
    NULL_SAFETY_IMPORT,
    NULL_TIME_IMPORT,
    RECORDER_IMPORT,
    TIME_IMPORT,
    GeneratorContext,
    StructField,
    _build_fields,
    _field_tag,
    _select_imports,
    generate,
    main,
    parse_settings,
    render_struct,
    run,
    struct_name_for,
    write_struct,
)


def identity(source):
    return source


def users_table():
    return Table(
        "users",
        [
            Column("id", "integer", "NO", "nextval('users_id_seq'::regclass)"),
            Column("email", "character varying", "YES"),
            Column("created_at", "timestamp without time zone", "NO"),
        ],
    )


class FakeDatabase:
    """In-memory catalog implementing the Database protocol."""

    def __init__(self, catalog, failing_table=None):
        self.catalog = catalog
        self.failing_table = failing_table
        self.calls = []

    def list_tables(self):
        self.calls.append("list_tables")
        return [Table(name) for name in sorted(self.catalog)]

    def prepare_column_query(self):
        self.calls.append("prepare_column_query")

    def fetch_columns(self, table):
        self.calls.append(f"fetch_columns:{table.name}")
        if table.name == self.failing_table:
            raise IntrospectionError("Failed to fetch columns: boom", table.name)
        table.columns.extend(self.catalog[table.name])


class TestFieldTag:
    def test_db_tag_only(self):
        column = Column("email", "text", "YES")
        assert _field_tag(column, Settings()) == 'db:"email"'

    def test_with_structable_annotation(self):
        column = Column("email", "text", "YES")
        assert _field_tag(column, Settings(structable=True)) == 'db:"email" stbl:"email"'

    def test_structable_only_omits_db_tag(self):
        column = Column("email", "text", "YES")
        assert _field_tag(column, Settings(structable_only=True)) == 'stbl:"email"'

    def test_postgres_serial_primary_key_markers(self):
        column = Column("id", "integer", "NO", "nextval('t_id_seq'::regclass)")
        assert _field_tag(column, Settings(structable=True)) == (
            'db:"id" stbl:"id,PRIMARY_KEY,SERIAL,AUTO_INCREMENT"'
        )

    def test_mysql_auto_increment_primary_key_markers(self):
        column = Column("id", "int", "NO", None, "PRI", "auto_increment")
        assert _field_tag(column, Settings(structable_only=True)) == (
            'stbl:"id,PRIMARY_KEY,SERIAL,AUTO_INCREMENT"'
        )

    def test_markers_require_annotations(self):
        column = Column("id", "int", "NO", None, "PRI", "auto_increment")
        assert _field_tag(column, Settings()) == 'db:"id"'


class TestBuildFields:
    def test_build_fields_camel_case(self):
        fields, has_nullable, temporal_count = _build_fields(users_table(), Settings())

        assert fields == [
            StructField("Id", "int", 'db:"id"'),
            StructField("Email", "sql.NullString", 'db:"email"'),
            StructField("CreatedAt", "time.Time", 'db:"created_at"'),
        ]
        assert has_nullable
        assert temporal_count == 1

    def test_build_fields_original_format(self):
        fields, _, _ = _build_fields(users_table(), Settings(output_format="o"))
        assert [f.name for f in fields] == ["Id", "Email", "Created_at"]

    def test_build_fields_no_nullable_no_temporal(self):
        table = Table("tags", [Column("id", "integer", "NO"), Column("label", "text", "NO")])
        fields, has_nullable, temporal_count = _build_fields(table, Settings())

        assert len(fields) == 2
        assert not has_nullable
        assert temporal_count == 0

    def test_build_fields_counts_temporal_columns(self):
        table = Table(
            "events",
            [
                Column("starts", "date", "NO"),
                Column("ends", "timestamp", "NO"),
                Column("label", "text", "NO"),
            ],
        )
        _, _, temporal_count = _build_fields(table, Settings())
        assert temporal_count == 2


class TestSelectImports:
    @pytest.mark.parametrize(
        "has_nullable,temporal_count,recorder,expected",
        [
            (False, 0, False, ([], [])),
            (True, 0, False, ([NULL_SAFETY_IMPORT], [])),
            (False, 2, False, ([TIME_IMPORT], [])),
            (True, 1, False, ([NULL_SAFETY_IMPORT], [NULL_TIME_IMPORT])),
            (False, 0, True, ([], [RECORDER_IMPORT])),
            (True, 1, True, ([NULL_SAFETY_IMPORT], [NULL_TIME_IMPORT, RECORDER_IMPORT])),
        ],
    )
    def test_select_imports(self, has_nullable, temporal_count, recorder, expected):
        assert _select_imports(has_nullable, temporal_count, recorder) == expected


class TestStructNameFor:
    def test_camel_case(self):
        assert struct_name_for("order_items", Settings()) == "OrderItems"

    def test_prefix_and_suffix(self):
        settings = Settings(prefix="db_", suffix="_dto")
        assert struct_name_for("users", settings) == "DbUsersDto"

    def test_original_format(self):
        settings = Settings(output_format="o", suffix="_row")
        assert struct_name_for("order_items", settings) == "Order_items_row"


class TestRenderStruct:
    def test_render_users(self):
        struct_name, source = render_struct(users_table(), Settings(), GeneratorContext())

        assert struct_name == "Users"
        assert source == (
            "package dto\n"
            "\n"
            "import (\n"
            '\t"database/sql"\n'
            "\n"
            '\t"github.com/lib/pq"\n'
            ")\n"
            "\n"
            "type Users struct {\n"
            '\tId int `db:"id"`\n'
            '\tEmail sql.NullString `db:"email"`\n'
            '\tCreatedAt time.Time `db:"created_at"`\n'
            "}\n"
        )

    def test_render_without_imports(self):
        table = Table("tags", [Column("id", "integer", "NO"), Column("label", "text", "NO")])
        _, source = render_struct(table, Settings(package_name="models"), GeneratorContext())

        assert source == (
            "package models\n"
            "\n"
            "type Tags struct {\n"
            '\tId int `db:"id"`\n'
            '\tLabel string `db:"label"`\n'
            "}\n"
        )
        assert "import" not in source

    def test_render_time_import_without_nullable(self):
        table = Table("events", [Column("at", "timestamp", "NO")])
        _, source = render_struct(table, Settings(), GeneratorContext())

        assert 'import (\n\t"time"\n)\n' in source
        assert "github.com/lib/pq" not in source

    def test_null_safety_import_appears_once(self):
        table = Table(
            "profiles",
            [
                Column("bio", "text", "YES"),
                Column("age", "integer", "YES"),
                Column("active", "boolean", "YES"),
            ],
        )
        _, source = render_struct(table, Settings(), GeneratorContext())
        assert source.count('"database/sql"') == 1

    def test_render_non_ascii_and_separator_only_column_names(self):
        table = Table(
            "menu",
            [Column("café_name", "text", "NO"), Column("__", "text", "NO")],
        )
        _, source = render_struct(table, Settings(), GeneratorContext())

        assert '\tCaféName string `db:"café_name"`\n' in source
        assert '\t__ string `db:"__"`\n' in source
        assert "\t string" not in source

    def test_unrecognized_not_null_type_gets_no_sql_import(self):
        # The fallback type is sql.NullString, but imports follow the
        # catalog nullability only, so no "database/sql" import is added
        table = Table("documents", [Column("payload", "json", "NO")])
        _, source = render_struct(table, Settings(), GeneratorContext())

        assert '\tPayload sql.NullString `db:"payload"`\n' in source
        assert "import" not in source
        assert '"database/sql"' not in source

    def test_render_with_recorder(self):
        settings = Settings(structable=True, structable_recorder=True)
        _, source = render_struct(users_table(), settings, GeneratorContext())

        assert '\t"github.com/lib/pq"\n\t"github.com/Masterminds/structable"\n' in source
        assert source.endswith("\n\tstructable.Recorder\n}\n")
        assert 'stbl:"id,PRIMARY_KEY,SERIAL,AUTO_INCREMENT"' in source

    def test_recorder_ignored_without_annotations(self):
        settings = Settings(structable_recorder=True)
        _, source = render_struct(users_table(), settings, GeneratorContext())

        assert "structable" not in source

    def test_structable_only_removes_db_tags(self):
        settings = Settings(structable_only=True)
        _, source = render_struct(users_table(), settings, GeneratorContext())

        assert "db:" not in source
        field_lines = [line for line in source.splitlines() if line.startswith("\t") and "`" in line]
        assert len(field_lines) == 3
        assert all("stbl:" in line for line in field_lines)


class TestWriteStruct:
    def test_write_struct(self, tmp_path):
        settings = Settings(output_path=str(tmp_path))

        spec = write_struct(users_table(), settings, GeneratorContext(), identity)

        assert spec.struct_name == "Users"
        assert spec.path == tmp_path / "Users.go"
        assert "type Users struct {" in spec.path.read_text()

    def test_write_struct_uses_formatter(self, tmp_path):
        settings = Settings(output_path=str(tmp_path))
        formatter = MagicMock(return_value="formatted\n")

        spec = write_struct(users_table(), settings, GeneratorContext(), formatter)

        formatter.assert_called_once()
        assert spec.path.read_text() == "formatted\n"

    def test_write_struct_overwrites(self, tmp_path):
        (tmp_path / "Users.go").write_text("stale")
        settings = Settings(output_path=str(tmp_path))

        write_struct(users_table(), settings, GeneratorContext(), identity)

        assert "stale" not in (tmp_path / "Users.go").read_text()

    def test_write_struct_failure(self, tmp_path):
        settings = Settings(output_path=str(tmp_path / "missing"))

        with pytest.raises(EmissionError) as exc_info:
            write_struct(users_table(), settings, GeneratorContext(), identity)
        assert exc_info.value.path.endswith("Users.go")


class TestGenerate:
    def test_generate_all_tables_in_order(self, tmp_path):
        database = FakeDatabase(
            {
                "users": users_table().columns,
                "accounts": [Column("id", "integer", "NO")],
            }
        )
        settings = Settings(output_path=str(tmp_path))

        specs = generate(database, settings, identity)

        assert [spec.struct_name for spec in specs] == ["Accounts", "Users"]
        assert (tmp_path / "Accounts.go").exists()
        assert (tmp_path / "Users.go").exists()
        assert database.calls == [
            "list_tables",
            "prepare_column_query",
            "fetch_columns:accounts",
            "fetch_columns:users",
        ]

    def test_generate_no_tables(self, tmp_path):
        specs = generate(FakeDatabase({}), Settings(output_path=str(tmp_path)), identity)
        assert specs == []
        assert list(tmp_path.iterdir()) == []

    def test_generate_aborts_on_fetch_failure(self, tmp_path):
        database = FakeDatabase(
            {
                "accounts": [Column("id", "integer", "NO")],
                "orders": [Column("id", "integer", "NO")],
                "users": [Column("id", "integer", "NO")],
            },
            failing_table="orders",
        )

        with pytest.raises(IntrospectionError):
            generate(database, Settings(output_path=str(tmp_path)), identity)

        # Earlier output is left in place, later tables are never processed
        assert (tmp_path / "Accounts.go").exists()
        assert not (tmp_path / "Users.go").exists()
        assert "fetch_columns:users" not in database.calls

    def test_generate_verbose(self, tmp_path, capsys):
        database = FakeDatabase({"users": users_table().columns})
        settings = Settings(output_path=str(tmp_path), verbose=True)

        generate(database, settings, identity)

        out = capsys.readouterr().out
        assert "> count of tables: 1" in out
        assert "> processing table 'users'" in out


class TestRun:
    def test_run(self, tmp_path, capsys):
        connection = MagicMock()

        @contextmanager
        def fake_open_connection(settings):
            yield connection

        database = FakeDatabase({"users": users_table().columns})

        with patch(
            "tables_to_go.struct_codegen.main.open_connection", fake_open_connection
        ), patch(
            "tables_to_go.struct_codegen.main.select_database", return_value=database
        ) as mock_select:
            specs = run(Settings(output_path=str(tmp_path), port=""), identity)

        context = mock_select.call_args[0][0]
        assert context.connection is connection
        assert context.settings.port == "5432"
        assert [spec.struct_name for spec in specs] == ["Users"]

        out = capsys.readouterr().out
        assert "running for 'pg'..." in out
        assert "done!" in out

    def test_run_verifies_before_connecting(self, tmp_path):
        with patch("tables_to_go.struct_codegen.main.open_connection") as mock_open:
            with pytest.raises(ConfigurationError):
                run(Settings(db_type="oracle", output_path=str(tmp_path)), identity)
        mock_open.assert_not_called()


class TestParseSettings:
    def test_defaults(self):
        settings = parse_settings([])
        assert settings == Settings(port="")

    def test_command_line_options(self):
        settings = parse_settings(
            [
                "-t", "mysql",
                "-u", "root",
                "-d", "shop",
                "--port", "3307",
                "-f", "o",
                "--package", "models",
                "--prefix", "db_",
                "--structable-only",
                "--structable-recorder",
                "-v",
            ]
        )
        assert settings.db_type == "mysql"
        assert settings.user == "root"
        assert settings.db_name == "shop"
        assert settings.port == "3307"
        assert settings.output_format == "o"
        assert settings.package_name == "models"
        assert settings.prefix == "db_"
        assert settings.structable_only
        assert settings.structable_recorder
        assert settings.verbose

    def test_config_file_with_override(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("db_type: mysql\ndb_name: shop\nport: 3307\nstructable: true\n")

        settings = parse_settings(["--config", str(config), "-d", "other"])

        assert settings.db_type == "mysql"
        assert settings.db_name == "other"
        assert settings.port == "3307"
        assert settings.structable

    def test_config_file_invalid(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("unknown_key: 1\n")

        with pytest.raises(ConfigurationError):
            parse_settings(["--config", str(config)])


class TestMain:
    def test_main_success(self, tmp_path, capsys):
        with patch("tables_to_go.struct_codegen.main.run", return_value=[]) as mock_run:
            main(["-o", str(tmp_path), "-v"])

        settings = mock_run.call_args[0][0]
        assert settings.output_path == str(tmp_path)
        assert "Generated 0 struct file(s)" in capsys.readouterr().out

    def test_main_invalid_output_path(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["-o", str(tmp_path / "nonexistent")])
        assert "Error:" in str(exc_info.value)
        assert "does not exist" in str(exc_info.value)

    def test_main_non_numeric_port(self, tmp_path):
        with patch("tables_to_go.struct_codegen.main.open_connection") as mock_open:
            with pytest.raises(SystemExit) as exc_info:
                main(["-t", "mysql", "--port", "abc", "-o", str(tmp_path)])
        assert "Error:" in str(exc_info.value)
        assert "Setting 'port'" in str(exc_info.value)
        mock_open.assert_not_called()

    def test_main_introspection_error(self, tmp_path):
        with patch(
            "tables_to_go.struct_codegen.main.run",
            side_effect=IntrospectionError("Failed to list tables: boom"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["-o", str(tmp_path)])
        assert "Failed to list tables" in str(exc_info.value)
