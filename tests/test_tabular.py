"""
Tests for the tabular file drivers.

Every format holds the same two users; each is read through ``file://``
dispatch and through its own scheme.
"""

import pandas as pd
import pytest

from multisql.drivers.fwf_driver import column_name, parse_widths, split_line
from multisql.drivers.tabular import get_table_name, infer_column_types, sanitize_identifier
from multisql.errors import ConversionError, InvalidUrl, IoError
from multisql.values import Value, ValueType

from conftest import USERS_QUERY

EXPECTED_ROWS = [
    [Value.i64(1), Value.string("John Doe")],
    [Value.i64(2), Value.string("Jane Smith")],
]

TYPED_FORMATS = ["csv", "tsv", "json", "jsonl", "yaml", "xml", "avro", "parquet", "arrow", "orc", "xlsx", "ods"]


async def _query_users(manager, url):
    connection = await manager.connect(url)
    try:
        result = await connection.query(USERS_QUERY)
        return connection, result.columns(), await result.fetch_all()
    finally:
        await connection.close()


class TestTableNames:
    """Tests for deriving table names from file names."""

    @pytest.mark.parametrize("file_name,expected", [
        ("users.csv", "users"),
        ("/data/2024-users.csv", "_2024_users"),
        ("users.csv.gz", "users"),
        ("my report (final).xlsx", "my_report__final_"),
        (".hidden", "tbl"),
    ])
    def test_get_table_name(self, file_name, expected):
        assert get_table_name(file_name) == expected

    def test_sanitize_identifier(self):
        assert sanitize_identifier("Sheet 1") == "Sheet_1"


class TestFormats:
    """Tests for reading every format."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("extension", TYPED_FORMATS)
    async def test_file_dispatch(self, manager, users_file, extension):
        path = users_file(extension)
        _, columns, rows = await _query_users(manager, f"file://{path}")
        assert columns == ["id", "name"]
        assert rows == EXPECTED_ROWS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("extension", ["csv", "json", "parquet", "xlsx"])
    async def test_direct_scheme(self, manager, users_file, extension):
        path = users_file(extension)
        _, columns, rows = await _query_users(manager, f"{extension}://{path}")
        assert columns == ["id", "name"]
        assert rows == EXPECTED_ROWS

    @pytest.mark.asyncio
    async def test_fwf_reads_text(self, manager, users_file):
        path = users_file("fwf")
        _, columns, rows = await _query_users(manager, f"fwf://{path}?widths=4,15&headers=id,name")
        assert columns == ["id", "name"]
        assert rows == [
            [Value.string("1"), Value.string("John Doe")],
            [Value.string("2"), Value.string("Jane Smith")],
        ]

    @pytest.mark.asyncio
    async def test_fwf_requires_widths(self, manager, users_file):
        path = users_file("fwf")
        with pytest.raises(InvalidUrl):
            await manager.connect(f"fwf://{path}")

    @pytest.mark.asyncio
    async def test_table_name_from_file(self, manager, users_file):
        path = users_file("csv", name="2024-users")
        connection = await manager.connect(f"csv://{path}")
        try:
            result = await connection.query("SELECT count(*) FROM _2024_users")
            assert await result.next() == [Value.i64(2)]
        finally:
            await connection.close()


class TestDelimited:
    """Tests for delimited text options."""

    @pytest.mark.asyncio
    async def test_csv_url_reports_separator(self, manager, users_file):
        path = users_file("csv")
        connection, _, _ = await _query_users(manager, f"csv://{path}")
        assert connection.url() == f"csv://{path}?separator=%2C"

    @pytest.mark.asyncio
    async def test_tsv_url_reports_separator(self, manager, users_file):
        path = users_file("tsv")
        connection, _, _ = await _query_users(manager, f"tsv://{path}")
        assert connection.url() == f"tsv://{path}?separator=%09"

    @pytest.mark.asyncio
    async def test_file_url_keeps_inner_defaults(self, manager, users_file):
        path = users_file("csv")
        connection, _, _ = await _query_users(manager, f"file://{path}")
        assert connection.url() == f"file://{path}?separator=%2C"

    @pytest.mark.asyncio
    async def test_explicit_separator_kept(self, manager, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("id;name\n1;John Doe\n2;Jane Smith\n")
        connection, _, rows = await _query_users(manager, f"csv://{path}?separator=%3B")
        assert connection.url() == f"csv://{path}?separator=%3B"
        assert rows == EXPECTED_ROWS

    @pytest.mark.asyncio
    async def test_no_header(self, manager, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("1,John Doe\n2,Jane Smith\n")
        connection = await manager.connect(f"csv://{path}?has_header=false")
        try:
            result = await connection.query("SELECT * FROM users ORDER BY column_1")
            assert result.columns() == ["column_1", "column_2"]
            assert await result.fetch_all() == EXPECTED_ROWS
        finally:
            await connection.close()

    @pytest.mark.asyncio
    async def test_infer_schema_disabled(self, manager, users_file):
        path = users_file("csv")
        connection = await manager.connect(f"csv://{path}?infer_schema_length=0")
        try:
            result = await connection.query("SELECT id FROM users ORDER BY id")
            assert [row[0].type for row in await result.fetch_all()] == [ValueType.STRING, ValueType.STRING]
        finally:
            await connection.close()

    @pytest.mark.asyncio
    async def test_infer_schema_from_first_rows(self, manager, users_file):
        path = users_file("csv")
        connection = await manager.connect(f"csv://{path}?infer_schema_length=1")
        try:
            result = await connection.query("SELECT id, name FROM users ORDER BY id")
            assert await result.fetch_all() == EXPECTED_ROWS
        finally:
            await connection.close()

    @pytest.mark.asyncio
    async def test_value_after_inferred_rows_fails(self, manager, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("id,name\n1,John Doe\nx,Jane Smith\n")
        with pytest.raises(ConversionError):
            await manager.connect(f"csv://{path}?infer_schema_length=1")

    @pytest.mark.asyncio
    async def test_value_after_inferred_rows_ignored(self, manager, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("id,name\n1,John Doe\nx,Jane Smith\n")
        connection = await manager.connect(f"csv://{path}?infer_schema_length=1&ignore_errors=true")
        try:
            result = await connection.query("SELECT id IS NULL FROM users ORDER BY name")
            assert await result.fetch_all() == [[Value.bool(False)], [Value.bool(True)]]
        finally:
            await connection.close()

    @pytest.mark.asyncio
    async def test_bad_separator(self, manager, users_file):
        path = users_file("csv")
        with pytest.raises(ConversionError):
            await manager.connect(f"csv://{path}?separator=ab")

    @pytest.mark.asyncio
    async def test_missing_file(self, manager, tmp_path):
        with pytest.raises(IoError):
            await manager.connect(f"csv://{tmp_path}/missing.csv")


class TestSchemaInference:
    """Tests for typing columns from their first values."""

    def test_numeric_head_types_column(self):
        frame = infer_column_types(pd.DataFrame({"id": ["1", "2"], "name": ["John Doe", "3"]}), 1)
        assert frame["id"].tolist() == [1, 2]
        assert frame["name"].tolist() == ["John Doe", "3"]

    def test_mismatch_raises(self):
        with pytest.raises(ConversionError):
            infer_column_types(pd.DataFrame({"id": [1, "x"]}, dtype=object), 1)

    def test_mismatch_ignored(self):
        frame = infer_column_types(pd.DataFrame({"id": [1, "x"]}, dtype=object), 1, ignore_errors=True)
        assert frame["id"].iloc[0] == 1
        assert pd.isna(frame["id"].iloc[1])

    def test_nested_values_stay(self):
        frame = infer_column_types(pd.DataFrame({"tags": [["a"], ["b"]]}), 2)
        assert frame["tags"].tolist() == [["a"], ["b"]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_type,content", [
        ("json", '[{"id": 1, "name": "John Doe"}, {"id": "x", "name": "Jane Smith"}]'),
        ("yaml", "- {id: 1, name: John Doe}\n- {id: x, name: Jane Smith}\n"),
    ])
    async def test_documents_honor_ignore_errors(self, manager, tmp_path, file_type, content):
        path = tmp_path / f"users.{file_type}"
        path.write_text(content)
        with pytest.raises(ConversionError):
            await manager.connect(f"{file_type}://{path}?infer_schema_length=1")

        connection = await manager.connect(f"{file_type}://{path}?infer_schema_length=1&ignore_errors=true")
        try:
            result = await connection.query("SELECT id IS NULL FROM users ORDER BY name")
            assert await result.fetch_all() == [[Value.bool(False)], [Value.bool(True)]]
        finally:
            await connection.close()


class TestTabularMetadata:
    """Tests for synthesized metadata."""

    @pytest.mark.asyncio
    async def test_single_schema(self, manager, users_file):
        path = users_file("parquet")
        connection = await manager.connect(f"parquet://{path}")
        try:
            metadata = await connection.metadata()
        finally:
            await connection.close()

        assert [catalog.name for catalog in metadata.catalogs()] == ["default"]
        schema = metadata.current_schema()
        assert schema.name == "duckdb"
        assert schema.table_names() == ["users"]
        assert schema.get("users").column_names() == ["id", "name"]

    @pytest.mark.asyncio
    async def test_workbook_sheets(self, manager, tmp_path):
        path = tmp_path / "report.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame({"id": [1]}).to_excel(writer, sheet_name="Sheet 1", index=False)
            pd.DataFrame({"id": [2]}).to_excel(writer, sheet_name="totals", index=False)

        connection = await manager.connect(f"xlsx://{path}")
        try:
            metadata = await connection.metadata()
        finally:
            await connection.close()
        assert metadata.current_schema().table_names() == ["report_Sheet_1", "report_totals"]


class TestFwfHelpers:
    """Tests for fixed-width parsing helpers."""

    @pytest.mark.parametrize("index,expected", [(0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ"), (702, "AAA")])
    def test_column_name(self, index, expected):
        assert column_name(index) == expected

    def test_parse_widths(self):
        assert parse_widths("4,15") == [4, 15]
        with pytest.raises(ConversionError):
            parse_widths("4,x")
        with pytest.raises(ConversionError):
            parse_widths("0")

    def test_split_line(self):
        assert split_line("1   John Doe       ", [4, 15]) == ["1", "John Doe"]
        assert split_line("12", [4, 15]) == ["12", ""]
