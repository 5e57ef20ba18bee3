"""
DuckDB Driver for multisql

DuckDB is an embedded analytical database. It backs this driver and the
in-memory engine every tabular-file driver registers its frames in.

URL forms:
    duckdb://                       (in-memory)
    duckdb:///path/to/database.duckdb
    duckdb:///path/to/database.duckdb?read_only=true

Value mapping (duckdb Python objects):
    BOOLEAN -> Bool, integer types -> I64 (U64 above the signed range),
    FLOAT/DOUBLE -> F64, DECIMAL -> Decimal, VARCHAR -> String, BLOB -> Bytes,
    DATE -> Date, TIME -> Time, TIMESTAMP -> DateTime, UUID -> Uuid,
    LIST -> Array, STRUCT/MAP -> Struct. INTERVAL is not supported.
"""

import asyncio
import logging
from typing import Any, Optional

try:
    import duckdb
    DUCKDB_AVAILABLE = True
except ImportError:
    DUCKDB_AVAILABLE = False
    duckdb = None

from multisql.dialects import DUCKDB, Dialect
from multisql.drivers.base import Connection, Driver, Params
from multisql.drivers.dbapi import DbApiConnection
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed
from multisql.metadata import (
    Catalog,
    Column,
    ForeignKey,
    Index,
    Metadata,
    PrimaryKey,
    Schema,
    Table,
    View,
)

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


def _as_list(value: Any) -> list:
    """duckdb reports some list columns as text (``[a, b]``) depending on version."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    text = str(value).strip().strip("[]")
    return [item.strip().strip('"') for item in text.split(",") if item.strip()]


class DuckDBConnection(DbApiConnection):
    """Connection to a DuckDB database."""

    PLACEHOLDER = "?"

    def __init__(self, url: str, connection: Any, dialect: Dialect = DUCKDB):
        super().__init__(url, connection, dialect)

    @property
    def native(self) -> Any:
        """The underlying duckdb connection."""
        return self._connection

    async def _execute(self, sql: str, params: Params) -> int:
        sql, values = self._prepare(sql, params)

        def run() -> int:
            cursor = self._connection.cursor()
            try:
                self._run(cursor, sql, values)
                # DML reports its row count as a single "Count" row
                description = cursor.description or ()
                if len(description) == 1 and str(description[0][0]).lower() == "count":
                    row = cursor.fetchone()
                    return int(row[0]) if row else 0
                return 0
            finally:
                cursor.close()

        try:
            return await asyncio.to_thread(run)
        except Exception as e:
            raise self._query_error(e) from e

    async def _metadata(self) -> Metadata:
        metadata = Metadata(self.dialect())
        current_database, current_schema = (await self._fetch_all(
            "SELECT current_database(), current_schema()"
        ))[0]

        catalog = metadata.add(Catalog(current_database, current=True))
        rows = await self._fetch_all(
            "SELECT schema_name FROM information_schema.schemata "
            "WHERE catalog_name = ? ORDER BY schema_name",
            [current_database],
        )
        for (schema_name,) in rows:
            catalog.add(Schema(schema_name, current=schema_name == current_schema))

        schema = catalog.get(current_schema) or catalog.add(Schema(current_schema, current=True))
        await self._load_tables(current_database, schema)
        await self._load_indexes(current_database, schema)
        await self._load_constraints(current_database, schema)
        return metadata

    async def _load_tables(self, database: str, schema: Schema, source_schema: Optional[str] = None) -> None:
        sql = """
            SELECT
                t.table_type,
                c.table_name,
                c.column_name,
                c.data_type,
                c.is_nullable,
                c.column_default
            FROM
                information_schema.columns c
                JOIN information_schema.tables t
                  ON t.table_catalog = c.table_catalog
                 AND t.table_schema = c.table_schema
                 AND t.table_name = c.table_name
            WHERE
                c.table_catalog = ?
                AND c.table_schema = ?
            ORDER BY
                c.table_name,
                c.ordinal_position
        """
        for table_type, table_name, column_name, data_type, is_nullable, default in await self._fetch_all(
            sql, [database, source_schema or schema.name]
        ):
            column = Column(column_name, data_type, is_nullable == "NO", default)
            if table_type == "VIEW":
                view = schema.get_view(table_name) or schema.add_view(View(table_name))
                view.add_column(column)
            else:
                table = schema.get(table_name) or schema.add(Table(table_name))
                table.add_column(column)

    async def _load_indexes(self, database: str, schema: Schema) -> None:
        rows = await self._fetch_dicts(
            "SELECT * FROM duckdb_indexes() WHERE database_name = ? AND schema_name = ?",
            [database, schema.name],
        )
        for row in rows:
            table = schema.get(row["table_name"])
            if table is None:
                continue
            table.add_index(Index(row["index_name"], _as_list(row.get("expressions")), bool(row.get("is_unique"))))

    async def _load_constraints(self, database: str, schema: Schema) -> None:
        rows = await self._fetch_dicts(
            "SELECT * FROM duckdb_constraints() "
            "WHERE database_name = ? AND schema_name = ? "
            "AND constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY')",
            [database, schema.name],
        )
        for row in rows:
            table = schema.get(row["table_name"])
            if table is None:
                continue
            columns = _as_list(row.get("constraint_column_names"))
            if row["constraint_type"] == "PRIMARY KEY":
                table.set_primary_key(PrimaryKey("PRIMARY", columns))
                table.add_index(Index("PRIMARY", list(columns), unique=True))
            else:
                name = row.get("constraint_name") or f"{table.name}_{'_'.join(columns)}_fk"
                table.add_foreign_key(ForeignKey(
                    name,
                    columns,
                    referenced_table=row.get("referenced_table") or "",
                    referenced_columns=_as_list(row.get("referenced_column_names")),
                ))


class DuckDBDriver(Driver):
    """Driver for DuckDB databases and ``.duckdb`` files."""

    IDENTIFIER = "duckdb"
    FILE_TYPES = ("duckdb",)

    def __init__(self):
        if not DUCKDB_AVAILABLE:
            raise ConnectionFailed("duckdb not installed. Run: pip install duckdb")

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        parsed = DriverUrl(url)
        path = parsed.raw.split(":", 1)[1].split("?", 1)[0]
        database = MEMORY if path in ("", "//", MEMORY) else parsed.file_path()
        read_only = parsed.bool_param("read_only", False)

        try:
            connection = await asyncio.to_thread(duckdb.connect, database=database, read_only=read_only)
        except Exception as e:
            raise ConnectionFailed(f"Failed to connect to DuckDB: {e}", original_error=e) from e

        logger.info(f"DuckDB connected: {database}")
        return DuckDBConnection(url, connection)
