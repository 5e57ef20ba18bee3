"""
SQLite Driver for multisql

URL forms:
    sqlite::memory:
    sqlite:///path/to/database.sqlite3
    sqlite:///path/to/database.sqlite3?mode=ro

Value mapping (sqlite3 storage classes):
    INTEGER -> I64, REAL -> F64, TEXT -> String, BLOB -> Bytes, NULL -> Null

Metadata is read from pragma_database_list, sqlite_master and the
pragma_table_info / pragma_index_list / pragma_foreign_key_list functions.
"""

import asyncio
import logging
import sqlite3
from typing import Any, Optional

from multisql.dialects import SQLITE, Dialect
from multisql.drivers.base import Connection, Driver
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


class SQLiteConnection(DbApiConnection):
    """Connection to a SQLite database file or in-memory database."""

    PLACEHOLDER = "?"

    def __init__(self, url: str, connection: Any, dialect: Dialect = SQLITE):
        super().__init__(url, connection, dialect)

    async def _metadata(self) -> Metadata:
        metadata = Metadata(self.dialect())
        catalog = metadata.add(Catalog("default", current=True))

        for (name,) in await self._fetch_all("SELECT name FROM pragma_database_list ORDER BY name"):
            schema = catalog.add(Schema(name, current=name == "main"))
            if schema.current:
                await self._load_tables(schema)
                await self._load_indexes(schema)
                await self._load_foreign_keys(schema)
        return metadata

    async def _load_tables(self, schema: Schema) -> None:
        sql = """
            SELECT
                m.type,
                m.name,
                p.name,
                p.type,
                p."notnull",
                p.dflt_value,
                p.pk
            FROM
                sqlite_master m
                JOIN pragma_table_info(m.name) p
            WHERE
                m.type IN ('table', 'view')
                AND m.name NOT LIKE 'sqlite_%'
            ORDER BY
                m.name,
                p.cid
        """
        primary_keys = {}
        for kind, table_name, column_name, column_type, not_null, default, pk in await self._fetch_all(sql):
            column = Column(column_name, column_type or "", bool(not_null), default)
            if kind == "view":
                view = schema.get_view(table_name) or schema.add_view(View(table_name))
                view.add_column(column)
                continue

            table = schema.get(table_name) or schema.add(Table(table_name))
            table.add_column(column)
            if pk:
                primary_keys.setdefault(table_name, []).append((pk, column_name))

        for table_name, columns in primary_keys.items():
            schema.get(table_name).set_primary_key(
                PrimaryKey("PRIMARY", [name for _, name in sorted(columns)])
            )

    async def _load_indexes(self, schema: Schema) -> None:
        sql = """
            SELECT
                m.tbl_name,
                il.name,
                ii.name,
                il."unique"
            FROM
                sqlite_master m,
                pragma_index_list(m.name) il,
                pragma_index_info(il.name) ii
            WHERE
                m.type = 'table'
            ORDER BY
                il.name,
                ii.seqno
        """
        indexes = {}
        for table_name, index_name, column_name, unique in await self._fetch_all(sql):
            key = (table_name, index_name)
            if key not in indexes:
                indexes[key] = Index(index_name, [], bool(unique))
            indexes[key].columns.append(column_name)

        for (table_name, index_name), index in indexes.items():
            table = schema.get(table_name)
            if table is None:
                continue
            primary_key = table.primary_key()
            # The automatic index backing the primary key is reported as PRIMARY
            if (
                primary_key is not None
                and index_name.startswith("sqlite_autoindex_")
                and index.columns == primary_key.columns
            ):
                continue
            table.add_index(index)

        for table in schema.tables():
            primary_key = table.primary_key()
            if primary_key is not None:
                table.add_index(Index("PRIMARY", list(primary_key.columns), unique=True))

    async def _load_foreign_keys(self, schema: Schema) -> None:
        sql = """
            SELECT
                m.name,
                f.id,
                f."from",
                f."table",
                f."to"
            FROM
                sqlite_master m
                JOIN pragma_foreign_key_list(m.name) f
            WHERE
                m.type = 'table'
            ORDER BY
                m.name,
                f.id,
                f.seq
        """
        for table_name, key_id, column, referenced_table, referenced_column in await self._fetch_all(sql):
            table = schema.get(table_name)
            if table is None:
                continue
            name = f"{table_name}_fk_{key_id}"
            key = table.get_foreign_key(name) or table.add_foreign_key(
                ForeignKey(name, referenced_table=referenced_table)
            )
            key.columns.append(column)
            if referenced_column:
                key.referenced_columns.append(referenced_column)


class SQLiteDriver(Driver):
    """
    Driver for SQLite databases (stdlib sqlite3).

    Also opens ``.sqlite``/``.sqlite3``/``.db`` files dispatched by the
    file, compression and remote drivers.
    """

    IDENTIFIER = "sqlite"
    FILE_TYPES = ("sqlite",)

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        parsed = DriverUrl(url)
        path = parsed.raw.split(":", 1)[1]
        path = MEMORY if path in ("", "//", MEMORY) else parsed.file_path()
        mode = parsed.param("mode")

        def open_database() -> sqlite3.Connection:
            if mode and path != MEMORY:
                return sqlite3.connect(
                    f"file:{path}?mode={mode}",
                    uri=True,
                    isolation_level=None,
                    check_same_thread=False,
                )
            return sqlite3.connect(path, isolation_level=None, check_same_thread=False)

        try:
            connection = await asyncio.to_thread(open_database)
        except sqlite3.Error as e:
            raise ConnectionFailed(f"Failed to connect to SQLite: {e}", original_error=e) from e

        logger.info(f"SQLite connected: {path}")
        return SQLiteConnection(url, connection)
