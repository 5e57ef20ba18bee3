"""
Shared implementation for DB-API 2.0 client libraries.

sqlite3, duckdb, psycopg2, mysql-connector, snowflake-connector, crate and
libsql all expose ``connection.cursor()``, ``cursor.execute()``,
``cursor.description`` and ``cursor.fetchmany()``. DbApiConnection drives
them from worker threads; CursorQueryResult streams rows ``prefetch_size``
at a time and closes the cursor when the stream ends.
"""

import asyncio
import logging
import weakref
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple, Type

from multisql.core.config import settings
from multisql.core.logging import mask_url
from multisql.dialects import Dialect
from multisql.drivers.base import Connection, Params
from multisql.errors import QueryError
from multisql.results import MemoryQueryResult, QueryResult
from multisql.values import Row, ValueConverter

logger = logging.getLogger(__name__)


def convert_placeholders(sql: str, placeholder: str = "%s") -> str:
    """
    Rewrite ``?`` placeholders outside quoted text to ``placeholder``.

    For ``%s`` style drivers every literal ``%`` is doubled first, since the
    client formats the whole statement.
    """
    if placeholder == "?":
        return sql
    if placeholder == "%s":
        sql = sql.replace("%", "%%")

    converted = []
    quote = None
    for char in sql:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "?":
            converted.append(placeholder)
            continue
        converted.append(char)
    return "".join(converted)


# SQLSTATE undefined table/function and base table not found, MySQL ER_NO_SUCH_TABLE
MISSING_OBJECT_CODES = {"42P01", "42883", "42S02", "1146"}

_MISSING_OBJECT_MESSAGES = ("no such table", "does not exist", "unknown table", "unknown_table")


def is_missing_object(error: Exception) -> bool:
    """Whether ``error`` reports a table, view or function the server does not have."""
    for attribute in ("pgcode", "sqlstate", "errno"):
        code = getattr(error, attribute, None)
        if code is not None and str(code) in MISSING_OBJECT_CODES:
            return True
    # duckdb raises CatalogException for unknown catalog objects
    if type(error).__name__ == "CatalogException":
        return True
    message = str(error).lower()
    return any(text in message for text in _MISSING_OBJECT_MESSAGES)


def _close_abandoned(connection: Any, url: str) -> None:
    logger.debug(f"Closing unclosed connection: {url}")
    try:
        connection.close()
    except Exception as e:
        logger.warning(f"Error closing unclosed connection {url}: {e}")


class CursorQueryResult(QueryResult):
    """Streams rows from an open DB-API cursor."""

    def __init__(
        self,
        cursor: Any,
        converter: ValueConverter,
        prefetch_size: Optional[int] = None,
    ):
        self._cursor = cursor
        self._converter = converter
        self._prefetch_size = prefetch_size or settings.prefetch_size
        self._buffer: Deque[Sequence[Any]] = deque()
        self._exhausted = False

    def columns(self) -> List[str]:
        return self._converter.columns

    async def next(self) -> Optional[Row]:
        if not self._buffer and not self._exhausted:
            await self._fill()
        if not self._buffer:
            return None
        return self._converter.convert_row(self._buffer.popleft())

    async def _fill(self) -> None:
        try:
            rows = await asyncio.to_thread(self._cursor.fetchmany, self._prefetch_size)
        except Exception as e:
            await self.close()
            raise QueryError(f"Failed to fetch rows: {e}", original_error=e) from e
        if rows:
            self._buffer.extend(rows)
        else:
            await self.close()

    async def close(self) -> None:
        self._exhausted = True
        self._buffer.clear()
        cursor, self._cursor = self._cursor, None
        if cursor is not None:
            try:
                await asyncio.to_thread(cursor.close)
            except Exception as e:
                logger.warning(f"Error closing cursor: {e}")


class DbApiConnection(Connection):
    """
    Connection over a DB-API 2.0 connection object.

    Subclasses set PLACEHOLDER and CONVERTER and implement _metadata(),
    usually on top of _fetch_all().
    """

    # Native placeholder style of the client library
    PLACEHOLDER: str = "?"

    # Maps client objects to Values
    CONVERTER: Type[ValueConverter] = ValueConverter

    def __init__(self, url: str, connection: Any, dialect: Dialect):
        super().__init__(url)
        self._connection = connection
        self._dialect = dialect
        self._finalizer = weakref.finalize(self, _close_abandoned, connection, mask_url(url))

    def dialect(self) -> Dialect:
        return self._dialect

    def _prepare(self, sql: str, params: Params) -> Tuple[str, Optional[List[Any]]]:
        if not params:
            return sql, None
        return convert_placeholders(sql, self.PLACEHOLDER), list(params)

    def _run(self, cursor: Any, sql: str, params: Optional[List[Any]]) -> None:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)

    def _error_code(self, error: Exception) -> Optional[str]:
        for attribute in ("pgcode", "sqlstate", "errno", "sqlite_errorname"):
            code = getattr(error, attribute, None)
            if code:
                return str(code)
        return None

    def _query_error(self, error: Exception) -> QueryError:
        return QueryError(str(error).strip(), sql_code=self._error_code(error), original_error=error)

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    async def _execute(self, sql: str, params: Params) -> int:
        sql, values = self._prepare(sql, params)

        def run() -> int:
            cursor = self._connection.cursor()
            try:
                self._run(cursor, sql, values)
                return max(cursor.rowcount or 0, 0)
            finally:
                cursor.close()

        try:
            return await asyncio.to_thread(run)
        except Exception as e:
            raise self._query_error(e) from e

    async def _query(self, sql: str, params: Params) -> QueryResult:
        sql, values = self._prepare(sql, params)

        def run() -> Any:
            cursor = self._connection.cursor()
            try:
                self._run(cursor, sql, values)
            except Exception:
                cursor.close()
                raise
            return cursor

        try:
            cursor = await asyncio.to_thread(run)
        except Exception as e:
            raise self._query_error(e) from e

        if cursor.description is None:
            await asyncio.to_thread(cursor.close)
            return MemoryQueryResult([], [])

        columns = [column[0] for column in cursor.description]
        column_types = [column[1] for column in cursor.description]
        return CursorQueryResult(cursor, self.CONVERTER(columns, column_types))

    async def _fetch_all(self, sql: str, params: Params = None) -> List[Tuple[Any, ...]]:
        """Run a catalog query and return every row as a tuple."""
        sql, values = self._prepare(sql, params)

        def run() -> List[Tuple[Any, ...]]:
            cursor = self._connection.cursor()
            try:
                self._run(cursor, sql, values)
                return [tuple(row) for row in cursor.fetchall()]
            finally:
                cursor.close()

        try:
            return await asyncio.to_thread(run)
        except Exception as e:
            if is_missing_object(e):
                logger.warning(f"Catalog query skipped, missing object: {str(e).strip()}")
                return []
            raise self._query_error(e) from e

    async def _fetch_dicts(self, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        """Run a catalog query and return every row keyed by lower-cased column name."""
        sql, values = self._prepare(sql, params)

        def run() -> List[Dict[str, Any]]:
            cursor = self._connection.cursor()
            try:
                self._run(cursor, sql, values)
                names = [column[0].lower() for column in cursor.description or ()]
                return [dict(zip(names, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

        try:
            return await asyncio.to_thread(run)
        except Exception as e:
            if is_missing_object(e):
                logger.warning(f"Catalog query skipped, missing object: {str(e).strip()}")
                return []
            raise self._query_error(e) from e

    async def _close(self) -> None:
        self._finalizer.detach()
        connection, self._connection = self._connection, None
        if connection is not None:
            await asyncio.to_thread(connection.close)
