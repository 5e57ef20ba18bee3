"""
Driver & Connection Interfaces for multisql

A Driver turns a URL into a live Connection. A Connection runs statements
and queries against one data source and describes it through Metadata.

DESIGN PRINCIPLES:
-----------------
1. Every operation that touches the backend is a coroutine
2. Blocking client libraries run on worker threads (asyncio.to_thread)
3. Query parameters use ? placeholders (drivers convert as needed)
4. Errors raised by client libraries are wrapped in DriverError subclasses
5. close() is idempotent; any other call after close() raises ConnectionClosed

CONNECTION STATES:
-----------------
    connect() ──> Open ──close()──> Closed ──close()──> Closed
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Tuple

from multisql.core.logging import mask_url
from multisql.dialects import Dialect, StatementKind
from multisql.drivers.file_type import FileType
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionClosed, ConnectionFailed, DriverError, QueryError
from multisql.metadata import Metadata
from multisql.results import QueryResult

logger = logging.getLogger(__name__)

Params = Optional[Sequence[Any]]


class Connection(ABC):
    """
    Abstract live session against a data source.

    Subclasses implement the underscored hooks; the public coroutines take
    care of the closed-state check and of wrapping library errors.

    Usage:
        async with await manager.connect("sqlite::memory:") as connection:
            result = await connection.query("SELECT 1")
            row = await result.next()
    """

    def __init__(self, url: str):
        self._url = url
        self._closed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({mask_url(self._url)!r})"

    def url(self) -> str:
        """The URL the caller used to open this connection."""
        return self._url

    @abstractmethod
    def dialect(self) -> Dialect:
        pass

    def parse_sql(self, sql: str) -> StatementKind:
        """Classify ``sql`` as DDL, DML or a query using this connection's dialect."""
        return self.dialect().parse_sql(sql)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ConnectionClosed(f"Connection is closed: {mask_url(self._url)}")

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def execute(self, sql: str, params: Params = None) -> int:
        """
        Run a statement that returns no rows.

        Returns:
            Number of rows affected

        Raises:
            QueryError: If the backend rejects the statement
            ConnectionClosed: If the connection was closed
        """
        self._check_open()
        try:
            return await self._execute(sql, params)
        except DriverError:
            raise
        except Exception as e:
            raise QueryError(str(e), original_error=e) from e

    async def query(self, sql: str, params: Params = None) -> QueryResult:
        """
        Run a query and return a streaming result.

        Raises:
            QueryError: If the backend rejects the query
            ConnectionClosed: If the connection was closed
        """
        self._check_open()
        try:
            return await self._query(sql, params)
        except DriverError:
            raise
        except Exception as e:
            raise QueryError(str(e), original_error=e) from e

    async def metadata(self) -> Metadata:
        """Build a fresh snapshot of catalogs, schemas and tables."""
        self._check_open()
        try:
            return await self._metadata()
        except DriverError:
            raise
        except Exception as e:
            raise QueryError(f"Failed to read metadata: {e}", original_error=e) from e

    async def close(self) -> None:
        """Release the backend session. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._close()
        except DriverError:
            raise
        except Exception as e:
            raise ConnectionFailed(f"Error closing connection: {e}", original_error=e) from e
        logger.debug(f"Connection closed: {mask_url(self._url)}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _execute(self, sql: str, params: Params) -> int:
        pass

    @abstractmethod
    async def _query(self, sql: str, params: Params) -> QueryResult:
        pass

    @abstractmethod
    async def _metadata(self) -> Metadata:
        pass

    @abstractmethod
    async def _close(self) -> None:
        pass


class DelegatingConnection(Connection):
    """
    Forwards every operation to an inner connection.

    Used by driver chains: ``url()`` stays the URL the caller typed and
    ``dialect()`` can be overridden, everything else is the inner session.
    """

    def __init__(self, url: str, inner: Connection, dialect: Optional[Dialect] = None):
        super().__init__(url)
        self.inner = inner
        self._dialect = dialect

    def dialect(self) -> Dialect:
        return self._dialect or self.inner.dialect()

    async def _execute(self, sql: str, params: Params) -> int:
        return await self.inner.execute(sql, params)

    async def _query(self, sql: str, params: Params) -> QueryResult:
        return await self.inner.query(sql, params)

    async def _metadata(self) -> Metadata:
        metadata = await self.inner.metadata()
        if self._dialect is not None:
            metadata.dialect = self._dialect
        return metadata

    async def _close(self) -> None:
        await self.inner.close()


class Driver(ABC):
    """
    Abstract driver: a scheme plus a way to open connections for it.

    Each driver must implement:
    - connect(): Open a Connection for a URL

    and declare:
    - IDENTIFIER: the URL scheme it claims
    - FILE_TYPES: names of file types it can open (see file_type.py)
    """

    # URL scheme (e.g., "sqlite", "csv", "gzip")
    IDENTIFIER: str = "base"

    # File types this driver is dispatched for
    FILE_TYPES: Tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.IDENTIFIER!r})"

    def identifier(self) -> str:
        return self.IDENTIFIER

    def supports_file_type(self, file_type: FileType) -> bool:
        return file_type.name in self.FILE_TYPES

    @abstractmethod
    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        """
        Open a connection.

        Raises:
            InvalidUrl: If the URL cannot be used by this driver
            ConnectionFailed: If the backend cannot be reached
            Unauthorized: If credentials are rejected
            IoError: If a file cannot be read or fetched
        """
        pass


def resolve_password(url: DriverUrl, password: Optional[str]) -> Optional[str]:
    """An explicit password wins over the one embedded in the URL."""
    return password if password is not None else url.password
