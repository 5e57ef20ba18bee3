"""
LibSQL Driver for multisql

URL forms:
    libsql://                                         (in-memory)
    libsql:///path/to/local.db                        (local file)
    libsql://my-db.turso.io?auth_token=<token>        (remote, synced into memory)

LibSQL is SQLite compatible: values map as in the SQLite driver and the
catalog is read with the same pragma queries.
"""

import asyncio
import logging
from typing import Any, Optional

try:
    import libsql_experimental as libsql
    LIBSQL_AVAILABLE = True
except ImportError:
    LIBSQL_AVAILABLE = False
    libsql = None

from multisql.core.logging import mask_url
from multisql.dialects import LIBSQL
from multisql.drivers.base import Connection, Driver, resolve_password
from multisql.drivers.sqlite_driver import SQLiteConnection
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class LibSQLDriver(Driver):
    """Driver for local and remote LibSQL databases (libsql-experimental)."""

    IDENTIFIER = "libsql"

    def __init__(self):
        if not LIBSQL_AVAILABLE:
            raise ConnectionFailed("libsql-experimental not installed. Run: pip install libsql-experimental")

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        parsed = DriverUrl(url)

        def open_database() -> Any:
            if parsed.host:
                token = parsed.param("auth_token") or resolve_password(parsed, password) or ""
                connection = libsql.connect(MEMORY, sync_url=f"libsql://{parsed.host}", auth_token=token)
                connection.sync()
                return connection
            path = parsed.path
            return libsql.connect(path if path not in ("", "/") else MEMORY)

        try:
            connection = await asyncio.to_thread(open_database)
        except Exception as e:
            raise ConnectionFailed(f"Failed to connect to LibSQL: {e}", original_error=e) from e

        logger.info(f"LibSQL connected: {mask_url(url)}")
        return SQLiteConnection(url, connection, LIBSQL)
