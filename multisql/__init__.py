"""
multisql - Drivers and query pipeline for a multi-source SQL shell

Connect to relational databases, key-value stores and data files through one
URL-driven interface:

    from multisql import DriverManager

    manager = DriverManager.default()
    connection = await manager.connect("csv:///data/users.csv")
    result = await connection.query("SELECT * FROM users")
    async for row in result:
        print([str(value) for value in row])
    await connection.close()
"""

from multisql.dialects import Dialect, StatementKind
from multisql.drivers import CachedMetadataConnection, Connection, Driver, DriverManager
from multisql.errors import (
    ConnectionClosed,
    ConnectionFailed,
    ConversionError,
    DriverError,
    DriverNotFound,
    InvalidUrl,
    IoError,
    QueryError,
    Unauthorized,
    UnsupportedColumnType,
)
from multisql.metadata import Catalog, Column, ForeignKey, Index, Metadata, PrimaryKey, Schema, Table, View
from multisql.results import LimitQueryResult, MemoryQueryResult, QueryResult
from multisql.values import Row, Value, ValueType

__all__ = [
    # Drivers
    "DriverManager",
    "Driver",
    "Connection",
    "CachedMetadataConnection",
    "Dialect",
    "StatementKind",
    # Values & results
    "Value",
    "ValueType",
    "Row",
    "QueryResult",
    "MemoryQueryResult",
    "LimitQueryResult",
    # Metadata
    "Metadata",
    "Catalog",
    "Schema",
    "Table",
    "View",
    "Column",
    "Index",
    "PrimaryKey",
    "ForeignKey",
    # Errors
    "DriverError",
    "InvalidUrl",
    "DriverNotFound",
    "ConnectionFailed",
    "ConnectionClosed",
    "Unauthorized",
    "QueryError",
    "UnsupportedColumnType",
    "ConversionError",
    "IoError",
]

__version__ = "1.0.0"
