"""
Drivers

Pluggable data source drivers and the registry that routes URLs to them.
"""

from multisql.drivers.base import Connection, DelegatingConnection, Driver, Params
from multisql.drivers.cache import CachedMetadataConnection
from multisql.drivers.file_type import FileType
from multisql.drivers.manager import DriverManager, register_builtin_drivers

__all__ = [
    "Connection",
    "DelegatingConnection",
    "Driver",
    "Params",
    "CachedMetadataConnection",
    "FileType",
    "DriverManager",
    "register_builtin_drivers",
]
