"""
Driver Manager for multisql

Process-wide registry mapping URL schemes to drivers.

Usage:
    from multisql.drivers import DriverManager

    manager = DriverManager.default()
    connection = await manager.connect("csv:///data/users.csv")

    # Or build a private registry
    manager = DriverManager()
    manager.add(SQLiteDriver())

Registration replaces any driver already registered under the same
identifier. File-type lookup walks drivers in registration order; listing
is alphabetical by identifier. The registry lock is never held while a
driver connects.
"""

import logging
import threading
from typing import Dict, List, Optional

from multisql.core.config import settings
from multisql.core.logging import mask_url
from multisql.drivers.base import Connection, Driver
from multisql.drivers.cache import CachedMetadataConnection
from multisql.drivers.file_type import FileType
from multisql.drivers.temp import cleanup_stale_temp_dirs
from multisql.drivers.url import parse_scheme
from multisql.errors import ConnectionFailed, DriverNotFound

logger = logging.getLogger(__name__)


class DriverManager:
    """Scheme -> Driver registry."""

    _default: Optional["DriverManager"] = None
    _default_lock = threading.Lock()

    def __init__(self):
        self._lock = threading.RLock()
        self._drivers: Dict[str, Driver] = {}

    def __repr__(self) -> str:
        return f"DriverManager({', '.join(self.identifiers())})"

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)

    def __contains__(self, identifier: str) -> bool:
        return self.get(identifier) is not None

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add(self, driver: Driver) -> None:
        """Register ``driver`` under its identifier, replacing any previous one."""
        identifier = driver.identifier().lower()
        with self._lock:
            replaced = identifier in self._drivers
            # Re-adding moves the driver to the end of the registration order
            self._drivers.pop(identifier, None)
            self._drivers[identifier] = driver
        if replaced:
            logger.debug(f"Replaced driver: {identifier}")
        else:
            logger.debug(f"Registered driver: {identifier}")

    def remove(self, identifier: str) -> Optional[Driver]:
        with self._lock:
            return self._drivers.pop(identifier.lower(), None)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, identifier: str) -> Optional[Driver]:
        with self._lock:
            return self._drivers.get(identifier.lower())

    def get_by_file_type(self, file_type: FileType) -> Optional[Driver]:
        """First driver, in registration order, that supports ``file_type``."""
        with self._lock:
            drivers = list(self._drivers.values())
        for driver in drivers:
            if driver.supports_file_type(file_type):
                return driver
        return None

    def drivers(self) -> List[Driver]:
        """Registered drivers sorted by identifier."""
        with self._lock:
            return [self._drivers[key] for key in sorted(self._drivers)]

    def identifiers(self) -> List[str]:
        with self._lock:
            return sorted(self._drivers)

    # =========================================================================
    # CONNECT
    # =========================================================================

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        """
        Open a connection with the driver registered for the URL scheme.

        The connection is wrapped so that metadata() is computed once.

        Raises:
            InvalidUrl: If the URL has no scheme
            DriverNotFound: If no driver claims the scheme
        """
        scheme = parse_scheme(url)
        driver = self.get(scheme)
        if driver is None:
            raise DriverNotFound(scheme)

        logger.info(f"Connecting with {driver.identifier()} driver: {mask_url(url)}")
        connection = await driver.connect(url, password)
        return CachedMetadataConnection(connection)

    # =========================================================================
    # DEFAULT MANAGER
    # =========================================================================

    @classmethod
    def default(cls) -> "DriverManager":
        """The process-wide manager holding every available built-in driver."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    manager = cls()
                    register_builtin_drivers(manager)
                    if settings.cleanup_stale_temp:
                        cleanup_stale_temp_dirs()
                    cls._default = manager
        return cls._default


# =============================================================================
# AUTO-REGISTER BUILT-IN DRIVERS
# =============================================================================

def register_builtin_drivers(manager: DriverManager) -> None:
    """
    Register all built-in drivers whose client library is installed.

    Imports are local: container drivers import this module.
    """

    # SQLite (built-in, no dependencies)
    try:
        from multisql.drivers.sqlite_driver import SQLiteDriver
        manager.add(SQLiteDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"SQLite driver not available: {e}")

    # DuckDB
    try:
        from multisql.drivers.duckdb_driver import DuckDBDriver
        manager.add(DuckDBDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"DuckDB driver not available: {e}")

    # PostgreSQL and the drivers built on it
    try:
        from multisql.drivers.postgresql_driver import (
            CockroachDBDriver,
            PostgreSQLDriver,
            RedshiftDriver,
        )
        manager.add(PostgreSQLDriver())
        manager.add(CockroachDBDriver())
        manager.add(RedshiftDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"PostgreSQL drivers not available: {e}")

    # MySQL / MariaDB
    try:
        from multisql.drivers.mysql_driver import MariaDBDriver, MySQLDriver
        manager.add(MySQLDriver())
        manager.add(MariaDBDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"MySQL drivers not available: {e}")

    # ClickHouse
    try:
        from multisql.drivers.clickhouse_driver import ClickHouseDriver
        manager.add(ClickHouseDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"ClickHouse driver not available: {e}")

    # Snowflake
    try:
        from multisql.drivers.snowflake_driver import SnowflakeDriver
        manager.add(SnowflakeDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Snowflake driver not available: {e}")

    # LibSQL
    try:
        from multisql.drivers.libsql_driver import LibSQLDriver
        manager.add(LibSQLDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"LibSQL driver not available: {e}")

    # Arrow FlightSQL
    try:
        from multisql.drivers.flightsql_driver import FlightSQLDriver
        manager.add(FlightSQLDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"FlightSQL driver not available: {e}")

    # CrateDB
    try:
        from multisql.drivers.cratedb_driver import CrateDBDriver
        manager.add(CrateDBDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"CrateDB driver not available: {e}")

    # DynamoDB
    try:
        from multisql.drivers.dynamodb_driver import DynamoDBDriver
        manager.add(DynamoDBDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"DynamoDB driver not available: {e}")

    # Redis
    try:
        from multisql.drivers.redis_driver import RedisDriver
        manager.add(RedisDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Redis driver not available: {e}")

    # Delimited text
    try:
        from multisql.drivers.delimited_driver import CsvDriver, DelimitedDriver, TsvDriver
        manager.add(CsvDriver())
        manager.add(TsvDriver())
        manager.add(DelimitedDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Delimited drivers not available: {e}")

    # Fixed width
    try:
        from multisql.drivers.fwf_driver import FwfDriver
        manager.add(FwfDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"FWF driver not available: {e}")

    # JSON / JSONL
    try:
        from multisql.drivers.json_driver import JsonDriver, JsonlDriver
        manager.add(JsonDriver())
        manager.add(JsonlDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"JSON drivers not available: {e}")

    # YAML
    try:
        from multisql.drivers.yaml_driver import YamlDriver
        manager.add(YamlDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"YAML driver not available: {e}")

    # XML
    try:
        from multisql.drivers.xml_driver import XmlDriver
        manager.add(XmlDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"XML driver not available: {e}")

    # Avro
    try:
        from multisql.drivers.avro_driver import AvroDriver
        manager.add(AvroDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Avro driver not available: {e}")

    # Arrow IPC / Parquet
    try:
        from multisql.drivers.arrow_driver import ArrowDriver, ParquetDriver
        manager.add(ArrowDriver())
        manager.add(ParquetDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Arrow drivers not available: {e}")

    # ORC
    try:
        from multisql.drivers.orc_driver import OrcDriver
        manager.add(OrcDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"ORC driver not available: {e}")

    # Spreadsheets
    try:
        from multisql.drivers.excel_driver import OdsDriver, XlsxDriver
        manager.add(XlsxDriver())
        manager.add(OdsDriver())
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"Spreadsheet drivers not available: {e}")

    # Compression; each codec library is optional on its own
    from multisql.drivers import compression_driver

    for driver_class in (
        compression_driver.GzipDriver,
        compression_driver.Bzip2Driver,
        compression_driver.XzDriver,
        compression_driver.BrotliDriver,
        compression_driver.Lz4Driver,
        compression_driver.ZstdDriver,
    ):
        try:
            manager.add(driver_class(manager))
        except ConnectionFailed as e:
            logger.debug(f"{driver_class.IDENTIFIER} driver not available: {e}")

    # Local file dispatch
    from multisql.drivers.file_driver import FileDriver
    manager.add(FileDriver(manager))

    # HTTP / HTTPS
    try:
        from multisql.drivers.http_driver import HttpDriver, HttpsDriver
        manager.add(HttpDriver(manager))
        manager.add(HttpsDriver(manager))
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"HTTP drivers not available: {e}")

    # S3
    try:
        from multisql.drivers.s3_driver import S3Driver
        manager.add(S3Driver(manager))
    except (ImportError, ConnectionFailed) as e:
        logger.debug(f"S3 driver not available: {e}")

    logger.info(f"Registered {len(manager)} drivers")
