"""
Columnar file drivers: Arrow IPC and Parquet.

    arrow:///data/users.arrow
    parquet:///data/users.parquet

Files are read with pyarrow; the resulting Arrow tables are handed to
DuckDB without a pandas round-trip.
"""

import logging
from typing import Any, Dict

import pyarrow as pa
import pyarrow.ipc as ipc
import pyarrow.parquet as pq

from multisql.drivers.tabular import TabularDriver, get_table_name
from multisql.drivers.url import DriverUrl

logger = logging.getLogger(__name__)


class ArrowDriver(TabularDriver):
    """Driver for Arrow IPC files (file or stream format)."""

    IDENTIFIER = "arrow"
    FILE_TYPES = ("arrow",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        try:
            with pa.OSFile(path, "rb") as source:
                table = ipc.open_file(source).read_all()
        except pa.ArrowInvalid:
            # Not the file format; try the streaming format
            with pa.OSFile(path, "rb") as source:
                table = ipc.open_stream(source).read_all()
        return {get_table_name(path): table}


class ParquetDriver(TabularDriver):
    """Driver for Parquet files."""

    IDENTIFIER = "parquet"
    FILE_TYPES = ("parquet",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        return {get_table_name(path): pq.read_table(path)}

