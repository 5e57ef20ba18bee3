"""
Tabular-file drivers: shared machinery.

A tabular driver reads a file into one or more in-memory frames (pandas
DataFrames or pyarrow Tables), copies each into an in-memory DuckDB
database under a name derived from the file, and returns a connection
whose statements run against that database.

    csv:///data/2024-users.csv  ->  table "_2024_users"

Metadata is synthesized: one catalog named "default" holding one schema
named after the engine ("duckdb") with every loaded table.
"""

import asyncio
import logging
import math
import os
import re
from abc import abstractmethod
from typing import Any, Dict, Optional

import pandas as pd

from multisql.dialects import DUCKDB
from multisql.drivers.base import Connection, Driver
from multisql.drivers.duckdb_driver import DuckDBConnection, duckdb
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed, ConversionError, DriverError, IoError
from multisql.metadata import Metadata

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = "default"
ENGINE_SCHEMA = "duckdb"

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")


def sanitize_identifier(text: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _NON_IDENTIFIER.sub("_", text)


def get_table_name(file_name: str) -> str:
    """
    Derive a SQL identifier from a file name.

    The stem before the first ``.`` is kept, every character outside
    ``[A-Za-z0-9_]`` becomes ``_``, a leading digit gets a ``_`` prefix and an
    empty result becomes ``tbl``.
    """
    stem = os.path.basename(file_name).split(".", 1)[0]
    name = sanitize_identifier(stem)
    if not name:
        return "tbl"
    if name[0].isdigit():
        name = f"_{name}"
    return name


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _text_or_none(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return str(value)


def as_text(frame: pd.DataFrame) -> pd.DataFrame:
    """Every cell as a string, missing cells as None."""
    return frame.astype(object).apply(lambda column: column.map(_text_or_none))


def infer_column_types(frame: pd.DataFrame, length: int, ignore_errors: bool = False) -> pd.DataFrame:
    """
    Type each text or mixed column from its first ``length`` non-null values.

    When those values are all numeric the whole column becomes numeric. A
    later value that does not fit fails the read, or reads as null with
    ``ignore_errors``.
    """
    frame = frame.copy()
    for name in frame.columns:
        column = frame[name]
        if column.dtype != object:
            continue
        head = column.dropna().head(length)
        if head.empty:
            continue
        try:
            pd.to_numeric(head)
        except (ValueError, TypeError):
            continue

        try:
            frame[name] = pd.to_numeric(column, errors="coerce" if ignore_errors else "raise")
        except (ValueError, TypeError) as e:
            raise ConversionError(
                f"Column {name} does not match the type inferred from its first {length} values: {e}",
                original_error=e,
            ) from e
    return frame


def apply_schema_inference(frame: pd.DataFrame, url: DriverUrl) -> pd.DataFrame:
    """
    ``infer_schema_length=0`` reads every column as text; a positive length
    types columns from their first rows (see infer_column_types).
    """
    length = url.int_param("infer_schema_length")
    if length == 0:
        return as_text(frame)
    if length:
        return infer_column_types(frame, length, url.bool_param("ignore_errors", False))
    return frame


def frame_from_documents(data: Any) -> pd.DataFrame:
    """
    Build a frame from decoded JSON/YAML.

    A list is read as records, a mapping of equal-length lists as columns,
    any other mapping as a single record.
    """
    if data is None:
        return pd.DataFrame()
    if isinstance(data, list):
        return pd.DataFrame.from_records([item if isinstance(item, dict) else {"value": item} for item in data])
    if isinstance(data, dict):
        values = list(data.values())
        if values and all(isinstance(value, list) for value in values) and len({len(value) for value in values}) == 1:
            return pd.DataFrame(data)
        return pd.DataFrame.from_records([data])
    return pd.DataFrame({"value": [data]})


class TabularConnection(DuckDBConnection):
    """In-memory DuckDB database holding the tables read from a file."""

    def __init__(self, url: str, connection: Any):
        super().__init__(url, connection, DUCKDB)

    async def _metadata(self) -> Metadata:
        metadata = Metadata.single_schema(self.dialect(), ENGINE_SCHEMA, DEFAULT_CATALOG)
        (database,) = (await self._fetch_all("SELECT current_database()"))[0]
        await self._load_tables(database, metadata.current_schema(), source_schema="main")
        return metadata


def load_frames(connection: Any, frames: Dict[str, Any]) -> None:
    """Copy each frame into ``connection`` as a table."""
    for table_name, frame in frames.items():
        view_name = f"__multisql_{table_name}"
        connection.register(view_name, frame)
        try:
            connection.execute(
                f"CREATE OR REPLACE TABLE {quote_identifier(table_name)} "
                f"AS SELECT * FROM {quote_identifier(view_name)}"
            )
        finally:
            connection.unregister(view_name)
        logger.debug(f"Loaded table {table_name}")


class TabularDriver(Driver):
    """
    Base class for drivers that load a file into DuckDB.

    Subclasses implement read(), which runs on a worker thread and returns
    a mapping of table name to frame.
    """

    def __init__(self):
        if duckdb is None:
            raise ConnectionFailed("duckdb not installed. Run: pip install duckdb")

    @abstractmethod
    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        """Read ``path`` into {table_name: DataFrame or pyarrow.Table}."""
        pass

    def normalize_url(self, url: str) -> str:
        """URL reported by the connection; drivers may add default parameters."""
        return url

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        parsed = DriverUrl(url)
        path = parsed.file_path()
        if not os.path.isfile(path):
            raise IoError(f"File not found: {path}")

        try:
            frames = await asyncio.to_thread(self.read, path, parsed)
        except DriverError:
            raise
        except Exception as e:
            raise IoError(f"Failed to read {self.IDENTIFIER} file {path}: {e}", original_error=e) from e

        def open_database() -> Any:
            connection = duckdb.connect(database=":memory:")
            try:
                load_frames(connection, frames)
            except Exception:
                connection.close()
                raise
            return connection

        try:
            connection = await asyncio.to_thread(open_database)
        except Exception as e:
            raise IoError(f"Failed to load {path}: {e}", original_error=e) from e

        logger.info(f"{self.IDENTIFIER} file loaded: {path} ({', '.join(frames)})")
        return TabularConnection(self.normalize_url(url), connection)
