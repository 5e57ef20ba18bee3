"""
Avro driver.

    avro:///data/users.avro

Records are decoded with fastavro; the writer schema's field order is the
column order.
"""

import logging
from typing import Any, Dict

import fastavro
import pandas as pd

from multisql.drivers.tabular import TabularDriver, apply_schema_inference, get_table_name
from multisql.drivers.url import DriverUrl

logger = logging.getLogger(__name__)


class AvroDriver(TabularDriver):
    """Driver for Avro object container files."""

    IDENTIFIER = "avro"
    FILE_TYPES = ("avro",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        with open(path, "rb") as f:
            reader = fastavro.reader(f)
            fields = [field["name"] for field in reader.writer_schema.get("fields", [])]
            records = list(reader)

        frame = pd.DataFrame.from_records(records, columns=fields or None)
        return {get_table_name(path): apply_schema_inference(frame, url)}
