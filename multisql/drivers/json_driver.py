"""
JSON and JSON Lines drivers.

    json:///data/users.json      array of objects, or an object of columns
    jsonl:///data/users.jsonl    one object per line

URL parameters:
    infer_schema_length  0 reads every column as text; N types text columns from their first N values
    ignore_errors        read values that do not match the inferred type as null;
                         jsonl also skips lines that are not valid JSON
"""

import json
import logging
from typing import Any, Dict

from multisql.drivers.tabular import (
    TabularDriver,
    apply_schema_inference,
    frame_from_documents,
    get_table_name,
)
from multisql.drivers.url import DriverUrl
from multisql.errors import ConversionError

logger = logging.getLogger(__name__)


class JsonDriver(TabularDriver):
    """Driver for JSON documents."""

    IDENTIFIER = "json"
    FILE_TYPES = ("json",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConversionError(f"Invalid JSON in {path}: {e}", original_error=e) from e

        frame = apply_schema_inference(frame_from_documents(data), url)
        return {get_table_name(path): frame}


class JsonlDriver(TabularDriver):
    """Driver for newline-delimited JSON."""

    IDENTIFIER = "jsonl"
    FILE_TYPES = ("jsonl",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        ignore_errors = url.bool_param("ignore_errors", False)

        records = []
        with open(path, encoding="utf-8") as f:
            for number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    if ignore_errors:
                        logger.debug(f"Skipping invalid line {number} in {path}: {e}")
                        continue
                    raise ConversionError(f"Invalid JSON on line {number} of {path}: {e}", original_error=e) from e

        frame = apply_schema_inference(frame_from_documents(records), url)
        return {get_table_name(path): frame}
