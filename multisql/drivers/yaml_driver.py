"""
YAML driver.

    yaml:///data/users.yaml

The document is read with PyYAML's safe loader: a sequence of mappings is
one row per mapping, a mapping of equal-length sequences is one column
per key.

URL parameters:
    infer_schema_length  0 reads every column as text; N types text columns from their first N values
    ignore_errors        read values that do not match the inferred type as null
"""

import logging
from typing import Any, Dict

import yaml

from multisql.drivers.tabular import (
    TabularDriver,
    apply_schema_inference,
    frame_from_documents,
    get_table_name,
)
from multisql.drivers.url import DriverUrl
from multisql.errors import ConversionError

logger = logging.getLogger(__name__)


class YamlDriver(TabularDriver):
    """Driver for YAML documents."""

    IDENTIFIER = "yaml"
    FILE_TYPES = ("yaml",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConversionError(f"Invalid YAML in {path}: {e}", original_error=e) from e

        frame = apply_schema_inference(frame_from_documents(data), url)
        return {get_table_name(path): frame}
