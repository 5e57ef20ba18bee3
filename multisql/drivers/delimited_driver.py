"""
Delimited text drivers: delimited, csv and tsv.

URL parameters:
    separator            single ASCII character (default ",", "\\t" for tsv)
    has_header           first line holds column names (default true)
    quote                quote character (default '"')
    escape               escape character (default none)
    skip_rows            lines skipped before the header (default 0)
    infer_schema_length  0 reads every column as text; N types columns from their first N values
                         (default: pandas infers from the whole file)
    ignore_errors        skip malformed lines, and read values that do not match the
                         inferred type as null, instead of failing (default false)

The csv and tsv drivers report their URL with the separator they used
(``separator=%2C`` / ``separator=%09``) when the caller gave none.
"""

import logging
from typing import Any, Dict

import pandas as pd

from multisql.drivers.tabular import TabularDriver, apply_schema_inference, get_table_name
from multisql.drivers.url import DriverUrl, add_params

logger = logging.getLogger(__name__)


class DelimitedDriver(TabularDriver):
    """Driver for character-separated text files."""

    IDENTIFIER = "delimited"
    DEFAULT_SEPARATOR = ","

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        separator = url.char_param("separator", self.DEFAULT_SEPARATOR)
        has_header = url.bool_param("has_header", True)
        infer_schema_length = url.int_param("infer_schema_length")
        ignore_errors = url.bool_param("ignore_errors", False)

        options: Dict[str, Any] = {
            "sep": separator,
            "header": 0 if has_header else None,
            "quotechar": url.char_param("quote", '"'),
            "escapechar": url.char_param("escape"),
            "skiprows": url.int_param("skip_rows", 0),
            "on_bad_lines": "skip" if ignore_errors else "error",
        }
        if infer_schema_length is not None:
            options["dtype"] = str

        frame = pd.read_csv(path, **options)
        if not has_header:
            frame.columns = [f"column_{index}" for index in range(1, len(frame.columns) + 1)]
        return {get_table_name(path): apply_schema_inference(frame, url)}

    def normalize_url(self, url: str) -> str:
        if self.IDENTIFIER == DelimitedDriver.IDENTIFIER or "separator" in DriverUrl(url).params:
            return url
        return add_params(url, {"separator": self.DEFAULT_SEPARATOR})


class CsvDriver(DelimitedDriver):
    IDENTIFIER = "csv"
    FILE_TYPES = ("csv",)
    DEFAULT_SEPARATOR = ","


class TsvDriver(DelimitedDriver):
    IDENTIFIER = "tsv"
    FILE_TYPES = ("tsv",)
    DEFAULT_SEPARATOR = "\t"
