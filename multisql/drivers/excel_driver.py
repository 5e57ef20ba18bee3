"""
Spreadsheet drivers: XLSX (openpyxl) and ODS (odfpy).

    xlsx:///data/users.xlsx
    ods:///data/users.ods?has_header=false

Every sheet becomes a table. A workbook with a single sheet yields one
table named after the file; with several sheets each table is named
``<file>_<sheet>``.

URL parameters:
    has_header           first row holds column names (default true)
    skip_rows            rows skipped before the header (default 0)
    infer_schema_length  0 reads every column as text
"""

import logging
from typing import Any, Dict

import pandas as pd

from multisql.drivers.tabular import (
    TabularDriver,
    apply_schema_inference,
    get_table_name,
    sanitize_identifier,
)
from multisql.drivers.url import DriverUrl

logger = logging.getLogger(__name__)


class SpreadsheetDriver(TabularDriver):
    """Base for workbook formats read through pandas.read_excel."""

    ENGINE: str = "openpyxl"

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        has_header = url.bool_param("has_header", True)
        sheets = pd.read_excel(
            path,
            sheet_name=None,
            header=0 if has_header else None,
            skiprows=url.int_param("skip_rows", 0),
            engine=self.ENGINE,
        )

        table_name = get_table_name(path)
        frames = {}
        for sheet_name, frame in sheets.items():
            if not has_header:
                frame.columns = [f"column_{index}" for index in range(1, len(frame.columns) + 1)]
            name = table_name if len(sheets) == 1 else f"{table_name}_{sanitize_identifier(str(sheet_name))}"
            frames[name] = apply_schema_inference(frame, url)
        return frames


class XlsxDriver(SpreadsheetDriver):
    IDENTIFIER = "xlsx"
    FILE_TYPES = ("xlsx",)
    ENGINE = "openpyxl"


class OdsDriver(SpreadsheetDriver):
    IDENTIFIER = "ods"
    FILE_TYPES = ("ods",)
    ENGINE = "odf"
