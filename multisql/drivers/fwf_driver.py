"""
Fixed-width file driver.

    fwf:///data/users.fwf?widths=4,15&headers=id,name

``widths`` (required) lists the width of every column. ``headers`` names
them; without it columns are named A, B, ..., Z, AA, AB, ... Each line is
cut at the widths and every cell is stripped of surrounding whitespace.
All columns are text; no types are inferred.
"""

import logging
from typing import Any, Dict, List

import pandas as pd

from multisql.drivers.tabular import TabularDriver, get_table_name
from multisql.drivers.url import DriverUrl
from multisql.errors import ConversionError, InvalidUrl

logger = logging.getLogger(__name__)


def column_name(index: int) -> str:
    """Spreadsheet-style column name for a zero-based index (0 -> A, 26 -> AA)."""
    name = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        name = chr(ord("A") + remainder) + name
    return name


def parse_widths(value: str) -> List[int]:
    widths = []
    for item in value.split(","):
        try:
            width = int(item)
        except ValueError as e:
            raise ConversionError(f"Invalid width: {item}", original_error=e) from e
        if width <= 0:
            raise ConversionError(f"Width must be positive: {item}")
        widths.append(width)
    return widths


def split_line(line: str, widths: List[int]) -> List[str]:
    cells = []
    start = 0
    for width in widths:
        cells.append(line[start:start + width].strip())
        start += width
    return cells


class FwfDriver(TabularDriver):
    """Driver for fixed-width text files."""

    IDENTIFIER = "fwf"
    FILE_TYPES = ("fwf",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        widths_param = url.param("widths")
        if not widths_param:
            raise InvalidUrl("widths parameter is required")
        widths = parse_widths(widths_param)

        headers = url.list_param("headers") or [column_name(index) for index in range(len(widths))]
        if len(headers) != len(widths):
            raise InvalidUrl("Number of headers does not match number of columns")

        with open(path, encoding="utf-8") as f:
            rows = [split_line(line, widths) for line in f.read().splitlines()]

        frame = pd.DataFrame(rows, columns=headers, dtype=str)
        return {get_table_name(path): frame}
