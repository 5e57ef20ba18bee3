"""
Delimited text formatters (csv, tsv).

Numbers are written bare; every other cell, headers included, is quoted.
Null is an empty quoted cell and Bytes are base64.
"""

import csv
import decimal
from typing import Any, List

from multisql.formatters.base import Formatter
from multisql.formatters.options import FormatterOptions
from multisql.formatters.writers import Writer
from multisql.results import QueryResult
from multisql.values import Row, ValueType

_NUMBER_TYPES = {
    ValueType.I8, ValueType.I16, ValueType.I32, ValueType.I64,
    ValueType.U8, ValueType.U16, ValueType.U32, ValueType.U64,
    ValueType.F32, ValueType.F64,
}


def record(row: Row) -> List[Any]:
    cells: List[Any] = []
    for value in row:
        if value.is_null():
            cells.append("")
        elif value.type in _NUMBER_TYPES:
            cells.append(value.data)
        elif value.type is ValueType.DECIMAL:
            cells.append(decimal.Decimal(value.data))
        else:
            cells.append(str(value))
    return cells


class DelimitedFormatter(Formatter):
    """Writes one delimited record per row."""

    DELIMITER: str = ","

    async def format_query(self, options: FormatterOptions, result: QueryResult, writer: Writer) -> int:
        output = csv.writer(writer, delimiter=self.DELIMITER, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
        if options.header:
            output.writerow(result.columns())

        count = 0
        async for row in result:
            output.writerow(record(row))
            count += 1
        writer.flush()
        return count


class CsvFormatter(DelimitedFormatter):
    IDENTIFIER = "csv"
    DELIMITER = ","


class TsvFormatter(DelimitedFormatter):
    IDENTIFIER = "tsv"
    DELIMITER = "\t"
