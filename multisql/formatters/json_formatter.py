"""
JSON formatters.

json   a pretty printed array of objects, one per row
jsonl  one compact object per line

Keys follow column order. Bytes are base64 strings; dates, times, UUIDs and
decimals are strings; Json cells are embedded as parsed documents.
"""

import json
from typing import Any, Dict, List

from multisql.formatters.base import Formatter
from multisql.formatters.highlight import highlight
from multisql.formatters.options import FormatterOptions
from multisql.formatters.writers import Writer
from multisql.results import QueryResult
from multisql.values import Row, Value, ValueType

_NATIVE_TYPES = {
    ValueType.BOOL,
    ValueType.I8, ValueType.I16, ValueType.I32, ValueType.I64,
    ValueType.U8, ValueType.U16, ValueType.U32, ValueType.U64,
    ValueType.F32, ValueType.F64,
    ValueType.STRING,
}


def to_json(value: Value) -> Any:
    """Map a Value to a JSON-serializable object."""
    if value.is_null():
        return None
    if value.type in _NATIVE_TYPES:
        return value.data
    if value.type is ValueType.JSON:
        try:
            return json.loads(value.data)
        except ValueError:
            return value.data
    if value.type is ValueType.ARRAY:
        return [to_json(item) for item in value.data]
    if value.type is ValueType.STRUCT:
        return {key: to_json(item) for key, item in value.data}
    return str(value)


def row_object(columns: List[str], row: Row) -> Dict[str, Any]:
    return {column: to_json(value) for column, value in zip(columns, row)}


class JsonFormatter(Formatter):
    IDENTIFIER = "json"

    async def format_query(self, options: FormatterOptions, result: QueryResult, writer: Writer) -> int:
        columns = result.columns()
        objects = [row_object(columns, row) async for row in result]

        text = json.dumps(objects, indent=2, ensure_ascii=False)
        writer.write(highlight(text, "json") if options.color else text)
        writer.write("\n")
        return len(objects)


class JsonlFormatter(Formatter):
    IDENTIFIER = "jsonl"

    async def format_query(self, options: FormatterOptions, result: QueryResult, writer: Writer) -> int:
        columns = result.columns()
        count = 0
        async for row in result:
            if count > 0:
                writer.write("\n")
            text = json.dumps(row_object(columns, row), ensure_ascii=False, separators=(",", ":"))
            writer.write(highlight(text, "json") if options.color else text)
            count += 1
        writer.write("\n")
        return count
