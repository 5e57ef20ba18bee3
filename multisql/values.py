"""
multisql - Value & Row Model

A Value is a tagged cell: a ValueType plus the Python object carrying it.
A Row is an ordered list of Values whose length matches the column count
of the QueryResult that produced it.

CANONICAL STRING FORM:
----------------------
    Null      -> "null"
    Bool      -> "true" / "false"
    integers  -> decimal digits
    floats    -> Python repr of the float
    Decimal   -> plain decimal notation
    Bytes     -> base64
    Date/Time -> ISO 8601 (DateTime uses a space separator)
    Array     -> elements joined with ", "
    Struct    -> "name=value" pairs joined with ", "

Locale-aware grouping is applied only by to_formatted_string(), which
formatters call; stored data is never altered.
"""

from __future__ import annotations

import base64
import datetime
import decimal
import json
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from babel.numbers import format_decimal

from multisql.errors import ConversionError, UnsupportedColumnType

logger = logging.getLogger(__name__)


class ValueType(str, Enum):
    """Closed set of Value variants."""

    NULL = "null"
    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    DECIMAL = "decimal"
    STRING = "string"
    BYTES = "bytes"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    UUID = "uuid"
    JSON = "json"
    ARRAY = "array"
    STRUCT = "struct"


# (bits, signed) for every integer variant
_INTEGER_RANGES = {
    ValueType.I8: (8, True),
    ValueType.I16: (16, True),
    ValueType.I32: (32, True),
    ValueType.I64: (64, True),
    ValueType.U8: (8, False),
    ValueType.U16: (16, False),
    ValueType.U32: (32, False),
    ValueType.U64: (64, False),
}

NUMERIC_TYPES = frozenset(_INTEGER_RANGES) | {ValueType.F32, ValueType.F64, ValueType.DECIMAL}


@dataclass(frozen=True)
class Value:
    """A typed cell."""

    type: ValueType
    data: Any = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueType.NULL)

    @classmethod
    def bool(cls, data: bool) -> "Value":
        return cls(ValueType.BOOL, bool(data))

    @classmethod
    def integer(cls, value_type: ValueType, data: int) -> "Value":
        """Build an integer Value, checking that ``data`` fits ``value_type``."""
        bits, signed = _INTEGER_RANGES[value_type]
        low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
        data = int(data)
        if not low <= data <= high:
            raise ConversionError(f"{data} does not fit in {value_type.value}")
        return cls(value_type, data)

    @classmethod
    def i8(cls, data: int) -> "Value":
        return cls.integer(ValueType.I8, data)

    @classmethod
    def i16(cls, data: int) -> "Value":
        return cls.integer(ValueType.I16, data)

    @classmethod
    def i32(cls, data: int) -> "Value":
        return cls.integer(ValueType.I32, data)

    @classmethod
    def i64(cls, data: int) -> "Value":
        return cls.integer(ValueType.I64, data)

    @classmethod
    def u8(cls, data: int) -> "Value":
        return cls.integer(ValueType.U8, data)

    @classmethod
    def u16(cls, data: int) -> "Value":
        return cls.integer(ValueType.U16, data)

    @classmethod
    def u32(cls, data: int) -> "Value":
        return cls.integer(ValueType.U32, data)

    @classmethod
    def u64(cls, data: int) -> "Value":
        return cls.integer(ValueType.U64, data)

    @classmethod
    def f32(cls, data: float) -> "Value":
        return cls(ValueType.F32, float(data))

    @classmethod
    def f64(cls, data: float) -> "Value":
        return cls(ValueType.F64, float(data))

    @classmethod
    def decimal(cls, data: Any) -> "Value":
        try:
            return cls(ValueType.DECIMAL, decimal.Decimal(data))
        except decimal.InvalidOperation as e:
            raise ConversionError(f"Invalid decimal: {data!r}", original_error=e) from e

    @classmethod
    def string(cls, data: str) -> "Value":
        return cls(ValueType.STRING, str(data))

    @classmethod
    def bytes(cls, data: Any) -> "Value":
        return cls(ValueType.BYTES, bytes(data))

    @classmethod
    def date(cls, data: datetime.date) -> "Value":
        return cls(ValueType.DATE, data)

    @classmethod
    def time(cls, data: datetime.time) -> "Value":
        return cls(ValueType.TIME, data)

    @classmethod
    def datetime(cls, data: datetime.datetime) -> "Value":
        return cls(ValueType.DATETIME, data)

    @classmethod
    def uuid(cls, data: Any) -> "Value":
        return cls(ValueType.UUID, data if isinstance(data, uuid.UUID) else uuid.UUID(str(data)))

    @classmethod
    def json(cls, data: str) -> "Value":
        return cls(ValueType.JSON, data)

    @classmethod
    def array(cls, data: Sequence["Value"]) -> "Value":
        return cls(ValueType.ARRAY, tuple(data))

    @classmethod
    def struct(cls, data: Dict[str, "Value"]) -> "Value":
        return cls(ValueType.STRUCT, tuple((str(key), value) for key, value in data.items()))

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def is_null(self) -> bool:
        return self.type is ValueType.NULL

    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    def to_python(self) -> Any:
        """Return the plain Python object for this value."""
        if self.type is ValueType.ARRAY:
            return [value.to_python() for value in self.data]
        if self.type is ValueType.STRUCT:
            return {key: value.to_python() for key, value in self.data}
        return self.data

    def __str__(self) -> str:
        if self.type is ValueType.NULL:
            return "null"
        if self.type is ValueType.BOOL:
            return "true" if self.data else "false"
        if self.type is ValueType.BYTES:
            return base64.b64encode(self.data).decode("ascii")
        if self.type is ValueType.DECIMAL:
            return format(self.data, "f")
        if self.type is ValueType.DATETIME:
            return self.data.isoformat(sep=" ")
        if self.type in (ValueType.DATE, ValueType.TIME):
            return self.data.isoformat()
        if self.type is ValueType.ARRAY:
            return ", ".join(str(value) for value in self.data)
        if self.type is ValueType.STRUCT:
            return ", ".join(f"{key}={value}" for key, value in self.data)
        return str(self.data)

    def to_formatted_string(self, locale: str = "en") -> str:
        """Render for display, grouping integers per ``locale``."""
        if self.type in _INTEGER_RANGES:
            return format_decimal(self.data, locale=locale)
        if self.type is ValueType.ARRAY:
            return ", ".join(value.to_formatted_string(locale) for value in self.data)
        if self.type is ValueType.STRUCT:
            return ", ".join(f"{key}={value.to_formatted_string(locale)}" for key, value in self.data)
        return str(self)


Row = List[Value]


# =============================================================================
# CONVERSION FROM CLIENT LIBRARIES
# =============================================================================

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1


class ValueConverter:
    """
    Maps the Python objects returned by a client library to Values.

    Drivers subclass this and override ``convert_value`` for the types their
    library reports specially (JSON columns, intervals, native numerics...).
    Anything that maps to no variant raises UnsupportedColumnType.
    """

    def __init__(self, columns: Sequence[str], column_types: Optional[Sequence[Any]] = None):
        self.columns = list(columns)
        self.column_types = list(column_types) if column_types else [None] * len(self.columns)

    def convert_row(self, row: Sequence[Any]) -> Row:
        return [
            self.convert(value, index)
            for index, value in enumerate(row)
        ]

    def convert(self, value: Any, index: int) -> Value:
        column_name = self.columns[index] if index < len(self.columns) else str(index)
        column_type = self.column_types[index] if index < len(self.column_types) else None
        if value is None:
            return Value.null()
        converted = self.convert_value(value, column_type)
        if converted is None:
            raise UnsupportedColumnType(column_name, str(column_type or type(value).__name__))
        return converted

    def convert_value(self, value: Any, column_type: Any = None) -> Optional[Value]:
        """Return the Value for ``value`` or None when it has no mapping."""
        return from_python(value)


def from_python(value: Any) -> Optional[Value]:
    """Map a plain Python object to a Value; None when it has no mapping."""
    if value is None:
        return Value.null()
    if isinstance(value, Value):
        return value
    # bool is an int subclass
    if isinstance(value, bool):
        return Value.bool(value)
    if isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            return Value(ValueType.I64, value)
        if 0 <= value <= _UINT64_MAX:
            return Value(ValueType.U64, value)
        return Value.decimal(value)
    if isinstance(value, float):
        return Value.f64(value)
    if isinstance(value, decimal.Decimal):
        return Value(ValueType.DECIMAL, value)
    if isinstance(value, str):
        return Value.string(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Value.bytes(value)
    # datetime is a date subclass
    if isinstance(value, datetime.datetime):
        return Value.datetime(value)
    if isinstance(value, datetime.date):
        return Value.date(value)
    if isinstance(value, datetime.time):
        return Value.time(value)
    if isinstance(value, uuid.UUID):
        return Value.uuid(value)
    if isinstance(value, (list, tuple)):
        items = [from_python(item) for item in value]
        if any(item is None for item in items):
            return None
        return Value.array(items)
    if isinstance(value, dict):
        fields = {key: from_python(item) for key, item in value.items()}
        if any(item is None for item in fields.values()):
            return None
        return Value.struct(fields)
    return None


def to_json_value(value: Any) -> Value:
    """Wrap an already-decoded JSON document as a Json Value."""
    if isinstance(value, str):
        return Value.json(value)
    return Value.json(json.dumps(value, default=str))
