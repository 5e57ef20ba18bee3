"""
Result formatters for multisql.
"""

from multisql.formatters.base import Formatter
from multisql.formatters.delimited import CsvFormatter, DelimitedFormatter, TsvFormatter
from multisql.formatters.json_formatter import JsonFormatter, JsonlFormatter
from multisql.formatters.manager import FormatterManager
from multisql.formatters.options import FormatterOptions, Results
from multisql.formatters.writers import FanoutWriter, FileWriter, MemoryWriter, StdoutWriter, Writer

__all__ = [
    "Formatter",
    "FormatterManager",
    "FormatterOptions",
    "Results",
    "DelimitedFormatter",
    "CsvFormatter",
    "TsvFormatter",
    "JsonFormatter",
    "JsonlFormatter",
    "Writer",
    "MemoryWriter",
    "FileWriter",
    "StdoutWriter",
    "FanoutWriter",
]
