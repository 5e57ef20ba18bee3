"""
Formatter Interface for multisql

A formatter renders Results to a Writer:

    1. columns() once, as the header
    2. next() until end of stream, one record per row
    3. the footer (row count and elapsed time)

Execute results (an int row count) render only the footer.
"""

import time
from abc import ABC, abstractmethod

from multisql.formatters.footer import write_footer
from multisql.formatters.options import FormatterOptions, Results
from multisql.formatters.writers import Writer
from multisql.results import QueryResult


class Formatter(ABC):
    """
    Abstract output formatter.

    Subclasses implement format_query() and return the number of rows
    written; format() adds the footer.
    """

    IDENTIFIER: str = "base"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.IDENTIFIER!r})"

    def identifier(self) -> str:
        return self.IDENTIFIER

    async def format(self, options: FormatterOptions, results: Results, writer: Writer) -> None:
        started = time.perf_counter()
        if isinstance(results, QueryResult):
            try:
                count = await self.format_query(options, results, writer)
            finally:
                await results.close()
            write_footer(options, writer, count, started)
        else:
            write_footer(options, writer, int(results), started, execute=True)

    @abstractmethod
    async def format_query(self, options: FormatterOptions, result: QueryResult, writer: Writer) -> int:
        pass
