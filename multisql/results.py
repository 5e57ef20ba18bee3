"""
Streaming query results.

A QueryResult exposes a fixed list of column names and an async ``next()``
that returns one Row at a time, or None once the stream is exhausted.
End of stream is sticky: every later ``next()`` returns None as well.

Results are also async iterators:

    result = await connection.query("SELECT id, name FROM users")
    async for row in result:
        ...

Rows handed out by ``next()`` belong to the caller only until the following
``next()``; consumers that keep rows must copy them.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from multisql.values import Row

logger = logging.getLogger(__name__)


class QueryResult(ABC):
    """Abstract streaming result."""

    @abstractmethod
    def columns(self) -> List[str]:
        """Column names, available before the first row."""
        pass

    @abstractmethod
    async def next(self) -> Optional[Row]:
        """Return the next row, or None at end of stream."""
        pass

    async def close(self) -> None:
        """Release the underlying cursor; safe to call more than once."""
        pass

    async def fetch_all(self) -> List[Row]:
        """Drain the remaining rows into a list."""
        rows = []
        while True:
            row = await self.next()
            if row is None:
                return rows
            rows.append(row)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Row:
        row = await self.next()
        if row is None:
            raise StopAsyncIteration
        return row

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False


class MemoryQueryResult(QueryResult):
    """Result backed by rows held in memory."""

    def __init__(self, columns: Sequence[str], rows: Sequence[Row]):
        self._columns = list(columns)
        self._rows = list(rows)
        self._index = 0

    def columns(self) -> List[str]:
        return self._columns

    async def next(self) -> Optional[Row]:
        if self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return row

    async def close(self) -> None:
        self._index = len(self._rows)


class LimitQueryResult(QueryResult):
    """
    Yields at most ``limit`` rows of ``inner``.

    Once the limit is reached the inner stream is left undrained; close()
    releases it.
    """

    def __init__(self, inner: QueryResult, limit: int):
        if limit < 0:
            raise ValueError("limit must be non-negative")
        self._inner = inner
        self._limit = limit
        self._count = 0

    def columns(self) -> List[str]:
        return self._inner.columns()

    async def next(self) -> Optional[Row]:
        if self._count >= self._limit:
            return None
        row = await self._inner.next()
        if row is None:
            # Pin end of stream even if the inner result misbehaves
            self._count = self._limit
            return None
        self._count += 1
        return row

    async def close(self) -> None:
        await self._inner.close()
