"""
Formatter options and the results a formatter renders.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from multisql.core.config import settings
from multisql.results import QueryResult

# A streaming query result, or the row count returned by execute()
Results = Union[QueryResult, int]


@dataclass
class FormatterOptions:
    """
    Display switches shared by every formatter.

    ``elapsed`` is in seconds. When it is None the formatter measures from
    ``started`` (a ``time.perf_counter()`` reading taken when the query was
    issued), or from the moment formatting began.
    """
    color: bool = False
    elapsed: Optional[float] = None
    footer: bool = True
    header: bool = True
    locale: str = field(default_factory=lambda: settings.locale)
    rows: bool = True
    timer: bool = True
    changes: bool = True
    started: Optional[float] = None
