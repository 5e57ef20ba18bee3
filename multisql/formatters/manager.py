"""
Formatter registry.
"""

import logging
from typing import Dict, List, Optional

from multisql.formatters.base import Formatter
from multisql.formatters.delimited import CsvFormatter, TsvFormatter
from multisql.formatters.json_formatter import JsonFormatter, JsonlFormatter

logger = logging.getLogger(__name__)


class FormatterManager:
    """Formatters keyed by identifier; a second add() replaces the first."""

    def __init__(self, formatters: Optional[List[Formatter]] = None):
        self._formatters: Dict[str, Formatter] = {}
        for formatter in formatters if formatters is not None else default_formatters():
            self.add(formatter)

    def add(self, formatter: Formatter) -> None:
        self._formatters[formatter.identifier().lower()] = formatter
        logger.debug(f"Registered formatter: {formatter.identifier()}")

    def get(self, identifier: str) -> Optional[Formatter]:
        return self._formatters.get(identifier.lower())

    def formatters(self) -> List[Formatter]:
        return [self._formatters[name] for name in sorted(self._formatters)]

    def identifiers(self) -> List[str]:
        return sorted(self._formatters)

    def __len__(self) -> int:
        return len(self._formatters)

    def __contains__(self, identifier: str) -> bool:
        return identifier.lower() in self._formatters


def default_formatters() -> List[Formatter]:
    return [CsvFormatter(), TsvFormatter(), JsonFormatter(), JsonlFormatter()]
