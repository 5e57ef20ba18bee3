"""
Output writers for formatters.

Writers accept text. ``FanoutWriter`` copies everything it receives to
several writers, e.g. the terminal and a capture buffer.
"""

import io
import logging
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

logger = logging.getLogger(__name__)


class Writer(ABC):
    """Text sink used by formatters."""

    @abstractmethod
    def write(self, text: str) -> int:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class MemoryWriter(Writer):
    """Buffers everything written; read it back with getvalue()."""

    def __init__(self):
        self._buffer = io.StringIO()

    def write(self, text: str) -> int:
        return self._buffer.write(text)

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def __str__(self) -> str:
        return self.getvalue()


class StdoutWriter(Writer):
    """Writes to the process standard output."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so test capture of sys.stdout is honored
        return self._stream or sys.stdout

    def write(self, text: str) -> int:
        return self.stream.write(text)

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        self.flush()

    def __str__(self) -> str:
        return "stdout"


class FileWriter(Writer):
    """Writes to a file, truncating it unless ``append`` is set."""

    def __init__(self, path: str, append: bool = False, encoding: str = "utf-8"):
        self.path = path
        self._file = open(path, "a" if append else "w", encoding=encoding, newline="")
        logger.debug(f"Writing output to {path}")

    def write(self, text: str) -> int:
        return self._file.write(text)

    def flush(self) -> None:
        if not self._file.closed:
            self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __str__(self) -> str:
        return self.path


class FanoutWriter(Writer):
    """Duplicates output to every writer it holds."""

    def __init__(self, writers: List[Writer]):
        self.writers = list(writers)

    def write(self, text: str) -> int:
        for writer in self.writers:
            writer.write(text)
        return len(text)

    def flush(self) -> None:
        for writer in self.writers:
            writer.flush()

    def close(self) -> None:
        for writer in self.writers:
            writer.close()

    def __str__(self) -> str:
        return ",".join(str(writer) for writer in self.writers)
