"""
Temporary staging directories for container drivers.

Each wrapping connection owns one directory created with
``tempfile.mkdtemp(prefix=settings.temp_prefix)``. The directory is removed
on close, or by a ``weakref.finalize`` hook when the owner is dropped
without being closed. ``cleanup_stale_temp_dirs`` removes directories left
behind by processes that died before either could run.
"""

import logging
import os
import shutil
import tempfile
import time
import weakref
from typing import Optional

from multisql.core.config import settings

logger = logging.getLogger(__name__)


def _remove_directory(path: str) -> None:
    shutil.rmtree(path, ignore_errors=True)
    logger.debug(f"Removed staging directory: {path}")


class StagingDirectory:
    """A private temporary directory deleted by cleanup() or on garbage collection."""

    def __init__(self, prefix: Optional[str] = None):
        self.path = tempfile.mkdtemp(prefix=prefix or settings.temp_prefix)
        self._finalizer = weakref.finalize(self, _remove_directory, self.path)
        logger.debug(f"Created staging directory: {self.path}")

    def __repr__(self) -> str:
        return f"StagingDirectory({self.path!r})"

    def file(self, name: str) -> str:
        """Path for ``name`` inside the directory."""
        return os.path.join(self.path, os.path.basename(name) or "data")

    @property
    def exists(self) -> bool:
        return self._finalizer.alive and os.path.isdir(self.path)

    def cleanup(self) -> None:
        # finalize runs at most once
        self._finalizer()


def cleanup_stale_temp_dirs(
    max_age_seconds: Optional[int] = None,
    prefix: Optional[str] = None,
    root: Optional[str] = None,
) -> int:
    """
    Remove prefixed staging directories older than ``max_age_seconds``.

    Returns:
        Number of directories removed
    """
    max_age = settings.stale_temp_seconds if max_age_seconds is None else max_age_seconds
    prefix = prefix or settings.temp_prefix
    root = root or tempfile.gettempdir()
    cutoff = time.time() - max_age

    removed = 0
    try:
        entries = list(os.scandir(root))
    except OSError as e:
        logger.warning(f"Cannot scan temp directory {root}: {e}")
        return 0

    for entry in entries:
        if not entry.name.startswith(prefix):
            continue
        try:
            if not entry.is_dir(follow_symlinks=False) or entry.stat().st_mtime > cutoff:
                continue
        except OSError:
            continue
        _remove_directory(entry.path)
        removed += 1

    if removed:
        logger.info(f"Removed {removed} stale staging directories from {root}")
    return removed
