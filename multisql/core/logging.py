"""
Logging helpers.

Modules log through ``logging.getLogger(__name__)``; the host decides
where records go. ``configure_logging`` is a convenience for scripts and
tests. ``mask_url`` hides credentials before a URL reaches a log line.
"""

import logging
from typing import Optional, Union
from urllib.parse import urlsplit, urlunsplit

from multisql.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Install a root handler at the configured level."""
    logging.basicConfig(
        level=level or settings.log_level.upper(),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def mask_url(url: str) -> str:
    """Replace the password in a URL with ``***``."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    if not parts.password:
        return url

    netloc = parts.netloc.rsplit("@", 1)[1]
    user = parts.username or ""
    return urlunsplit(parts._replace(netloc=f"{user}:***@{netloc}"))
