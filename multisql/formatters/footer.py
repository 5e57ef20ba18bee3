"""
Result footer: row count and elapsed time.

    3 rows (1.234ms)

The count is grouped per locale (babel); the elapsed time is rendered in
milliseconds with three decimals.
"""

import logging
import time
from typing import Optional

from babel.core import UnknownLocaleError
from babel.numbers import format_decimal

from multisql.formatters.highlight import dim
from multisql.formatters.options import FormatterOptions
from multisql.formatters.writers import Writer

logger = logging.getLogger(__name__)


def format_count(count: int, locale: str) -> str:
    """Group ``count`` per ``locale``, falling back to English."""
    try:
        return format_decimal(count, locale=locale)
    except (UnknownLocaleError, ValueError) as e:
        logger.debug(f"Unknown locale {locale!r}, using en: {e}")
        return format_decimal(count, locale="en")


def format_elapsed(seconds: float) -> str:
    return f"{seconds * 1000:.3f}ms"


def elapsed_seconds(options: FormatterOptions, format_started: float) -> float:
    if options.elapsed is not None:
        return options.elapsed
    started = options.started if options.started is not None else format_started
    return time.perf_counter() - started


def footer_text(options: FormatterOptions, count: int, elapsed: float, execute: bool = False) -> Optional[str]:
    """The footer line without a trailing newline, or None when disabled."""
    if not options.footer:
        return None

    show_count = options.changes if execute else options.rows
    parts = []
    if show_count:
        label = "row" if count == 1 else "rows"
        parts.append(f"{format_count(count, options.locale)} {label}")
    if options.timer:
        timing = f"({format_elapsed(elapsed)})"
        parts.append(dim(timing) if options.color else timing)
    return " ".join(parts)


def write_footer(
    options: FormatterOptions,
    writer: Writer,
    count: int,
    format_started: float,
    execute: bool = False,
) -> None:
    text = footer_text(options, count, elapsed_seconds(options, format_started), execute)
    if text is None:
        return
    writer.write(f"{text}\n")
    writer.flush()
