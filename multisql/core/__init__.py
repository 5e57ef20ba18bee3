"""
Core

Configuration and logging shared by every driver.
"""

from multisql.core.config import Settings, get_settings, settings
from multisql.core.logging import configure_logging, mask_url

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "configure_logging",
    "mask_url",
]
