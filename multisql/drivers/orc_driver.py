"""
ORC driver.

    orc:///data/users.orc

pyarrow.orc is not built on every platform; where it is missing this
driver is not registered.
"""

import logging
from typing import Any, Dict

import pyarrow.orc as orc

from multisql.drivers.tabular import TabularDriver, get_table_name
from multisql.drivers.url import DriverUrl

logger = logging.getLogger(__name__)


class OrcDriver(TabularDriver):
    """Driver for ORC files."""

    IDENTIFIER = "orc"
    FILE_TYPES = ("orc",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        return {get_table_name(path): orc.read_table(path)}
