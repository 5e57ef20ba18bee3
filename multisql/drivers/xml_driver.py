"""
XML driver.

    xml:///data/users.xml
    xml:///data/users.xml?xpath=//user

Each element matched by ``xpath`` (default: the children of the root)
becomes a row; its child elements and attributes become columns.
Parsing uses pandas.read_xml with the standard library etree parser.
"""

import logging
from typing import Any, Dict

import pandas as pd

from multisql.drivers.tabular import TabularDriver, apply_schema_inference, get_table_name
from multisql.drivers.url import DriverUrl

logger = logging.getLogger(__name__)


class XmlDriver(TabularDriver):
    """Driver for XML documents."""

    IDENTIFIER = "xml"
    FILE_TYPES = ("xml",)

    def read(self, path: str, url: DriverUrl) -> Dict[str, Any]:
        frame = pd.read_xml(path, xpath=url.param("xpath", "./*"), parser="etree")
        return {get_table_name(path): apply_schema_inference(frame, url)}
