"""
Local file dispatch.

    file:///data/users.parquet
    file:///data/export.txt?separator=%7C

The file type is sniffed from the file itself (magic bytes, then the
extension) and the URL is handed to the driver that claims it. Nothing is
copied; the inner driver reads the original file.
"""

import logging
import os
from typing import Optional

from multisql.drivers.base import Connection
from multisql.drivers.container import ContainerDriver
from multisql.drivers.url import DriverUrl
from multisql.errors import IoError

logger = logging.getLogger(__name__)


class FileDriver(ContainerDriver):
    IDENTIFIER = "file"

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        path = DriverUrl(url).file_path()
        if not os.path.isfile(path):
            raise IoError(f"File not found: {path}")
        return await self.dispatch(url, path, password)
