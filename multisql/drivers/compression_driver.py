"""
Compression drivers: gzip, bzip2, xz, brotli, lz4 and zstd.

    gzip:///data/users.csv.gz
    zstd:///data/users.csv.zst?has_header=true

The file is decompressed into a staging directory under its name minus the
compression extension (``users.csv.gz`` -> ``users.csv``), then handed to
the driver claiming the decompressed file.
"""

import asyncio
import bz2
import gzip
import logging
import lzma
import os
import shutil
from abc import abstractmethod
from typing import BinaryIO, Optional

try:
    import brotli
    BROTLI_AVAILABLE = True
except ImportError:
    BROTLI_AVAILABLE = False
    brotli = None

try:
    import lz4.frame
    LZ4_AVAILABLE = True
except ImportError:
    LZ4_AVAILABLE = False

try:
    import zstandard
    ZSTANDARD_AVAILABLE = True
except ImportError:
    ZSTANDARD_AVAILABLE = False
    zstandard = None

from multisql.core.logging import mask_url
from multisql.drivers import file_type as file_types
from multisql.drivers.base import Connection
from multisql.drivers.container import ContainerDriver
from multisql.drivers.manager import DriverManager
from multisql.drivers.temp import StagingDirectory
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed, IoError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class CompressionDriver(ContainerDriver):
    """Base class: subclasses implement decompress()."""

    FILE_TYPE: file_types.FileType = file_types.GZIP

    @abstractmethod
    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        pass

    def _decompress_file(self, source_path: str, target_path: str) -> None:
        with open(source_path, "rb") as source, open(target_path, "xb") as target:
            self.decompress(source, target)

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        parsed = DriverUrl(url)
        source_path = parsed.file_path()
        if not os.path.isfile(source_path):
            raise IoError(f"File not found: {source_path}")

        staging = StagingDirectory()
        target_path = staging.file(file_types.strip_extension(os.path.basename(source_path), self.FILE_TYPE))
        try:
            await asyncio.to_thread(self._decompress_file, source_path, target_path)
        except Exception as e:
            staging.cleanup()
            raise IoError(f"Failed to decompress {source_path}: {e}", original_error=e) from e

        logger.info(f"{self.IDENTIFIER} decompressed: {mask_url(url)} -> {target_path}")
        return await self.dispatch(url, target_path, password, staging=staging)


class GzipDriver(CompressionDriver):
    IDENTIFIER = "gzip"
    FILE_TYPES = ("gzip",)
    FILE_TYPE = file_types.GZIP

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with gzip.GzipFile(fileobj=source) as stream:
            shutil.copyfileobj(stream, target, _CHUNK_SIZE)


class Bzip2Driver(CompressionDriver):
    IDENTIFIER = "bzip2"
    FILE_TYPES = ("bzip2",)
    FILE_TYPE = file_types.BZIP2

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with bz2.BZ2File(source) as stream:
            shutil.copyfileobj(stream, target, _CHUNK_SIZE)


class XzDriver(CompressionDriver):
    IDENTIFIER = "xz"
    FILE_TYPES = ("xz",)
    FILE_TYPE = file_types.XZ

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with lzma.LZMAFile(source) as stream:
            shutil.copyfileobj(stream, target, _CHUNK_SIZE)


class BrotliDriver(CompressionDriver):
    IDENTIFIER = "brotli"
    FILE_TYPES = ("brotli",)
    FILE_TYPE = file_types.BROTLI

    def __init__(self, manager: Optional[DriverManager] = None):
        if not BROTLI_AVAILABLE:
            raise ConnectionFailed("brotli not installed. Run: pip install brotli")
        super().__init__(manager)

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        decompressor = brotli.Decompressor()
        while True:
            chunk = source.read(_CHUNK_SIZE)
            if not chunk:
                break
            target.write(decompressor.process(chunk))
        if not decompressor.is_finished():
            raise IoError("Truncated brotli stream")


class Lz4Driver(CompressionDriver):
    IDENTIFIER = "lz4"
    FILE_TYPES = ("lz4",)
    FILE_TYPE = file_types.LZ4

    def __init__(self, manager: Optional[DriverManager] = None):
        if not LZ4_AVAILABLE:
            raise ConnectionFailed("lz4 not installed. Run: pip install lz4")
        super().__init__(manager)

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with lz4.frame.LZ4FrameFile(source, mode="rb") as stream:
            shutil.copyfileobj(stream, target, _CHUNK_SIZE)


class ZstdDriver(CompressionDriver):
    IDENTIFIER = "zstd"
    FILE_TYPES = ("zstd",)
    FILE_TYPE = file_types.ZSTD

    def __init__(self, manager: Optional[DriverManager] = None):
        if not ZSTANDARD_AVAILABLE:
            raise ConnectionFailed("zstandard not installed. Run: pip install zstandard")
        super().__init__(manager)

    def decompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with zstandard.ZstdDecompressor().stream_reader(source) as stream:
            shutil.copyfileobj(stream, target, _CHUNK_SIZE)
