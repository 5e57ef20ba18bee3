"""
File type detection.

Each FileType names a format and lists its extensions, media types and
magic-byte signatures. ``detect()`` tries, in order:

1. a reported media type, unless it is generic (text/plain,
   application/octet-stream)
2. magic bytes at the start of the file
3. the file extension
4. plain text
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from multisql.errors import IoError

logger = logging.getLogger(__name__)

GENERIC_MEDIA_TYPES = {"text/plain", "application/octet-stream", ""}

_ZIP_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class FileType:
    name: str
    extensions: Tuple[str, ...] = ()
    media_types: Tuple[str, ...] = ()
    # (offset, signature) pairs; any match identifies the type
    magic: Tuple[Tuple[int, bytes], ...] = ()
    # Signature shared with other formats (zip); the extension must also match
    needs_extension: bool = False
    compression: bool = False

    def matches_magic(self, header: bytes, extension: str) -> bool:
        for offset, signature in self.magic:
            if header[offset:offset + len(signature)] == signature:
                return not self.needs_extension or extension in self.extensions
        return False


# =============================================================================
# KNOWN FILE TYPES
# =============================================================================

ARROW = FileType("arrow", ("arrow", "arrows", "feather", "ipc"),
                 ("application/vnd.apache.arrow.file", "application/vnd.apache.arrow.stream"),
                 ((0, b"ARROW1"),))
AVRO = FileType("avro", ("avro",), ("application/avro", "avro/binary"), ((0, b"Obj\x01"),))
BROTLI = FileType("brotli", ("br",), ("application/x-brotli",), compression=True)
BZIP2 = FileType("bzip2", ("bz2",), ("application/x-bzip2",), ((0, b"BZh"),), compression=True)
CSV = FileType("csv", ("csv",), ("text/csv",))
DUCKDB = FileType("duckdb", ("duckdb", "ddb"), ("application/x-duckdb",), ((8, b"DUCK"),))
FWF = FileType("fwf", ("fwf",), ("text/x-fixed-width",))
GZIP = FileType("gzip", ("gz", "gzip"), ("application/gzip", "application/x-gzip"),
                ((0, b"\x1f\x8b"),), compression=True)
JSON = FileType("json", ("json",), ("application/json",))
JSONL = FileType("jsonl", ("jsonl", "ndjson"), ("application/jsonl", "application/x-ndjson"))
LZ4 = FileType("lz4", ("lz4",), ("application/x-lz4",), ((0, b"\x04\x22\x4d\x18"),), compression=True)
ODS = FileType("ods", ("ods",), ("application/vnd.oasis.opendocument.spreadsheet",),
               ((0, _ZIP_MAGIC),), needs_extension=True)
ORC = FileType("orc", ("orc",), ("application/x-orc",), ((0, b"ORC"),))
PARQUET = FileType("parquet", ("parquet", "pqt"), ("application/vnd.apache.parquet",), ((0, b"PAR1"),))
SQLITE = FileType("sqlite", ("sqlite", "sqlite3", "db", "db3"), ("application/vnd.sqlite3",),
                  ((0, b"SQLite format 3\x00"),))
TEXT = FileType("text", ("txt", "text"), ("text/plain",))
TSV = FileType("tsv", ("tsv", "tab"), ("text/tab-separated-values",))
XLSX = FileType("xlsx", ("xlsx", "xlsm"),
                ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",),
                ((0, _ZIP_MAGIC),), needs_extension=True)
XML = FileType("xml", ("xml",), ("application/xml", "text/xml"))
XZ = FileType("xz", ("xz",), ("application/x-xz",), ((0, b"\xfd7zXZ\x00"),), compression=True)
YAML = FileType("yaml", ("yaml", "yml"), ("application/yaml", "application/x-yaml", "text/yaml"))
ZSTD = FileType("zstd", ("zst", "zstd"), ("application/zstd",), ((0, b"\x28\xb5\x2f\xfd"),), compression=True)

FILE_TYPES: List[FileType] = [
    ARROW, AVRO, BROTLI, BZIP2, CSV, DUCKDB, FWF, GZIP, JSON, JSONL, LZ4, ODS, ORC,
    PARQUET, SQLITE, TEXT, TSV, XLSX, XML, XZ, YAML, ZSTD,
]

_HEADER_SIZE = 16


def extension_of(path: str) -> str:
    """Lower-cased final extension without the dot."""
    return os.path.splitext(path)[1].lstrip(".").lower()


def by_name(name: str) -> Optional[FileType]:
    for file_type in FILE_TYPES:
        if file_type.name == name:
            return file_type
    return None


def by_extension(extension: str) -> Optional[FileType]:
    extension = extension.lstrip(".").lower()
    for file_type in FILE_TYPES:
        if extension in file_type.extensions:
            return file_type
    return None


def by_media_type(media_type: str) -> Optional[FileType]:
    media_type = media_type.split(";", 1)[0].strip().lower()
    for file_type in FILE_TYPES:
        if media_type in file_type.media_types:
            return file_type
    return None


def by_header(header: bytes, extension: str = "") -> Optional[FileType]:
    for file_type in FILE_TYPES:
        if file_type.matches_magic(header, extension):
            return file_type
    return None


def detect(path: str, media_type: Optional[str] = None) -> FileType:
    """Identify the type of the file at ``path``."""
    if media_type:
        normalized = media_type.split(";", 1)[0].strip().lower()
        if normalized not in GENERIC_MEDIA_TYPES:
            file_type = by_media_type(normalized)
            if file_type is not None:
                logger.debug(f"File type {file_type.name} from media type {normalized}")
                return file_type

    extension = extension_of(path)
    try:
        with open(path, "rb") as f:
            header = f.read(_HEADER_SIZE)
    except OSError as e:
        raise IoError(f"Cannot read {path}: {e}", original_error=e) from e

    file_type = by_header(header, extension) or by_extension(extension) or TEXT
    logger.debug(f"File type {file_type.name} detected for {path}")
    return file_type


def strip_extension(file_name: str, file_type: FileType) -> str:
    """Drop a trailing extension of ``file_type``, ignoring case (``users.csv.GZ`` -> ``users.csv``)."""
    stem, extension = os.path.splitext(file_name)
    if extension.lstrip(".").lower() in file_type.extensions:
        return stem
    return file_name
