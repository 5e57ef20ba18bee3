"""
Tests for file type detection.
"""

import gzip

import pytest

from multisql.drivers import file_type
from multisql.errors import IoError


class TestDetect:
    """Tests for media type, magic byte and extension detection."""

    def test_magic_beats_extension(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_bytes(gzip.compress(b"id\n1\n"))
        assert file_type.detect(str(path)) is file_type.GZIP

    def test_extension(self, tmp_path):
        path = tmp_path / "users.CSV"
        path.write_text("id\n1\n")
        assert file_type.detect(str(path)) is file_type.CSV

    def test_media_type(self, tmp_path):
        path = tmp_path / "export"
        path.write_text('[{"id": 1}]')
        assert file_type.detect(str(path), "application/json; charset=utf-8") is file_type.JSON

    def test_generic_media_type_ignored(self, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("id\n1\n")
        assert file_type.detect(str(path), "text/plain") is file_type.CSV

    def test_unknown_is_text(self, tmp_path):
        path = tmp_path / "notes"
        path.write_text("hello")
        assert file_type.detect(str(path)) is file_type.TEXT

    def test_zip_signature_needs_extension(self, tmp_path):
        path = tmp_path / "archive.zip"
        path.write_bytes(b"PK\x03\x04" + b"\x00" * 20)
        assert file_type.detect(str(path)) is file_type.TEXT

    def test_sqlite(self, users_file):
        assert file_type.detect(str(users_file("sqlite3"))) is file_type.SQLITE

    def test_missing_file(self, tmp_path):
        with pytest.raises(IoError):
            file_type.detect(str(tmp_path / "missing.bin"))


class TestStripExtension:
    """Tests for removing container extensions."""

    @pytest.mark.parametrize("name,kind,expected", [
        ("users.csv.gz", file_type.GZIP, "users.csv"),
        ("users.csv.GZ", file_type.GZIP, "users.csv"),
        ("users.csv.zst", file_type.ZSTD, "users.csv"),
        ("users.csv", file_type.GZIP, "users.csv"),
    ])
    def test_strip(self, name, kind, expected):
        assert file_type.strip_extension(name, kind) == expected
