"""
Tests for the S3 driver.

boto3 is never asked to reach a network; the client is replaced by a mock.
"""

from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("boto3")

from botocore.exceptions import ClientError

from multisql.drivers.s3_driver import S3Driver, parse_s3_url
from multisql.errors import InvalidUrl, IoError, Unauthorized
from multisql.values import Value

from conftest import USERS_QUERY

CSV_TEXT = b"id,name\n1,John Doe\n2,Jane Smith\n"


def _client(body: bytes = CSV_TEXT, content_type: str = "text/csv") -> MagicMock:
    stream = MagicMock()
    stream.iter_chunks.return_value = [body]
    client = MagicMock()
    client.get_object.return_value = {"Body": stream, "ContentType": content_type}
    return client


class TestParseS3Url:
    """Tests for bucket, key and endpoint resolution."""

    def test_path_style(self):
        location = parse_s3_url(
            "s3://KEY:SECRET@localhost:9000/bucket/data/users.csv"
            "?region=us-east-1&scheme=http&force_path_style=true"
        )
        assert location.bucket == "bucket"
        assert location.key == "data/users.csv"
        assert location.endpoint_url == "http://localhost:9000"
        assert location.region == "us-east-1"
        assert location.access_key_id == "KEY"
        assert location.secret_access_key == "SECRET"
        assert location.file_name == "users.csv"

    def test_virtual_host_style(self):
        location = parse_s3_url("s3://bucket.s3.amazonaws.com/data/users.parquet")
        assert location.bucket == "bucket"
        assert location.key == "data/users.parquet"
        assert location.endpoint_url == "https://s3.amazonaws.com:443"

    def test_bucket_only_host(self):
        location = parse_s3_url("s3://bucket/users.csv")
        assert location.bucket == "bucket"
        assert location.endpoint_url is None
        assert location.client_kwargs() == {}

    def test_explicit_password_wins(self):
        location = parse_s3_url("s3://KEY:SECRET@bucket/users.csv", password="OTHER")
        assert location.secret_access_key == "OTHER"
        assert location.client_kwargs()["aws_secret_access_key"] == "OTHER"

    @pytest.mark.parametrize("url", ["s3://bucket/", "s3://bucket/data/", "s3:///"])
    def test_missing_key(self, url):
        with pytest.raises(InvalidUrl):
            parse_s3_url(url)


class TestS3Driver:
    """Tests for download and dispatch."""

    @pytest.mark.asyncio
    async def test_download_and_query(self, manager, staging_root):
        client = _client()
        with patch.object(S3Driver, "create_client", return_value=client):
            connection = await manager.connect("s3://bucket/data/users.csv")
        try:
            result = await connection.query(USERS_QUERY)
            assert await result.fetch_all() == [
                [Value.i64(1), Value.string("John Doe")],
                [Value.i64(2), Value.string("Jane Smith")],
            ]
            assert connection.url() == "s3://bucket/data/users.csv?separator=%2C"
        finally:
            await connection.close()

        client.get_object.assert_called_once_with(Bucket="bucket", Key="data/users.csv")
        assert list(staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_access_denied(self, manager, staging_root):
        client = MagicMock()
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GetObject"
        )
        with patch.object(S3Driver, "create_client", return_value=client):
            with pytest.raises(Unauthorized):
                await manager.connect("s3://bucket/users.csv")
        assert list(staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_object(self, manager, staging_root):
        client = MagicMock()
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        with patch.object(S3Driver, "create_client", return_value=client):
            with pytest.raises(IoError):
                await manager.connect("s3://bucket/users.csv")
