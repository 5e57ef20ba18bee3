"""
S3 driver.

    s3://KEY:SECRET@localhost:9000/bucket/data/users.csv?region=us-east-1&scheme=http&force_path_style=true
    s3://bucket.s3.amazonaws.com/data/users.parquet?region=eu-west-1

The object is downloaded into a staging directory and handed to the driver
that claims its type (ContentType first, then magic bytes and extension).

URL COMPONENTS:
--------------
- userinfo            access key id and secret (otherwise the default boto3 chain)
- host[:port]         endpoint; ``<scheme>://<host>:<port>``
- force_path_style    bucket is the first path segment (default: first host label)
- scheme              endpoint scheme (default http on port 80, https otherwise)
- region              region name
- session_token       session token for temporary credentials
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

try:
    import boto3
    from botocore.config import Config
    from botocore.exceptions import BotoCoreError, ClientError
    BOTO3_AVAILABLE = True
except ImportError:
    BOTO3_AVAILABLE = False
    boto3 = None

from multisql.core.logging import mask_url
from multisql.drivers.base import Connection
from multisql.drivers.container import ContainerDriver
from multisql.drivers.manager import DriverManager
from multisql.drivers.temp import StagingDirectory
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed, InvalidUrl, IoError, Unauthorized

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_UNAUTHORIZED_CODES = {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch", "ExpiredToken"}


@dataclass
class S3Location:
    """Where an object lives and how to reach it."""
    bucket: str
    key: str
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    path_style: bool = False

    @property
    def file_name(self) -> str:
        return os.path.basename(self.key)

    def client_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.region:
            kwargs["region_name"] = self.region
        if self.access_key_id:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key or ""
            if self.session_token:
                kwargs["aws_session_token"] = self.session_token
        return kwargs


def parse_s3_url(url: str, password: Optional[str] = None) -> S3Location:
    """
    Resolve bucket, key, endpoint and credentials from an ``s3://`` URL.

    Raises:
        InvalidUrl: If no bucket or key can be determined
    """
    parsed = DriverUrl(url)
    path_style = parsed.bool_param("force_path_style", False)
    path = parsed.path.lstrip("/")
    host = parsed.host

    if path_style or not host:
        bucket, _, key = path.partition("/")
        endpoint_host = host
    else:
        bucket, _, endpoint_host = host.partition(".")
        key = path

    if not bucket:
        raise InvalidUrl(f"Invalid S3 URL, no bucket: {mask_url(url)}")
    if not key or key.endswith("/"):
        raise InvalidUrl(f"Invalid S3 URL, no file: {mask_url(url)}")

    endpoint_url = None
    if endpoint_host:
        port = parsed.port or 443
        scheme = parsed.param("scheme") or ("http" if port == 80 else "https")
        endpoint_url = f"{scheme}://{endpoint_host}:{port}"

    return S3Location(
        bucket=bucket,
        key=key,
        endpoint_url=endpoint_url,
        region=parsed.param("region"),
        access_key_id=parsed.username,
        secret_access_key=password if password is not None else parsed.password,
        session_token=parsed.param("session_token"),
        path_style=path_style,
    )


class S3Driver(ContainerDriver):
    """Download an S3 object and re-dispatch it."""

    IDENTIFIER = "s3"

    def __init__(self, manager: Optional[DriverManager] = None):
        if not BOTO3_AVAILABLE:
            raise ConnectionFailed("boto3 not installed. Run: pip install boto3")
        super().__init__(manager)

    def create_client(self, location: S3Location) -> Any:
        config = Config(s3={"addressing_style": "path" if location.path_style else "auto"})
        return boto3.client("s3", config=config, **location.client_kwargs())

    def download(self, location: S3Location, target_path: str) -> Optional[str]:
        """Write the object to ``target_path``; returns its ContentType."""
        client = self.create_client(location)
        response = client.get_object(Bucket=location.bucket, Key=location.key)
        body = response["Body"]
        try:
            with open(target_path, "xb") as target:
                for chunk in body.iter_chunks(_CHUNK_SIZE):
                    target.write(chunk)
        finally:
            body.close()
        return response.get("ContentType")

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        location = parse_s3_url(url, password)
        staging = StagingDirectory()
        target_path = staging.file(location.file_name)

        try:
            content_type = await asyncio.to_thread(self.download, location, target_path)
        except ClientError as e:
            staging.cleanup()
            code = e.response.get("Error", {}).get("Code", "")
            message = f"Error getting s3://{location.bucket}/{location.key}: {e}"
            if code in _UNAUTHORIZED_CODES:
                raise Unauthorized(message, original_error=e) from e
            raise IoError(message, original_error=e) from e
        except (BotoCoreError, OSError) as e:
            staging.cleanup()
            raise IoError(f"Failed to download s3://{location.bucket}/{location.key}: {e}", original_error=e) from e

        logger.info(f"Downloaded s3://{location.bucket}/{location.key} -> {target_path}")
        return await self.dispatch(url, target_path, password, staging=staging, media_type=content_type)
