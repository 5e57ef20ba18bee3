"""
HTTP / HTTPS drivers.

    https://example.com/data/users.csv
    https://example.com/export?_headers=Authorization=Bearer%20abc;Accept=text/csv

The body of a GET request is streamed into a staging directory, its type is
detected (Content-Type first, then magic bytes and extension) and the file
is handed to the driver that claims it.

REQUEST HEADERS:
---------------
- ``_headers=k1=v1;k2=v2`` is removed from the request URL and sent as headers
- every other query parameter stays on the URL and is also sent as a header
- ``User-Agent: multisql/<version> (<os>; <arch>)`` unless one is supplied

The connection also exposes two tables built from the exchange:

    request_headers(header, value)
    response_headers(header, value)
"""

import logging
import os
import platform
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote, urlencode, urlsplit, urlunsplit

try:
    import httpx
    HTTPX_AVAILABLE = True
except ImportError:
    HTTPX_AVAILABLE = False
    httpx = None

from multisql.core.config import settings
from multisql.core.logging import mask_url
from multisql.drivers.base import Connection
from multisql.drivers.container import ContainerDriver
from multisql.drivers.manager import DriverManager
from multisql.drivers.temp import StagingDirectory
from multisql.drivers.url import DriverUrl
from multisql.errors import ConnectionFailed, InvalidUrl, IoError, Unauthorized

logger = logging.getLogger(__name__)

HEADERS_PARAM = "_headers"
DEFAULT_FILE_NAME = "response"


def user_agent() -> str:
    from multisql import __version__

    return f"multisql/{__version__} ({platform.system().lower()}; {platform.machine().lower()})"


def parse_headers_param(value: str) -> List[Tuple[str, str]]:
    """Parse ``k1=v1;k2=v2`` into header pairs."""
    headers = []
    for item in value.split(";"):
        if not item.strip():
            continue
        name, separator, header_value = item.partition("=")
        if not separator or not name.strip():
            raise InvalidUrl(f"Invalid header, expected name=value: {item}")
        headers.append((name.strip(), header_value.strip()))
    return headers


def build_request(url: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a driver URL into the URL to fetch and the headers to send.

    Returns:
        (request_url, headers)
    """
    parts = urlsplit(url)
    kept: List[Tuple[str, str]] = []
    headers: Dict[str, str] = {}

    for name, value in DriverUrl(url).param_pairs():
        if name == HEADERS_PARAM:
            headers.update(parse_headers_param(value))
        else:
            kept.append((name, value))
            headers[name] = value

    if not any(name.lower() == "user-agent" for name in headers):
        headers["User-Agent"] = user_agent()

    request_url = urlunsplit(parts._replace(query=urlencode(kept)))
    return request_url, headers


def file_name_of(url: str) -> str:
    """Last path segment of ``url``, or ``response`` when there is none."""
    name = os.path.basename(unquote(urlsplit(url).path).rstrip("/"))
    return name or DEFAULT_FILE_NAME


def headers_table_sql(table_name: str, headers: List[Tuple[str, str]]) -> str:
    """CREATE TABLE statement holding ``headers`` as (header, value) rows."""
    if not headers:
        return f'CREATE TABLE {table_name} ("header" VARCHAR, "value" VARCHAR)'
    selects = [
        f"SELECT {_literal(name.lower())} AS \"header\", {_literal(value)} AS \"value\""
        for name, value in headers
    ]
    return f"CREATE TABLE {table_name} AS " + " UNION ALL ".join(selects)


def _literal(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


class HttpDriver(ContainerDriver):
    """Fetch a file over HTTP and re-dispatch it."""

    IDENTIFIER = "http"

    def __init__(self, manager: Optional[DriverManager] = None):
        if not HTTPX_AVAILABLE:
            raise ConnectionFailed("httpx not installed. Run: pip install httpx")
        super().__init__(manager)

    async def fetch(self, request_url: str, headers: Dict[str, str], target_path: str) -> "httpx.Response":
        """Stream the body of a GET into ``target_path`` and return the response."""
        async with httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True) as client:
            async with client.stream("GET", request_url, headers=headers) as response:
                if response.status_code in (401, 403):
                    raise Unauthorized(f"HTTP {response.status_code} fetching {mask_url(request_url)}")
                if response.status_code >= 400:
                    raise IoError(f"HTTP {response.status_code} fetching {mask_url(request_url)}")
                with open(target_path, "xb") as target:
                    async for chunk in response.aiter_bytes():
                        target.write(chunk)
                return response

    async def connect(self, url: str, password: Optional[str] = None) -> Connection:
        request_url, request_headers = build_request(url)
        staging = StagingDirectory()
        target_path = staging.file(file_name_of(request_url))

        try:
            response = await self.fetch(request_url, request_headers, target_path)
        except (Unauthorized, IoError):
            staging.cleanup()
            raise
        except httpx.HTTPError as e:
            staging.cleanup()
            raise IoError(f"Failed to fetch {mask_url(request_url)}: {e}", original_error=e) from e
        except OSError as e:
            staging.cleanup()
            raise IoError(f"Failed to write {target_path}: {e}", original_error=e) from e

        logger.info(f"Fetched {mask_url(request_url)} -> {target_path} ({response.status_code})")

        response_headers = list(response.headers.items())
        sent_headers = list(request_headers.items())

        async def create_header_tables(inner: Connection) -> None:
            await inner.execute(headers_table_sql("request_headers", sent_headers))
            await inner.execute(headers_table_sql("response_headers", response_headers))

        return await self.dispatch(
            url,
            target_path,
            password,
            staging=staging,
            media_type=response.headers.get("content-type"),
            setup=create_header_tables,
        )


class HttpsDriver(HttpDriver):
    IDENTIFIER = "https"
