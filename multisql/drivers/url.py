"""
Database URL parsing.

    <scheme>://[<user>[:<password>]@]<host-or-path>[?<query>]

``DriverUrl`` wraps ``urllib.parse.urlsplit`` with the accessors drivers
need: decoded credentials, typed query parameters and the local file path
of file-backed URLs.
"""

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from multisql.core.logging import mask_url
from multisql.errors import ConversionError, InvalidUrl

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def parse_scheme(url: str) -> str:
    """Return the text before the first ``:``."""
    scheme, separator, _ = url.partition(":")
    if not separator or not scheme:
        raise InvalidUrl(f"Invalid URL, no scheme: {mask_url(url)}")
    return scheme.lower()


class DriverUrl:
    """A parsed database URL."""

    def __init__(self, url: str):
        self.raw = url
        self.scheme = parse_scheme(url)
        try:
            self._parts = urlsplit(url)
            # port is parsed lazily by urlsplit; force validation here
            self._port = self._parts.port
        except ValueError as e:
            raise InvalidUrl(f"Invalid URL {mask_url(url)}: {e}", original_error=e) from e
        self._pairs: List[Tuple[str, str]] = parse_qsl(self._parts.query, keep_blank_values=True)

    def __repr__(self) -> str:
        return f"DriverUrl({mask_url(self.raw)!r})"

    # -------------------------------------------------------------------------
    # Authority
    # -------------------------------------------------------------------------

    @property
    def host(self) -> Optional[str]:
        return self._parts.hostname

    @property
    def port(self) -> Optional[int]:
        return self._port

    @property
    def username(self) -> Optional[str]:
        return unquote(self._parts.username) if self._parts.username else None

    @property
    def password(self) -> Optional[str]:
        return unquote(self._parts.password) if self._parts.password else None

    @property
    def path(self) -> str:
        return unquote(self._parts.path)

    @property
    def database(self) -> Optional[str]:
        """The path without its leading slash, or None when empty."""
        database = self.path.lstrip("/")
        return database or None

    # -------------------------------------------------------------------------
    # Query parameters
    # -------------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._parts.query

    @property
    def params(self) -> Dict[str, str]:
        """Query parameters; a repeated name keeps its last value."""
        return dict(self._pairs)

    def param_pairs(self) -> List[Tuple[str, str]]:
        return list(self._pairs)

    def param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.params.get(name, default)

    def bool_param(self, name: str, default: bool = False) -> bool:
        value = self.params.get(name)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConversionError(f"Invalid boolean for parameter {name}: {value}")

    def int_param(self, name: str, default: Optional[int] = None, minimum: int = 0) -> Optional[int]:
        value = self.params.get(name)
        if value is None:
            return default
        try:
            number = int(value)
        except ValueError as e:
            raise ConversionError(f"Invalid integer for parameter {name}: {value}", original_error=e) from e
        if number < minimum:
            raise ConversionError(f"Parameter {name} must be >= {minimum}: {value}")
        return number

    def char_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """A parameter that must be exactly one ASCII character."""
        value = self.params.get(name)
        if value is None:
            return default
        if len(value) != 1:
            raise ConversionError(f"Invalid character length; expected 1 character: {value}")
        if not value.isascii():
            raise ConversionError(f"Invalid character: {value}")
        return value

    def list_param(self, name: str) -> Optional[List[str]]:
        value = self.params.get(name)
        if value is None:
            return None
        return [item.strip() for item in value.split(",")]

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def file_path(self) -> str:
        """The local path of a file-backed URL (text between ``scheme://`` and ``?``)."""
        rest = self.raw.split(":", 1)[1]
        if rest.startswith("//"):
            rest = rest[2:]
        path = unquote(rest.split("?", 1)[0])
        if not path:
            raise InvalidUrl("No file provided")
        return path


def file_url(scheme: str, path: str, query: str = "") -> str:
    """Build ``<scheme>://<path>[?<query>]`` for a local file."""
    url = f"{scheme}://{quote(path, safe='/:')}"
    return f"{url}?{query}" if query else url


def add_params(url: str, params: Dict[str, str]) -> str:
    """Append query parameters to ``url`` without re-encoding existing ones."""
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(params)}"


def missing_params(url: str, other: str) -> Dict[str, str]:
    """Parameters present in ``other`` but absent from ``url``."""
    own = {name for name, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True)}
    return {
        name: value
        for name, value in parse_qsl(urlsplit(other).query, keep_blank_values=True)
        if name not in own
    }
