"""
multisql - Driver Error Model

Every failure raised by the driver layer is a DriverError subclass.
Library-specific exceptions are wrapped at the driver boundary and kept
on ``original_error`` so nothing backend-specific leaks to callers.

ERROR KINDS:
------------
- input:     invalid URL, missing or malformed parameter
- routing:   no driver for a scheme or file type
- transport: cannot connect, I/O failure, credentials rejected
- protocol:  the backend rejected a statement
- data:      a column type cannot be mapped to a Value
- lifecycle: operation on a closed connection

ERROR FORMAT:
-------------
{
    "code": "ERR_2001",
    "kind": "routing",
    "message": "No driver registered for scheme: foo",
    "details": {"scheme": "foo"}
}
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR KINDS & CODES
# =============================================================================

class ErrorKind(str, Enum):
    """Taxonomy of driver failures."""

    INPUT = "input"
    ROUTING = "routing"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    DATA = "data"
    LIFECYCLE = "lifecycle"


class ErrorCode(str, Enum):
    """Unique error codes for every error type."""

    # Input (1xxx)
    ERR_INVALID_URL = "ERR_1001"
    ERR_CONVERSION = "ERR_1002"

    # Routing (2xxx)
    ERR_DRIVER_NOT_FOUND = "ERR_2001"

    # Transport (3xxx)
    ERR_CONNECTION_FAILED = "ERR_3001"
    ERR_UNAUTHORIZED = "ERR_3002"
    ERR_IO = "ERR_3003"

    # Protocol (4xxx)
    ERR_QUERY_FAILED = "ERR_4001"

    # Data (5xxx)
    ERR_UNSUPPORTED_COLUMN_TYPE = "ERR_5001"

    # Lifecycle (6xxx)
    ERR_CONNECTION_CLOSED = "ERR_6001"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class DriverError(Exception):
    """Base exception for driver errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    code: ErrorCode = ErrorCode.ERR_IO

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    @property
    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Render the error for display or JSON output."""
        return {
            "code": self.code.value,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidUrl(DriverError):
    """The URL could not be parsed or is missing a required part."""

    kind = ErrorKind.INPUT
    code = ErrorCode.ERR_INVALID_URL


class DriverNotFound(DriverError):
    """No driver is registered for a scheme or file type."""

    kind = ErrorKind.ROUTING
    code = ErrorCode.ERR_DRIVER_NOT_FOUND

    def __init__(self, identifier: str, original_error: Optional[Exception] = None):
        super().__init__(f"No driver found for: {identifier}", original_error)
        self.identifier = identifier

    @property
    def details(self) -> Dict[str, Any]:
        return {"identifier": self.identifier}


class ConnectionFailed(DriverError):
    """Failed to open a session, or the session is closed."""

    kind = ErrorKind.TRANSPORT
    code = ErrorCode.ERR_CONNECTION_FAILED


class ConnectionClosed(ConnectionFailed):
    """Operation attempted on a closed connection."""

    kind = ErrorKind.LIFECYCLE
    code = ErrorCode.ERR_CONNECTION_CLOSED


class Unauthorized(DriverError):
    """The backend rejected the supplied credentials."""

    kind = ErrorKind.TRANSPORT
    code = ErrorCode.ERR_UNAUTHORIZED


class QueryError(DriverError):
    """The backend returned an error for a statement."""

    kind = ErrorKind.PROTOCOL
    code = ErrorCode.ERR_QUERY_FAILED

    def __init__(
        self,
        message: str,
        sql_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.sql_code = sql_code

    @property
    def details(self) -> Dict[str, Any]:
        return {"sql_code": self.sql_code} if self.sql_code else {}


class UnsupportedColumnType(DriverError):
    """A backend column type has no Value mapping."""

    kind = ErrorKind.DATA
    code = ErrorCode.ERR_UNSUPPORTED_COLUMN_TYPE

    def __init__(self, column_name: str, column_type: str):
        super().__init__(
            f"column type [{column_type}] is not supported for column [{column_name}]"
        )
        self.column_name = column_name
        self.column_type = column_type

    @property
    def details(self) -> Dict[str, Any]:
        return {"column_name": self.column_name, "column_type": self.column_type}


class ConversionError(DriverError):
    """A value or parameter could not be converted."""

    kind = ErrorKind.INPUT
    code = ErrorCode.ERR_CONVERSION


class IoError(DriverError):
    """Local or remote I/O failed."""

    kind = ErrorKind.TRANSPORT
    code = ErrorCode.ERR_IO
