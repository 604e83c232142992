"""Project-native typed errors shared by validation, services and the API boundary."""

from __future__ import annotations

from enum import Enum
from typing import Any, Final


class ErrorKind(str, Enum):
    """Closed set of application error kinds.

    The enum value is the stable machine-readable code emitted at the API boundary.
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    DUPLICATE_FOUND = "DUPLICATE_FOUND"
    RECORD_MISSING_DATA = "RECORD_MISSING_DATA"
    UNEXPECTED_FILE = "UNEXPECTED_FILE"


UNKNOWN_ERROR_CODE: Final[int] = -1
UNKNOWN_ERROR_MESSAGE: Final[str] = "Unknown Error"

ERROR_KIND_HTTP_STATUSES: Final[dict[ErrorKind, int]] = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.RECORD_NOT_FOUND: 404,
    ErrorKind.DUPLICATE_FOUND: 409,
    ErrorKind.RECORD_MISSING_DATA: 422,
    ErrorKind.UNEXPECTED_FILE: 502,
}


class TrackerError(Exception):
    """Base exception for all typed application failures.

    Attributes:
        kind: Error kind tag used for dispatch at the API boundary.
        message: Human-readable failure message.
        supporting_data: Optional JSON-compatible payload describing the failure.
    """

    def __init__(self, kind: ErrorKind, message: str, supporting_data: Any = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.supporting_data = supporting_data

    @property
    def code(self) -> int:
        """Return the numeric code for this error kind, equal to its HTTP status.

        Returns:
            int: Numeric application error code.

        Raises:
            KeyError: Raised when the kind has no registered status.
        """

        return self.http_status

    @property
    def http_status(self) -> int:
        """Return the HTTP status mapped to this error kind.

        Returns:
            int: HTTP status code used by the API error handler.

        Raises:
            KeyError: Raised when the kind has no registered status.
        """

        return ERROR_KIND_HTTP_STATUSES[self.kind]


class InvalidRequestError(TrackerError):
    """Request params or body failed validation; supporting data holds per-item messages."""

    def __init__(self, supporting_data: list[dict[str, Any]], message: str = "Invalid request"):
        super().__init__(ErrorKind.INVALID_REQUEST, message, supporting_data)


class RecordNotFoundError(TrackerError):
    """A referenced record does not exist."""

    def __init__(self, message: str, supporting_data: Any = None):
        super().__init__(ErrorKind.RECORD_NOT_FOUND, message, supporting_data)


class DuplicateFoundError(TrackerError):
    """A record with the same natural key already exists."""

    def __init__(self, message: str, supporting_data: Any = None):
        super().__init__(ErrorKind.DUPLICATE_FOUND, message, supporting_data)


class RecordMissingDataError(TrackerError):
    """A required downstream record lacks the data needed to proceed."""

    def __init__(self, message: str, supporting_data: Any = None):
        super().__init__(ErrorKind.RECORD_MISSING_DATA, message, supporting_data)


class UnexpectedFileError(TrackerError):
    """An external file had an unexpected shape or content type."""

    def __init__(self, message: str, supporting_data: Any = None):
        super().__init__(ErrorKind.UNEXPECTED_FILE, message, supporting_data)


class ProjectionContractError(TypeError):
    """A projection transform received a value of an unexpected shape.

    This signals a programming or input-contract violation; callers validate
    before projecting, so it is never converted into an application error.
    """


class ReferenceCacheEmptyError(RuntimeError):
    """Raised when a reference cache is read before it was initialized."""
