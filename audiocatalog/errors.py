"""Error taxonomy and the single failure classification used for remote calls."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Kinds of failure surfaced by the catalog, upload and deletion code."""
    FILE_NOT_FOUND = "file_not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    PARSE_DEGRADED = "parse_degraded"
    PARSE_FAILED = "parse_failed"
    NETWORK_UNREACHABLE = "network_unreachable"
    HTTP_CLIENT_ERROR = "http_client_error"
    HTTP_SERVER_ERROR = "http_server_error"
    PERMISSION_DENIED = "permission_denied"
    INSUFFICIENT_STORAGE = "insufficient_storage"
    UNEXPECTED = "unexpected"


HTTP_STATUS_MESSAGES = {
    400: "Malformed request",
    401: "Unauthenticated, please sign in again",
    403: "Forbidden",
    404: "Not found",
    415: "Unsupported media type",
}

NETWORK_ERROR_MESSAGE = "Network unreachable, check your connection and retry"


@dataclass(frozen=True)
class ClassifiedError:
    """A failure mapped onto the error taxonomy with a user-facing message."""
    kind: ErrorKind
    message: str
    status: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class CatalogError(Exception):
    """Base class for errors raised by audiocatalog services."""

    kind = ErrorKind.UNEXPECTED


class RecordingNotFoundError(CatalogError):
    kind = ErrorKind.FILE_NOT_FOUND


class UnsupportedFormatError(CatalogError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class InsufficientStorageError(CatalogError):
    kind = ErrorKind.INSUFFICIENT_STORAGE


class RemoteApiError(CatalogError):
    """Raised by remote calls; carries the classified failure."""

    def __init__(self, error: ClassifiedError):
        super().__init__(error.message)
        self.error = error
        self.kind = error.kind

    @property
    def status(self) -> Optional[int]:
        return self.error.status


def classify_failure(status: Optional[int] = None,
                     body: Optional[str] = None,
                     exc: Optional[BaseException] = None) -> ClassifiedError:
    """Map an HTTP status or a transport exception onto a ClassifiedError.

    This is the only place HTTP and transport failures are translated; upload,
    fetch and delete calls all route through it.

    Args:
        status: HTTP status code of a non-successful response
        body: Raw response body, used for the generic message
        exc: Exception raised while performing the call

    Returns:
        ClassifiedError describing the failure
    """
    if exc is not None:
        return _classify_exception(exc)

    if status is None:
        return ClassifiedError(ErrorKind.UNEXPECTED, "Unexpected error: no response")

    if status in HTTP_STATUS_MESSAGES:
        return ClassifiedError(ErrorKind.HTTP_CLIENT_ERROR, HTTP_STATUS_MESSAGES[status], status)
    if 500 <= status <= 599:
        return ClassifiedError(ErrorKind.HTTP_SERVER_ERROR, f"Server error ({status})", status)

    raw = (body or "").strip()
    message = f"Request failed with HTTP {status}: {raw}" if raw else f"Request failed with HTTP {status}"
    kind = ErrorKind.HTTP_CLIENT_ERROR if 400 <= status <= 499 else ErrorKind.UNEXPECTED
    return ClassifiedError(kind, message, status)


def _classify_exception(exc: BaseException) -> ClassifiedError:
    # FileNotFoundError and PermissionError are OSErrors, check them first
    if isinstance(exc, FileNotFoundError):
        return ClassifiedError(ErrorKind.FILE_NOT_FOUND, f"File not found: {exc.filename or exc}")
    if isinstance(exc, PermissionError):
        return ClassifiedError(ErrorKind.PERMISSION_DENIED, f"Permission denied: {exc.filename or exc}")
    if isinstance(exc, aiohttp.ClientResponseError):
        return classify_failure(status=exc.status, body=exc.message)
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)):
        return ClassifiedError(ErrorKind.NETWORK_UNREACHABLE, NETWORK_ERROR_MESSAGE)
    if isinstance(exc, OSError):
        return ClassifiedError(ErrorKind.UNEXPECTED, f"I/O error: {exc}")
    return ClassifiedError(ErrorKind.UNEXPECTED, f"Unexpected error: {exc}")
