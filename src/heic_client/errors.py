"""Error definitions for the HEIC conversion API client."""

from __future__ import annotations

import logging
import traceback
from typing import Any

from .logging_config import get_logger
from .models import ConversionFailure, ErrorKind


class ApiClientError(Exception):
    """Base exception for every failure the client reports.

    Attributes:
        message: Human-readable message
        detail: Optional diagnostic detail (e.g. a response body)
        status_code: HTTP status code if a response was received
    """

    kind = ErrorKind.UNKNOWN
    retryable = False

    def __init__(
        self, message: str, detail: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status_code = status_code


class InvalidFormatError(ApiClientError):
    """Raised when a file is not a supported HEIC/HEIF file."""

    kind = ErrorKind.INVALID_FORMAT


class FileTooLargeError(ApiClientError):
    """Raised when a file exceeds the configured upload limit."""

    kind = ErrorKind.FILE_TOO_LARGE


class FileReadError(ApiClientError):
    """Raised when the upload payload cannot be read from disk."""

    kind = ErrorKind.FILE_READ


class RequestTimeoutError(ApiClientError):
    """Raised when no response arrived within the timeout."""

    kind = ErrorKind.TIMEOUT
    retryable = True


class NetworkError(ApiClientError):
    """Raised on transport failures such as DNS errors or refused connections."""

    kind = ErrorKind.NETWORK
    retryable = True


class HttpError(ApiClientError):
    """Raised when the service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        message = f"HTTP {status_code}: {body}" if body else f"HTTP {status_code}"
        super().__init__(message, body or None, status_code)
        self.body = body


class HttpClientError(HttpError):
    """4xx response; the request will not succeed as sent."""

    kind = ErrorKind.HTTP_CLIENT


class HttpServerError(HttpError):
    """5xx or other unexpected non-2xx response."""

    kind = ErrorKind.HTTP_SERVER
    retryable = True


class LogicalFailureError(ApiClientError):
    """Raised when the service replied successfully but flagged a failure."""

    kind = ErrorKind.LOGICAL_FAILURE


def http_error_for_status(status_code: int, body: str = "") -> HttpError:
    """Build the HTTP error matching a non-2xx status code."""
    if 400 <= status_code < 500:
        return HttpClientError(status_code, body)
    return HttpServerError(status_code, body)


def is_retryable(error: BaseException) -> bool:
    """Return True if a failed attempt may be retried."""
    return isinstance(error, ApiClientError) and error.retryable


class ErrorHandler:
    """Turns exceptions into failed outcomes with logging.

    This is the containment boundary of the batch processor: whatever a
    single conversion raises is classified, logged with its context, and
    returned as a :class:`ConversionFailure` instead of propagating.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger(__name__)

    def handle_error(self, error: Exception, context: dict[str, Any]) -> ConversionFailure:
        """Classify, log, and convert an error into a failed outcome.

        Args:
            error: The exception that occurred
            context: Context information (e.g. filename, operation, index)

        Returns:
            ConversionFailure describing the error
        """
        kind = self._classify_error(error)
        self._log_error(error, kind, context)

        detail = None
        status_code = None
        if isinstance(error, ApiClientError):
            detail = error.detail
            status_code = error.status_code

        filename = context.get("filename")
        return ConversionFailure(
            message=self._generate_user_message(error, kind, context),
            detail=detail,
            status_code=status_code,
            kind=kind,
            filename=str(filename) if filename is not None else None,
        )

    def _classify_error(self, error: Exception) -> ErrorKind:
        if isinstance(error, ApiClientError):
            return error.kind
        return ErrorKind.UNKNOWN

    def _generate_user_message(
        self, error: Exception, kind: ErrorKind, context: dict[str, Any]
    ) -> str:
        """Generate a clear, actionable English message for the user."""
        filename = context.get("filename") or "unknown file"
        base_message = str(error)

        if kind == ErrorKind.INVALID_FORMAT:
            return f"Unsupported file format: {filename}. Only HEIC/HEIF files are supported."
        elif kind == ErrorKind.FILE_TOO_LARGE:
            return f"File too large: {filename}. {base_message}"
        elif kind == ErrorKind.FILE_READ:
            return f"Could not read {filename}: {base_message}"
        elif kind == ErrorKind.TIMEOUT:
            return f"Request timed out while converting {filename}. Please try again."
        elif kind == ErrorKind.NETWORK:
            return f"Network connection failed while converting {filename}. Please check your connection."
        elif kind == ErrorKind.HTTP_CLIENT:
            return f"The service rejected {filename}: {base_message}"
        elif kind == ErrorKind.HTTP_SERVER:
            return f"Server error while converting {filename}: {base_message}. Please try again later."
        elif kind == ErrorKind.LOGICAL_FAILURE:
            return base_message
        else:
            return f"Unexpected error processing {filename}: {base_message}"

    def _log_error(self, error: Exception, kind: ErrorKind, context: dict[str, Any]) -> None:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        self.logger.error(
            f"Error [{kind.value}]: {type(error).__name__}: {error}",
            extra={"context": context_str},
        )

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                f"Stack trace for error in {context.get('filename', 'unknown')}:\n"
                f"{''.join(traceback.format_exception(type(error), error, error.__traceback__))}"
            )
