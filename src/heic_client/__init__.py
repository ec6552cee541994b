"""HEIC Conversion API Client.

An async Python client for a HEIC/HEIF conversion service: uploads files,
retries transient failures, converts batches in order, and reports a
success or failure outcome for every file.
"""

__version__ = "0.1.0"

from heic_client.batch_processor import BatchProcessor
from heic_client.client import ConversionClient
from heic_client.config import create_config, get_api_url, get_base_url_from_env
from heic_client.errors import (
    ApiClientError,
    ErrorHandler,
    FileReadError,
    FileTooLargeError,
    HttpClientError,
    HttpError,
    HttpServerError,
    InvalidFormatError,
    LogicalFailureError,
    NetworkError,
    RequestTimeoutError,
    is_retryable,
)
from heic_client.logging_config import (
    get_logger,
    log_operation_complete,
    log_operation_error,
    log_operation_start,
)
from heic_client.models import (
    BatchResults,
    ClientConfig,
    ConversionFailure,
    ConversionOutcome,
    ConversionSuccess,
    ConvertRequest,
    ErrorKind,
    FileReference,
    HealthStatus,
    ImageInfo,
    ImageInfoResponse,
    OutputFormat,
    RequestOptions,
    ServiceInfo,
    ValidationResult,
)

__all__ = [
    "ApiClientError",
    "BatchProcessor",
    "BatchResults",
    "ClientConfig",
    "ConversionClient",
    "ConversionFailure",
    "ConversionOutcome",
    "ConversionSuccess",
    "ConvertRequest",
    "ErrorHandler",
    "ErrorKind",
    "FileReference",
    "FileReadError",
    "FileTooLargeError",
    "HealthStatus",
    "HttpClientError",
    "HttpError",
    "HttpServerError",
    "ImageInfo",
    "ImageInfoResponse",
    "InvalidFormatError",
    "LogicalFailureError",
    "NetworkError",
    "OutputFormat",
    "RequestOptions",
    "RequestTimeoutError",
    "ServiceInfo",
    "ValidationResult",
    "create_config",
    "get_api_url",
    "get_base_url_from_env",
    "get_logger",
    "is_retryable",
    "log_operation_complete",
    "log_operation_error",
    "log_operation_start",
]
