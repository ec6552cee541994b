"""Core data models for the HEIC conversion API client."""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from PIL import Image

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_MIME_TYPE = "image/heic"
MAX_FILE_SIZE = 50 * 1024 * 1024
SUPPORTED_EXTENSIONS = frozenset({".heic", ".heif"})


class OutputFormat(Enum):
    """Target formats accepted by the conversion service."""

    JPEG = "jpeg"
    PNG = "png"

    @classmethod
    def coerce(cls, value: OutputFormat | str) -> OutputFormat:
        """Return the enum member for a member or its string value.

        Raises:
            ValueError: If the value is not a supported output format
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            expected = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unsupported output format: {value!r}. Expected one of {expected}"
            ) from None


class ErrorKind(Enum):
    """Failure classes shared by raised errors and failed outcomes."""

    INVALID_FORMAT = "invalid_format"
    FILE_TOO_LARGE = "file_too_large"
    FILE_READ = "file_read"
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_CLIENT = "http_client"
    HTTP_SERVER = "http_server"
    LOGICAL_FAILURE = "logical_failure"
    UNKNOWN = "unknown"


def _validate_quality(quality: float | None, label: str) -> None:
    if quality is not None and not 0.0 <= quality <= 1.0:
        raise ValueError(f"{label} must be between 0.0 and 1.0, got {quality}")


@dataclass(frozen=True)
class ClientConfig:
    """Process-wide configuration for the conversion client.

    Attributes:
        base_url: Base URL of the conversion service
        timeout: Per-request timeout in seconds
        retry_attempts: Retries after the first attempt
        retry_delay: Base backoff delay in seconds
        max_file_size: Largest upload accepted, in bytes
        supported_extensions: Accepted input file extensions
        default_quality: Quality sent when a request carries none
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    retry_attempts: int = 3
    retry_delay: float = 1.0
    max_file_size: int = MAX_FILE_SIZE
    supported_extensions: frozenset[str] = SUPPORTED_EXTENSIONS
    default_quality: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration and normalise extensions."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.retry_attempts < 0:
            raise ValueError(f"retry_attempts must be at least 0, got {self.retry_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be at least 0, got {self.retry_delay}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        _validate_quality(self.default_quality, "default_quality")

        normalized = frozenset(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.supported_extensions
        )
        object.__setattr__(self, "supported_extensions", normalized)


@dataclass(frozen=True)
class RequestOptions:
    """Per-call overrides; None falls back to the client configuration."""

    timeout: float | None = None
    retry_attempts: int | None = None
    retry_delay: float | None = None


@dataclass(frozen=True)
class FileReference:
    """A file to upload, backed either by a local path or by in-memory bytes.

    Attributes:
        name: File name sent to the service
        mime_type: MIME type of the upload
        path: Local file holding the payload
        content: In-memory payload
        size: Size in bytes if known ahead of time
    """

    name: str
    mime_type: str = DEFAULT_MIME_TYPE
    path: Path | None = None
    content: bytes | None = None
    size: int | None = None

    @classmethod
    def from_path(cls, path: Path | str, mime_type: str | None = None) -> FileReference:
        path = Path(path)
        return cls(name=path.name, mime_type=mime_type or DEFAULT_MIME_TYPE, path=path)

    def known_size(self) -> int | None:
        """Return the payload size without reading it, or None if unknown."""
        if self.size is not None:
            return self.size
        if self.content is not None:
            return len(self.content)
        if self.path is not None:
            try:
                return self.path.stat().st_size
            except OSError:
                return None
        return None

    def read_bytes(self) -> bytes:
        """Return the payload bytes.

        Raises:
            ValueError: If the reference has neither content nor path
            OSError: If the backing file cannot be read
        """
        if self.content is not None:
            return self.content
        if self.path is not None:
            return self.path.read_bytes()
        raise ValueError(f"File reference {self.name!r} has no content or path")


@dataclass(frozen=True)
class ConvertRequest:
    """One file to convert.

    Attributes:
        file: The HEIC/HEIF file to upload
        format: Target output format
        quality: Optional encoder quality (0.0 to 1.0)
    """

    file: FileReference
    format: OutputFormat = OutputFormat.JPEG
    quality: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "format", OutputFormat.coerce(self.format))
        _validate_quality(self.quality, "quality")


@dataclass
class ConversionSuccess:
    """Successful conversion reported by the service.

    Attributes:
        filename: Name of the converted file
        original_size: Size of the uploaded file in bytes
        converted_size: Size of the converted file in bytes
        message: Service message
        data: Base64 payload, if returned inline
        data_url: Base64 data URL, if returned inline
    """

    filename: str
    original_size: int
    converted_size: int
    message: str = ""
    data: str | None = None
    data_url: str | None = None

    @property
    def success(self) -> bool:
        return True

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ConversionSuccess:
        return cls(
            filename=str(payload.get("filename", "")),
            original_size=int(payload.get("original_size") or 0),
            converted_size=int(payload.get("converted_size") or 0),
            message=str(payload.get("message") or ""),
            data=payload.get("data"),
            data_url=payload.get("data_url"),
        )

    def decode_payload(self) -> bytes | None:
        """Decode the inline image payload.

        Returns:
            Converted image bytes, or None when the service sent no payload

        Raises:
            ValueError: If the payload is not valid base64
        """
        encoded = self.data
        if encoded is None and self.data_url is not None:
            _, _, encoded = self.data_url.partition(",")
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload for {self.filename}: {e}") from e

    def open_image(self) -> Image.Image | None:
        """Open the inline payload with Pillow, or return None if there is none."""
        from PIL import Image

        payload = self.decode_payload()
        if payload is None:
            return None
        image = Image.open(io.BytesIO(payload))
        image.load()
        return image


@dataclass
class ConversionFailure:
    """Failed conversion, either reported by the service or raised locally.

    Attributes:
        message: Human-readable failure message
        detail: Optional diagnostic detail
        status_code: HTTP status code if one was received
        kind: Failure class
        filename: Name of the file that failed
    """

    message: str
    detail: str | None = None
    status_code: int | None = None
    kind: ErrorKind = ErrorKind.UNKNOWN
    filename: str | None = None

    @property
    def success(self) -> bool:
        return False


ConversionOutcome = ConversionSuccess | ConversionFailure


@dataclass
class BatchResults:
    """Results of a batch conversion.

    Attributes:
        outcomes: One outcome per input request, in input order
        total: Number of input requests
        successful: Number of successful conversions
        failed: Number of failed conversions
        total_time: Time taken in seconds
    """

    outcomes: list[ConversionOutcome]
    total: int
    successful: int
    failed: int
    total_time: float = 0.0

    def success_rate(self) -> float:
        """Calculate success rate as a percentage (0.0 to 100.0)."""
        if self.total == 0:
            return 0.0
        return (self.successful / self.total) * 100.0


@dataclass
class ImageInfo:
    """Image metadata reported by the info endpoint."""

    width: int
    height: int
    format: str
    mode: str
    has_transparency: bool
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ImageInfo:
        known = {"width", "height", "format", "mode", "has_transparency"}
        return cls(
            width=int(payload.get("width") or 0),
            height=int(payload.get("height") or 0),
            format=str(payload.get("format") or ""),
            mode=str(payload.get("mode") or ""),
            has_transparency=bool(payload.get("has_transparency", False)),
            extra={k: v for k, v in payload.items() if k not in known},
        )


@dataclass
class ImageInfoResponse:
    """Response of the info endpoint."""

    success: bool
    filename: str
    size: int
    image_info: ImageInfo

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ImageInfoResponse:
        return cls(
            success=payload.get("success") is True,
            filename=str(payload.get("filename", "")),
            size=int(payload.get("size") or 0),
            image_info=ImageInfo.from_payload(payload.get("image_info") or {}),
        )


@dataclass
class HealthStatus:
    """Response of the health endpoint."""

    status: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> HealthStatus:
        return cls(status=str(payload.get("status", "")))

    @property
    def is_ok(self) -> bool:
        return self.status.lower() == "ok"


@dataclass
class ServiceInfo:
    """Response of the root endpoint."""

    message: str
    version: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ServiceInfo:
        return cls(
            message=str(payload.get("message", "")), version=str(payload.get("version", ""))
        )


@dataclass
class ValidationResult:
    """Result of a validation operation.

    Attributes:
        valid: Whether the validation passed
        error_message: Error message if validation failed
        kind: Failure class if validation failed
    """

    valid: bool
    error_message: str | None = None
    kind: ErrorKind | None = None
