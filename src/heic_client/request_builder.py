"""Multipart request construction and upload validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING

from .errors import FileReadError, FileTooLargeError, InvalidFormatError
from .models import ErrorKind, ValidationResult

if TYPE_CHECKING:
    from .models import ClientConfig, ConvertRequest, FileReference


@dataclass
class MultipartForm:
    """Transport-ready multipart body in the shape httpx expects.

    Attributes:
        files: Mapping of field name to (filename, content, mime type)
        data: Plain form fields
    """

    files: dict[str, tuple[str, bytes, str]]
    data: dict[str, str] = field(default_factory=dict)


class RequestBuilder:
    """Validate uploads and build multipart bodies.

    Validation happens before any network call:
    - Extension check (case-insensitive) against the configured set
    - Size check against the configured maximum, when the size is known
    """

    def __init__(self, config: ClientConfig) -> None:
        self.config = config

    def validate(self, file_ref: FileReference) -> ValidationResult:
        """Validate a file reference for upload.

        Args:
            file_ref: The file to validate

        Returns:
            ValidationResult indicating whether the file may be uploaded
        """
        name = file_ref.name.lower()
        if not name.endswith(tuple(self.config.supported_extensions)):
            suffix = PurePath(name).suffix
            expected = ", ".join(sorted(self.config.supported_extensions))
            return ValidationResult(
                valid=False,
                error_message=f"Unsupported file extension: {suffix or '(none)'} "
                f"for {file_ref.name}. Expected one of {expected}",
                kind=ErrorKind.INVALID_FORMAT,
            )

        size = file_ref.known_size()
        if size is not None and size > self.config.max_file_size:
            max_mb = self.config.max_file_size / (1024 * 1024)
            actual_mb = size / (1024 * 1024)
            return ValidationResult(
                valid=False,
                error_message=f"File too large: {actual_mb:.1f}MB (maximum: {max_mb:.0f}MB)",
                kind=ErrorKind.FILE_TOO_LARGE,
            )

        return ValidationResult(valid=True)

    def ensure_valid(self, file_ref: FileReference) -> None:
        """Validate a file reference, raising on failure.

        Raises:
            InvalidFormatError: If the extension is not supported
            FileTooLargeError: If the file exceeds the upload limit
        """
        validation = self.validate(file_ref)
        if validation.valid:
            return
        message = validation.error_message or "Invalid file"
        if validation.kind == ErrorKind.FILE_TOO_LARGE:
            raise FileTooLargeError(message)
        raise InvalidFormatError(message)

    def build_form(self, request: ConvertRequest) -> MultipartForm:
        """Build the multipart body for the convert endpoints.

        The quality field is only present when the request or the
        configuration supplies one.
        """
        form = self.build_info_form(request.file)
        form.data["format"] = request.format.value

        quality = request.quality if request.quality is not None else self.config.default_quality
        if quality is not None:
            form.data["quality"] = str(quality)
        return form

    def build_info_form(self, file_ref: FileReference) -> MultipartForm:
        """Build the multipart body for the info endpoint (file only).

        Raises:
            FileReadError: If the payload cannot be read
        """
        try:
            content = file_ref.read_bytes()
        except (OSError, ValueError) as e:
            raise FileReadError(f"Cannot read {file_ref.name}: {e}") from e
        return MultipartForm(files={"file": (file_ref.name, content, file_ref.mime_type)})
