"""Conversion API client.

This module provides the entry point for talking to the conversion service:
- Health and root probes
- Single file conversion (JSON or raw download)
- Image metadata lookup
- Sequential batch conversion via BatchProcessor
"""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from .batch_processor import BatchProcessor
from .config import (
    CONVERT_DOWNLOAD_ENDPOINT,
    CONVERT_ENDPOINT,
    HEALTH_ENDPOINT,
    INFO_ENDPOINT,
    ROOT_ENDPOINT,
    create_config,
    get_api_url,
)
from .errors import ApiClientError, LogicalFailureError
from .logging_config import (
    get_logger,
    log_operation_complete,
    log_operation_error,
    log_operation_start,
)
from .models import (
    ClientConfig,
    ConversionSuccess,
    HealthStatus,
    ImageInfoResponse,
    RequestOptions,
    ServiceInfo,
)
from .request_builder import RequestBuilder
from .retry import request_with_retry
from .transport import ResponseKind, execute_request

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable, Sequence

    from .batch_processor import FileCompleteCallback, ProgressCallback
    from .models import BatchResults, ConvertRequest, FileReference
    from .request_builder import MultipartForm

T = TypeVar("T")


class ConversionClient:
    """Async client for the HEIC conversion service.

    The client holds immutable configuration and an ``httpx.AsyncClient``
    connection pool; it has no other state, so one instance can be created
    at startup and shared by every caller. Use it as an async context
    manager, or call :meth:`aclose` when done.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration (defaults to create_config())
            http_client: Existing httpx client to use; the caller keeps ownership
            transport: Transport for the internally created httpx client
            sleep: Coroutine used for backoff waits
            logger: Optional logger instance
        """
        self.config = config or create_config()
        self.logger = logger or get_logger(__name__)
        self.builder = RequestBuilder(self.config)
        self._sleep = sleep

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            transport=transport, timeout=self.config.timeout
        )

        self.logger.debug(f"ConversionClient initialized for {self.config.base_url}")

    async def __aenter__(self) -> ConversionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        options: RequestOptions | None = None,
        form: MultipartForm | None = None,
        expect: ResponseKind = ResponseKind.JSON,
        retry: bool = True,
    ) -> Any:
        options = options or RequestOptions()
        timeout = options.timeout if options.timeout is not None else self.config.timeout
        url = get_api_url(self.config, endpoint)

        async def attempt() -> Any:
            return await execute_request(
                self._http_client, method, url, timeout=timeout, form=form, expect=expect
            )

        if not retry:
            return await attempt()

        return await request_with_retry(
            attempt,
            retry_attempts=(
                options.retry_attempts
                if options.retry_attempts is not None
                else self.config.retry_attempts
            ),
            retry_delay=(
                options.retry_delay if options.retry_delay is not None else self.config.retry_delay
            ),
            sleep=self._sleep,
            logger=self.logger,
            description=f"{method} {endpoint}",
        )

    async def health_check(self, options: RequestOptions | None = None) -> HealthStatus:
        """Query the health endpoint (single attempt)."""
        payload = await self._request("GET", HEALTH_ENDPOINT, options=options, retry=False)
        return _parse_payload(HealthStatus.from_payload, payload)

    async def get_root(self, options: RequestOptions | None = None) -> ServiceInfo:
        """Query the root endpoint for the service name and version (single attempt)."""
        payload = await self._request("GET", ROOT_ENDPOINT, options=options, retry=False)
        return _parse_payload(ServiceInfo.from_payload, payload)

    async def convert_file(
        self, request: ConvertRequest, options: RequestOptions | None = None
    ) -> ConversionSuccess:
        """Convert one file and return the service's JSON result.

        Args:
            request: File, target format and optional quality
            options: Optional per-call timeout/retry overrides

        Returns:
            ConversionSuccess for the converted file

        Raises:
            InvalidFormatError: If the file is not HEIC/HEIF (no request is sent)
            FileTooLargeError: If the file exceeds the upload limit
            FileReadError: If the file cannot be read (no request is sent)
            LogicalFailureError: If the service reported ``success: false``
                or sent a body that does not describe a conversion
            ApiClientError: For timeout, network and HTTP failures
        """
        self.builder.ensure_valid(request.file)
        form = self.builder.build_form(request)

        start_time = perf_counter()
        log_operation_start(
            self.logger, "conversion", filename=request.file.name, format=request.format.value
        )
        try:
            payload = await self._request("POST", CONVERT_ENDPOINT, options=options, form=form)
        except ApiClientError as e:
            log_operation_error(self.logger, "conversion", e, filename=request.file.name)
            raise

        try:
            if not isinstance(payload, dict) or payload.get("success") is not True:
                raise _logical_failure(payload)
            result = _parse_payload(ConversionSuccess.from_payload, payload)
        except LogicalFailureError as e:
            log_operation_complete(
                self.logger,
                "conversion",
                success=False,
                duration=perf_counter() - start_time,
                filename=request.file.name,
                reason=e.message,
            )
            raise

        log_operation_complete(
            self.logger,
            "conversion",
            success=True,
            duration=perf_counter() - start_time,
            filename=request.file.name,
            converted_size=result.converted_size,
        )
        return result

    async def convert_and_download(
        self, request: ConvertRequest, options: RequestOptions | None = None
    ) -> bytes:
        """Convert one file and return the converted image bytes.

        Any non-2xx response is a failure; the raised error carries the
        response text.
        """
        self.builder.ensure_valid(request.file)
        form = self.builder.build_form(request)

        log_operation_start(
            self.logger, "download", filename=request.file.name, format=request.format.value
        )
        try:
            content: bytes = await self._request(
                "POST",
                CONVERT_DOWNLOAD_ENDPOINT,
                options=options,
                form=form,
                expect=ResponseKind.BINARY,
            )
        except ApiClientError as e:
            log_operation_error(self.logger, "download", e, filename=request.file.name)
            raise
        self.logger.info(f"Downloaded {len(content)} bytes for {request.file.name}")
        return content

    async def get_image_info(
        self, file_ref: FileReference, options: RequestOptions | None = None
    ) -> ImageInfoResponse:
        """Fetch image metadata (dimensions, format, mode, transparency) for a file."""
        self.builder.ensure_valid(file_ref)
        form = self.builder.build_info_form(file_ref)

        log_operation_start(self.logger, "info lookup", filename=file_ref.name)
        try:
            payload = await self._request("POST", INFO_ENDPOINT, options=options, form=form)
            if not isinstance(payload, dict) or payload.get("success") is False:
                raise _logical_failure(payload)
            info = _parse_payload(ImageInfoResponse.from_payload, payload)
        except ApiClientError as e:
            log_operation_error(self.logger, "info lookup", e, filename=file_ref.name)
            raise

        log_operation_complete(
            self.logger,
            "info lookup",
            success=True,
            filename=file_ref.name,
            width=info.image_info.width,
            height=info.image_info.height,
        )
        return info

    async def is_service_available(self) -> bool:
        """Return True if the health endpoint answers, False on any error."""
        try:
            await self.health_check()
        except Exception as e:
            self.logger.debug(f"Service unavailable at {self.config.base_url}: {e}")
            return False
        return True

    async def batch_convert(
        self,
        requests: Sequence[ConvertRequest],
        on_progress: ProgressCallback | None = None,
        on_file_complete: FileCompleteCallback | None = None,
    ) -> BatchResults:
        """Convert files one after another; see BatchProcessor.process_batch."""
        processor = BatchProcessor(self, logger=self.logger)
        return await processor.process_batch(requests, on_progress, on_file_complete)


def _logical_failure(payload: Any) -> LogicalFailureError:
    if not isinstance(payload, dict):
        return LogicalFailureError(f"Unexpected response from service: {payload!r}")
    status_code = payload.get("status_code")
    return LogicalFailureError(
        str(payload.get("message") or "Server error, please try again later"),
        detail=payload.get("detail"),
        status_code=status_code if isinstance(status_code, int) else None,
    )


def _parse_payload(parse: Callable[[dict[str, Any]], T], payload: Any) -> T:
    """Build a response model, raising LogicalFailureError for a malformed body."""
    if not isinstance(payload, dict):
        raise _logical_failure(payload)
    try:
        return parse(payload)
    except (AttributeError, TypeError, ValueError) as e:
        raise LogicalFailureError(
            f"Malformed response from service: {e}", detail=repr(payload)
        ) from e
