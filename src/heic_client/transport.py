"""Single HTTP request execution with a hard timeout."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from .errors import HttpServerError, NetworkError, RequestTimeoutError, http_error_for_status

if TYPE_CHECKING:
    from .request_builder import MultipartForm


class ResponseKind(Enum):
    """How a successful response body is decoded."""

    JSON = "json"
    BINARY = "binary"


async def execute_request(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    timeout: float,
    form: MultipartForm | None = None,
    expect: ResponseKind = ResponseKind.JSON,
) -> Any:
    """Perform one HTTP call and decode its body.

    The whole exchange, including reading the body, runs under
    ``asyncio.timeout``; when it expires the in-flight request is cancelled.
    The timer is released when the context manager exits, whatever the outcome.

    Args:
        http_client: Client used to send the request
        method: HTTP method
        url: Absolute URL, or a path relative to the client's base URL
        timeout: Timeout in seconds
        form: Optional multipart body
        expect: Expected response body shape

    Returns:
        Decoded JSON for JSON endpoints, raw bytes for binary endpoints

    Raises:
        RequestTimeoutError: If the timeout elapsed before the response arrived
        NetworkError: On transport failures (DNS, refused connection, reset)
        HttpClientError: On 4xx responses
        HttpServerError: On other non-2xx responses or undecodable JSON
    """
    kwargs: dict[str, Any] = {}
    if form is not None:
        kwargs["files"] = form.files
        kwargs["data"] = form.data

    try:
        async with asyncio.timeout(timeout):
            response = await http_client.request(method, url, timeout=timeout, **kwargs)
            await response.aread()
    except TimeoutError as e:
        raise RequestTimeoutError(f"Request timed out after {timeout:g}s: {method} {url}") from e
    except httpx.TimeoutException as e:
        raise RequestTimeoutError(f"Request timed out after {timeout:g}s: {method} {url}") from e
    except httpx.TransportError as e:
        raise NetworkError(f"Network request failed: {method} {url}: {e}") from e

    if not response.is_success:
        raise http_error_for_status(response.status_code, response.text)

    if expect is ResponseKind.BINARY:
        return response.content

    try:
        return response.json()
    except ValueError as e:
        raise HttpServerError(response.status_code, f"Invalid JSON response: {e}") from e
