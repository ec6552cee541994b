"""Configuration handling for the HEIC conversion API client."""

import os
from typing import Any

from .models import DEFAULT_BASE_URL, ClientConfig

BASE_URL_ENV_VAR = "HEIC_API_BASE_URL"

HEALTH_ENDPOINT = "/health"
ROOT_ENDPOINT = "/"
CONVERT_ENDPOINT = "/api/v1/convert"
CONVERT_DOWNLOAD_ENDPOINT = "/api/v1/convert-download"
INFO_ENDPOINT = "/api/v1/info"


def get_base_url_from_env() -> str | None:
    """Get the service base URL from the HEIC_API_BASE_URL environment variable.

    Returns:
        The URL if the variable is set to a non-blank value, None otherwise
    """
    base_url = os.getenv(BASE_URL_ENV_VAR)
    if base_url is None or not base_url.strip():
        return None
    return base_url.strip()


def create_config(base_url: str | None = None, **overrides: Any) -> ClientConfig:
    """Create a ClientConfig with environment fallback for the base URL.

    The base URL is resolved in this order:
    1. Explicit base_url parameter
    2. HEIC_API_BASE_URL environment variable
    3. Default (http://localhost:8000)

    Args:
        base_url: Explicit service base URL, or None to use environment/default
        **overrides: Any other ClientConfig field (timeout, retry_attempts, ...)

    Returns:
        ClientConfig with the resolved base URL

    Raises:
        ValueError: If any configuration value is invalid
    """
    resolved = base_url or get_base_url_from_env() or DEFAULT_BASE_URL
    return ClientConfig(base_url=resolved.rstrip("/"), **overrides)


def get_api_url(config: ClientConfig, endpoint: str) -> str:
    """Join the configured base URL and an endpoint path."""
    return f"{config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
