"""Pytest configuration and shared fixtures."""

import httpx
import pytest

from tests.strategies import BASE_URL, RecordingSleep


@pytest.fixture
def sample_config():
    """Provide a client configuration pointing at the fake service."""
    from heic_client.models import ClientConfig

    return ClientConfig(base_url=BASE_URL, timeout=5.0, retry_attempts=3, retry_delay=0.5)


@pytest.fixture
def heic_file():
    """Provide an in-memory HEIC file reference."""
    from heic_client.models import FileReference

    return FileReference(name="photo.heic", content=b"\x00\x00\x00\x18ftypheic")


@pytest.fixture
def convert_request(heic_file):
    """Provide a JPEG conversion request for the sample file."""
    from heic_client.models import ConvertRequest, OutputFormat

    return ConvertRequest(file=heic_file, format=OutputFormat.JPEG)


@pytest.fixture
def recording_sleep():
    """Provide a sleep replacement that records backoff delays."""
    return RecordingSleep()


@pytest.fixture
def make_client(sample_config, recording_sleep):
    """Build a ConversionClient whose HTTP traffic goes to a handler function."""
    from heic_client.client import ConversionClient

    def factory(handler, config=None):
        return ConversionClient(
            config or sample_config,
            transport=httpx.MockTransport(handler),
            sleep=recording_sleep,
        )

    return factory
