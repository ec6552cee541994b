"""Unit tests for the retry wrapper."""

import asyncio

import pytest

from heic_client.errors import (
    HttpClientError,
    HttpServerError,
    InvalidFormatError,
    LogicalFailureError,
    NetworkError,
    RequestTimeoutError,
)
from heic_client.retry import compute_backoff, request_with_retry


class FlakyOperation:
    """Async operation failing with queued errors before succeeding."""

    def __init__(self, errors, result="done"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestComputeBackoff:
    """Tests for the backoff formula."""

    def test_linear(self):
        """Backoff grows linearly with the attempt number."""
        assert [compute_backoff(1.0, n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_scales_with_base(self):
        """Backoff scales with the base delay."""
        assert compute_backoff(0.25, 4) == 1.0

    def test_zero_delay(self):
        """A zero base delay never waits."""
        assert compute_backoff(0.0, 3) == 0.0


class TestRequestWithRetry:
    """Tests for request_with_retry."""

    @pytest.mark.asyncio
    async def test_success_first_try(self, recording_sleep):
        """A successful first attempt does not sleep."""
        operation = FlakyOperation([])

        result = await request_with_retry(
            operation, retry_attempts=3, retry_delay=1.0, sleep=recording_sleep
        )

        assert result == "done"
        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, recording_sleep):
        """Transient failures are retried until success."""
        operation = FlakyOperation([NetworkError("down"), RequestTimeoutError("slow")])

        result = await request_with_retry(
            operation, retry_attempts=3, retry_delay=1.0, sleep=recording_sleep
        )

        assert result == "done"
        assert operation.calls == 3
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_persistent_500_makes_retry_attempts_plus_one_calls(self, recording_sleep):
        """A persistent 500 uses every retry with linear delays."""
        operation = FlakyOperation([HttpServerError(500, f"failure {i}") for i in range(10)])

        with pytest.raises(HttpServerError) as exc_info:
            await request_with_retry(
                operation, retry_attempts=3, retry_delay=1.0, sleep=recording_sleep
            )

        assert operation.calls == 4
        assert recording_sleep.delays == [1.0, 2.0, 3.0]
        assert str(exc_info.value) == "HTTP 500: failure 3"

    @pytest.mark.asyncio
    async def test_404_is_not_retried(self, recording_sleep):
        """A 404 propagates after one attempt."""
        operation = FlakyOperation([HttpClientError(404, "Not Found")])

        with pytest.raises(HttpClientError):
            await request_with_retry(
                operation, retry_attempts=3, retry_delay=1.0, sleep=recording_sleep
            )

        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.parametrize(
        "error",
        [InvalidFormatError("bad"), LogicalFailureError("nope"), ValueError("bug")],
    )
    @pytest.mark.asyncio
    async def test_non_retryable_errors_propagate_immediately(self, error, recording_sleep):
        """Non-retryable errors propagate without sleeping."""
        operation = FlakyOperation([error])

        with pytest.raises(type(error)):
            await request_with_retry(
                operation, retry_attempts=3, retry_delay=1.0, sleep=recording_sleep
            )

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_zero_retry_attempts(self, recording_sleep):
        """With zero retries only one attempt is made."""
        operation = FlakyOperation([NetworkError("down")])

        with pytest.raises(NetworkError):
            await request_with_retry(
                operation, retry_attempts=0, retry_delay=1.0, sleep=recording_sleep
            )

        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_cancellation_during_backoff_stops_retries(self):
        """Cancelling during backoff prevents further attempts."""
        operation = FlakyOperation([NetworkError("down") for _ in range(5)])

        task = asyncio.create_task(
            request_with_retry(operation, retry_attempts=5, retry_delay=10.0)
        )
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert operation.calls == 1
