"""Sequential batch conversion for the HEIC conversion API client."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from time import perf_counter
from typing import TYPE_CHECKING, Any

from .errors import ErrorHandler
from .logging_config import get_logger
from .models import BatchResults, ConversionOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .client import ConversionClient
    from .models import ConvertRequest

ProgressCallback = Callable[[int, float], Any]
FileCompleteCallback = Callable[[int, ConversionOutcome], Any]


class BatchProcessor:
    """Convert many files one at a time, in input order.

    This class implements batch conversion with:
    - Strictly sequential execution (file i+1 starts after file i resolved)
    - Error isolation (one file failure doesn't stop the batch)
    - Progress and completion callbacks fired in input order
    - Result aggregation with one outcome per input

    Callbacks may be plain functions or coroutine functions. Cancelling the
    task awaiting :meth:`process_batch` aborts the batch; the outcomes
    gathered so far are discarded.
    """

    def __init__(self, client: ConversionClient, logger: logging.Logger | None = None):
        """Initialize with the client used for each conversion.

        Args:
            client: Client performing the conversions
            logger: Optional logger instance
        """
        self.client = client
        self.logger = logger or get_logger(__name__)
        self.error_handler = ErrorHandler(self.logger)

    async def process_batch(
        self,
        requests: Sequence[ConvertRequest],
        on_progress: ProgressCallback | None = None,
        on_file_complete: FileCompleteCallback | None = None,
    ) -> BatchResults:
        """Convert every request in order.

        Args:
            requests: Requests to convert
            on_progress: Called as ``on_progress(index, 0.0)`` before each file
            on_file_complete: Called as ``on_file_complete(index, outcome)`` after each file

        Returns:
            BatchResults whose outcomes line up index-for-index with ``requests``
        """
        if not requests:
            return BatchResults(outcomes=[], total=0, successful=0, failed=0, total_time=0.0)

        start_time = perf_counter()
        total = len(requests)
        outcomes: list[ConversionOutcome] = []

        self.logger.info(f"Starting batch conversion of {total} files")

        for index, request in enumerate(requests):
            await _notify(on_progress, index, 0.0)

            outcome: ConversionOutcome
            try:
                outcome = await self.client.convert_file(request)
                self.logger.info(
                    f"Successfully converted {request.file.name} ({index + 1}/{total})"
                )
            except Exception as e:
                outcome = self.error_handler.handle_error(
                    e,
                    {
                        "filename": request.file.name,
                        "operation": "batch_conversion",
                        "index": index,
                    },
                )
                self.logger.error(
                    f"Failed to convert {request.file.name}: {outcome.message} ({index + 1}/{total})"
                )

            outcomes.append(outcome)
            await _notify(on_file_complete, index, outcome)

        total_time = perf_counter() - start_time
        successful = sum(1 for outcome in outcomes if outcome.success)
        failed = total - successful

        self.logger.info(
            f"Batch conversion complete: {successful} successful, "
            f"{failed} failed in {total_time:.2f}s"
        )

        return BatchResults(
            outcomes=outcomes,
            total=total,
            successful=successful,
            failed=failed,
            total_time=total_time,
        )


async def _notify(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
