"""Logging helpers for the HEIC conversion API client.

All loggers live under the ``heic_client`` namespace. The package logger
gets a ``NullHandler`` on import and nothing else: handlers, levels and
formats belong to the application embedding the client.
"""

from __future__ import annotations

import logging

LOGGER_NAMESPACE = "heic_client"

logging.getLogger(LOGGER_NAMESPACE).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``heic_client`` namespace.

    Args:
        name: Module name (typically ``__name__``)
    """
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


def _format_context(context: dict[str, object]) -> str:
    return ", ".join(f"{k}={v}" for k, v in context.items())


def log_operation_start(logger: logging.Logger, operation: str, **context: object) -> None:
    """Log the start of an operation, e.g. ``Starting conversion: filename=a.heic``."""
    logger.info(f"Starting {operation}: {_format_context(context)}")


def log_operation_complete(
    logger: logging.Logger,
    operation: str,
    success: bool,
    duration: float | None = None,
    **context: object,
) -> None:
    """Log the end of an operation at INFO on success and ERROR on failure."""
    status = "completed successfully" if success else "failed"
    context_str = _format_context(context)

    if duration is not None:
        message = f"{operation.capitalize()} {status} in {duration:.2f}s: {context_str}"
    else:
        message = f"{operation.capitalize()} {status}: {context_str}"

    if success:
        logger.info(message)
    else:
        logger.error(message)


def log_operation_error(
    logger: logging.Logger, operation: str, error: BaseException, **context: object
) -> None:
    """Log an operation error, with the stack trace at DEBUG level."""
    logger.error(
        f"Error during {operation}: {type(error).__name__}: {error} - {_format_context(context)}"
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Stack trace for {operation} error:", exc_info=error)


def log_retry_scheduled(
    logger: logging.Logger,
    description: str,
    attempt: int,
    retry_attempts: int,
    delay: float,
    error: BaseException,
) -> None:
    """Log a failed attempt that will be retried after ``delay`` seconds."""
    logger.warning(
        f"Attempt {attempt} of {description} failed: {error}; "
        f"retrying in {delay:.2f}s ({attempt}/{retry_attempts})"
    )


def log_retry_exhausted(
    logger: logging.Logger, description: str, attempts: int, error: BaseException
) -> None:
    """Log the final failure once every allowed attempt was used."""
    logger.error(f"Giving up on {description} after {attempts} attempts: {error}")
