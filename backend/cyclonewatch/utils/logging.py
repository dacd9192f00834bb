"""Structured error logging.

Every failure path in the access and storage layers goes through
:func:`log_error` so a single log line carries the operation, message,
context, timestamp and stack of the failure.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: str = "info") -> None:
    """Configure root logging for the application process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def log_error(
    logger: logging.Logger,
    operation: str,
    error: BaseException | str,
    context: str | None = None,
    level: int = logging.ERROR,
) -> dict[str, Any]:
    """Log a structured error record and return it.

    Args:
        logger: Logger of the calling module.
        operation: Name of the failing operation, e.g. ``"APIClient.fetch"``.
        error: The exception (or a plain message).
        context: Extra context such as the endpoint or storage key.
        level: Logging level, ERROR by default.

    Returns:
        The record that was logged.
    """
    if isinstance(error, BaseException):
        message = str(error) or type(error).__name__
        stack = (
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
            if error.__traceback__ is not None
            else None
        )
    else:
        message = error
        stack = None

    record: dict[str, Any] = {
        "operation": operation,
        "message": message,
        "context": context,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "stack": stack,
    }
    logger.log(level, f"{operation}: {message}", extra={"error_record": record})
    return record
