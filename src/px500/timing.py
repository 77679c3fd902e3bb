"""Timing utilities for structured logging of API calls.

Uses time.perf_counter() for sub-millisecond precision.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from prometheus_client import Histogram

__all__ = ["timed_operation"]


@contextmanager
def timed_operation(
    operation: str,
    logger: logging.Logger,
    level: int = logging.DEBUG,
    extra: Optional[dict[str, Any]] = None,
    histogram: Optional[Histogram] = None,
) -> Iterator[dict[str, Any]]:
    """Time a block and log its duration as ``{operation}_completed``.

    The yielded dict is merged into the log context, so the block can attach
    details only known at the end (status code, response size).

    Args:
        operation: Operation name, used as the log message prefix
        logger: Logger instance to log to
        level: Log level for the success case (default: DEBUG)
        extra: Context included in the log record
        histogram: Optional already-labelled prometheus Histogram that
            observes the duration in seconds

    Example:
        >>> with timed_operation("api_request", logger, extra={"path": "/photos"}) as ctx:
        ...     ctx["status_code"] = 200

    Failures are logged as ``{operation}_failed`` at WARNING and re-raised.
    """
    start = time.perf_counter()
    context: dict[str, Any] = dict(extra or {})

    try:
        yield context
    except Exception as e:
        elapsed = time.perf_counter() - start
        if histogram is not None:
            histogram.observe(elapsed)
        logger.warning(
            f"{operation}_failed",
            extra={
                **context,
                "duration_ms": round(elapsed * 1000, 2),
                "status": "failed",
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise

    elapsed = time.perf_counter() - start
    if histogram is not None:
        histogram.observe(elapsed)
    logger.log(
        level,
        f"{operation}_completed",
        extra={**context, "duration_ms": round(elapsed * 1000, 2), "status": "success"},
    )
