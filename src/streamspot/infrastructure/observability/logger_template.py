"""Shared logging helpers so every stage logs in the same shape.

USAGE:
    logger = get_module_logger(__name__)

    async with log_operation(logger, "daily_update.artist_refresh", artists=12):
        await refresh()

    start, op_id = start_operation(logger, "album.ingest", log_level=logging.DEBUG, album_id=a)
    ...
    end_operation(logger, "album.ingest", start, op_id, log_level=logging.DEBUG, album_id=a)
"""

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


def get_module_logger(name: str) -> logging.Logger:
    """Logger for a module; always pass ``__name__``."""
    return logging.getLogger(name)


# Yo, this is the timing wrapper for whole stages of the daily update. It logs
# "<operation>.started", then ".completed" with duration_ms, or ".failed" with the error
# and re-raises. The **context kwargs end up as extra fields on every record.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[None]:
    """Log start/end of an operation with automatic timing.

    Args:
        logger: Logger instance from get_module_logger()
        operation: Operation name (e.g. "daily_update.status_gate")
        **context: Extra fields for the log records
    """
    start = time.monotonic()
    logger.info(f"{operation}.started", extra=context)
    try:
        yield
    except Exception as e:
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": int((time.monotonic() - start) * 1000),
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise
    logger.info(
        f"{operation}.completed",
        extra={**context, "duration_ms": int((time.monotonic() - start) * 1000)},
    )


# Hey future me - per-album work runs 50-wide, so pass log_level=logging.DEBUG there and
# keep INFO for the stage summaries. Failures always log at ERROR.
def start_operation(
    logger: logging.Logger,
    operation: str,
    operation_id: str | None = None,
    log_level: int = logging.INFO,
    **context: Any,
) -> tuple[float, str]:
    """Log operation start and return ``(start_time, operation_id)`` for end_operation()."""
    if operation_id is None:
        operation_id = str(uuid.uuid4())

    start_time = time.monotonic()
    logger.log(
        log_level,
        f"{operation}.started",
        extra={**context, "operation_id": operation_id},
    )
    return start_time, operation_id


def end_operation(
    logger: logging.Logger,
    operation: str,
    start_time: float,
    operation_id: str,
    success: bool = True,
    error: Exception | None = None,
    log_level: int = logging.INFO,
    **context: Any,
) -> None:
    """Log operation end with duration.

    Args:
        logger: Logger instance
        operation: Operation name (must match start_operation)
        start_time: Start time from start_operation()
        operation_id: Operation ID from start_operation()
        success: Whether the operation succeeded
        error: Exception if failed (logged with traceback)
        log_level: Level for the success record
        **context: Extra fields
    """
    duration_ms = int((time.monotonic() - start_time) * 1000)

    if success:
        logger.log(
            log_level,
            f"{operation}.completed",
            extra={**context, "operation_id": operation_id, "duration_ms": duration_ms},
        )
        return

    logger.error(
        f"{operation}.failed",
        extra={
            **context,
            "operation_id": operation_id,
            "duration_ms": duration_ms,
            "error": str(error) if error else "Unknown error",
            "error_type": type(error).__name__ if error else "Unknown",
        },
        exc_info=error,
    )


def log_worker_health(
    logger: logging.Logger,
    worker_name: str,
    cycles_completed: int,
    errors_total: int,
    uptime_seconds: float,
    extra_stats: dict[str, Any] | None = None,
) -> None:
    """Log worker health in one consistent record ("worker.health")."""
    log_data: dict[str, Any] = {
        "worker": worker_name,
        "cycles_completed": cycles_completed,
        "errors_total": errors_total,
        "uptime_seconds": int(uptime_seconds),
    }
    if extra_stats:
        log_data.update(extra_stats)

    logger.info("worker.health", extra=log_data)
