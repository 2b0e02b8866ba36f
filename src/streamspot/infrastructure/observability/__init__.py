"""Observability infrastructure for structured logging."""

from streamspot.infrastructure.observability.logger_template import (
    end_operation,
    get_module_logger,
    log_operation,
    log_worker_health,
    start_operation,
)
from streamspot.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "configure_logging",
    "end_operation",
    "get_correlation_id",
    "get_module_logger",
    "log_operation",
    "log_worker_health",
    "set_correlation_id",
    "start_operation",
]
