"""Observability module for tablelog.

Provides the structured logging the package uses for its own diagnostics,
and that applications can use to feed extra fields into table columns.

Example:
    from tablelog.observability import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(request="a1b2"):
        logger.info("Batch processed", worker="ingest", rows=100)
"""

from tablelog.observability.logging import (
    LogContext,
    StructuredFormatter,
    StructuredLogger,
    configure_logging,
    current_context,
    get_logger,
    reset_logging,
)

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "StructuredLogger",
    "configure_logging",
    "current_context",
    "get_logger",
    "reset_logging",
]
