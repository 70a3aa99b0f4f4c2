"""Structured logging for tablelog.

Builds on Python's standard logging module with:
- Structured data support (keyword arguments become record fields)
- Context management for fields shared by a block of log calls
- A human-readable formatter for the package's own diagnostics

Structured fields matter twice in this package: the handler's own
diagnostics carry them (row counts, column names), and a TableHandler turns
every structured key of a record into a field that can be shown as a column.

Example:
    logger = get_logger(__name__)

    # Keyword arguments become structured data
    logger.info("Batch processed", worker="ingest", duration_ms=150)

    # Context fields are merged into every record logged inside the block
    with LogContext(request="a1b2"):
        logger.info("Request started")
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import threading
from collections.abc import Mapping, MutableMapping
from typing import Any

# Context variable for structured logging context
_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "log_context", default={}
)

ROOT_LOGGER_NAME = "tablelog"


# =============================================================================
# Structured Logger
# =============================================================================


# Keyword arguments logging.Logger.log() understands itself; everything else
# passed to a StructuredLogger method becomes structured data.
_LOG_KEYWORDS = frozenset({"exc_info", "extra", "stack_info", "stacklevel"})


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter whose log methods accept structured keyword arguments.

    Wraps an ordinary logging.Logger, so nothing about the process-wide
    logger class or the wrapped logger's handlers changes. Fields given to
    the adapter itself are attached to every record, under the active
    LogContext and the call's keyword arguments.

    Usage:
        logger = StructuredLogger(logging.getLogger("my.module"))
        logger.warning("Sink failed", rows=12, sink="stdout")
    """

    def __init__(
        self, logger: logging.Logger, extra: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(logger, dict(extra or {}))

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Move structured keyword arguments into the record's extra.

        Adapter fields are merged first, then the active LogContext, then
        the call's own keyword arguments, so explicit kwargs win.

        Args:
            msg: Log message, may contain % placeholders.
            kwargs: Keyword arguments of the log call. exc_info, extra,
                stack_info and stacklevel are passed through to the
                logger; the rest is structured data.

        Returns:
            The message and the keyword arguments for logging.Logger.log().
        """
        structured_data = {**(self.extra or {}), **_log_context.get()}
        log_kwargs: dict[str, Any] = {}
        for key, value in kwargs.items():
            if key in _LOG_KEYWORDS:
                log_kwargs[key] = value
            else:
                structured_data[key] = value

        extra = dict(log_kwargs.get("extra") or {})
        extra["structured_data"] = structured_data
        log_kwargs["extra"] = extra
        return msg, log_kwargs


# =============================================================================
# Formatter
# =============================================================================


class StructuredFormatter(logging.Formatter):
    """Human-readable formatter with structured data.

    Format: timestamp - name - level - message | key=value key=value
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_structured: bool = True,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Format string using LogRecord attributes. Defaults to
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'.
            datefmt: strftime format for %(asctime)s.
            include_structured: Append ' | key=value ...' when the record
                carries structured data. Default True.
        """
        if fmt is None:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt, datefmt)
        self.include_structured = include_structured

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, appending its structured data if any."""
        base = super().format(record)

        if not self.include_structured:
            return base

        structured = getattr(record, "structured_data", {})
        if not structured:
            return base

        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in structured.items())
        return f"{base} | {pairs}"


def _format_value(value: Any) -> str:
    """Format a value for key=value output.

    None becomes 'null', strings containing spaces are quoted, dicts and
    lists are JSON-encoded and everything else goes through str().

    Example:
        >>> _format_value("has spaces")
        '"has spaces"'
        >>> _format_value(["time", "level"])
        '["time", "level"]'
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        if " " in value:
            return f'"{value}"'
        return value
    if isinstance(value, dict | list | tuple):
        return json.dumps(value, default=str)
    return str(value)


# =============================================================================
# Context Management
# =============================================================================


class LogContext:
    """Context manager adding key-value pairs to every record in its block.

    Nested contexts merge, inner values override outer ones. Backed by
    contextvars, so each thread and asyncio task sees its own context.

    Usage:
        with LogContext(request="a1b2", worker="ingest"):
            logger.info("Request started")  # carries request and worker
    """

    def __init__(self, **kwargs: Any) -> None:
        self._kwargs = kwargs
        self._token: contextvars.Token[dict[str, Any]] | None = None

    def __repr__(self) -> str:
        return f"LogContext({self._kwargs!r})"

    def __enter__(self) -> LogContext:
        current = _log_context.get()
        self._token = _log_context.set({**current, **self._kwargs})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def current_context() -> dict[str, Any]:
    """Return a copy of the fields contributed by active LogContexts."""
    return dict(_log_context.get())


# =============================================================================
# Configuration
# =============================================================================

# Track if logging has been configured
_configured = False
_config_lock = threading.Lock()


def configure_logging(
    level: int | str = logging.INFO,
    stream: Any = None,
    include_structured: bool = True,
    force: bool = False,
) -> None:
    """Configure the package's diagnostic logging.

    Installs a StreamHandler with StructuredFormatter on the 'tablelog'
    logger and stops propagation to the root logger. Idempotent: later calls
    have no effect unless force=True. Guarded by a lock so concurrent first
    calls configure once.

    Args:
        level: Minimum level, as int or name ('DEBUG', 'INFO', ...).
            Default INFO.
        stream: Output stream. Default sys.stderr.
        include_structured: Append structured data to messages. Default True.
        force: Drop the existing configuration and configure again.

    Example:
        >>> import io
        >>> buffer = io.StringIO()
        >>> configure_logging(level="DEBUG", stream=buffer, force=True)
    """
    with _config_lock:
        if force:
            _reset_logging_impl()
        _configure_logging_impl(level, stream, include_structured)


def _configure_logging_impl(
    level: int | str = logging.INFO,
    stream: Any = None,
    include_structured: bool = True,
) -> None:
    """Internal implementation of configure_logging (assumes lock is held)."""
    global _configured

    if _configured:
        return

    if stream is None:
        stream = sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter(include_structured=include_structured))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(handler)

    # Prevent propagation to root logger (avoid duplicate logs)
    root.propagate = False

    _configured = True


def _reset_logging_impl() -> None:
    """Internal implementation of reset_logging (assumes lock is held)."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True

    _configured = False


def reset_logging() -> None:
    """Remove and close every handler on the 'tablelog' logger.

    Restores the logger's default level and propagation. Marks logging as unconfigured so the next configure_logging() call sets
    it up again. Meant for tests.
    """
    with _config_lock:
        _reset_logging_impl()


def get_logger(name: str, **fields: Any) -> StructuredLogger:
    """Get a structured logger for a module.

    Only wraps logging.getLogger(name); no handlers are installed. Records
    propagate to whatever the application configured, or to the 'tablelog'
    handler once configure_logging() has been called.

    Args:
        name: Logger name, normally __name__ of the calling module.
        **fields: Structured data attached to every record of this logger.

    Returns:
        A StructuredLogger wrapping the named logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Table flushed", rows=3)
    """
    return StructuredLogger(logging.getLogger(name), fields)
