"""Destinations for rendered tables.

A sink is any callable taking the rendered table text. These are the
common ones; pass any of them (or your own function) as ``send_to``.
"""

from __future__ import annotations

import logging
from typing import IO, Any

from tablelog.config import SendSink


def print_sink(text: str) -> None:
    """Write the table to standard output exactly as rendered.

    sys.stdout is looked up on every call, so redirection done after the
    handler was built (contextlib.redirect_stdout, pytest capsys) applies.
    """
    print(text, end="")


def stream_sink(stream: IO[str]) -> SendSink:
    """Return a sink that writes tables to a file-like object.

    The stream is flushed after each write when it supports flush(). The
    sink never closes the stream; its lifetime belongs to the caller.

    Example:
        >>> with open("events.txt", "a") as fh:
        ...     handler = TableHandler(send_to=stream_sink(fh))
    """

    def send(text: str) -> None:
        stream.write(text)
        flush = getattr(stream, "flush", None)
        if callable(flush):
            flush()

    return send


def logger_sink(logger: logging.Logger, level: int = logging.INFO) -> SendSink:
    """Return a sink that forwards each table as a single log message.

    The trailing newline is stripped; the inner newlines stay, so the
    table arrives as one multi-line message. The target logger may be one
    the handler listens on: records the sink logs during a flush triggered
    by emit() are dropped by the handler rather than tabled again.

    Business context: Lets a table end up wherever the application's
    logging already goes (files, syslog, a log collector) without the
    handler knowing about those destinations.

    Args:
        logger: Logger receiving the tables.
        level: Level of the forwarded messages. Default INFO.

    Returns:
        A sink for TableHandler(send_to=...).

    Example:
        >>> audit = logging.getLogger("audit")
        >>> handler = TableHandler(send_to=logger_sink(audit, logging.WARNING))
    """

    def send(text: str) -> None:
        logger.log(level, "%s", text.rstrip("\n"))

    return send


class CollectingSink:
    """Sink that keeps every transmission in memory.

    Useful in tests and for inspecting what a handler would have sent.
    Nothing is written anywhere; memory grows with every transmission
    until clear() is called.

    Attributes:
        transmissions: Rendered tables, oldest first.

    Example:
        >>> sink = CollectingSink()
        >>> handler = TableHandler(columns=["message"], send_to=sink)
        >>> handler.log_message({"message": "hello"})
        >>> handler.flush()
        >>> len(sink)
        1
    """

    def __init__(self) -> None:
        self.transmissions: list[str] = []

    def __call__(self, text: str) -> None:
        self.transmissions.append(text)

    def __len__(self) -> int:
        return len(self.transmissions)

    @property
    def last(self) -> str | None:
        """Most recent transmission, or None if nothing was sent."""
        return self.transmissions[-1] if self.transmissions else None

    def clear(self) -> None:
        """Forget every transmission received so far."""
        self.transmissions.clear()

    def __repr__(self) -> str:
        return f"CollectingSink(transmissions={len(self.transmissions)})"


def describe_sink(sink: Any) -> str:
    """Short human-readable name of a sink for diagnostics."""
    return getattr(sink, "__qualname__", None) or type(sink).__name__
