"""tablelog - log records collected into text tables.

A logging handler that turns each record into a row of an aligned text
table and sends the table to a configurable sink, either when a flush
predicate asks for it or when the handler is closed.

Example:
    import logging
    from tablelog import TableHandler, every

    handler = TableHandler(flush_if=every(60))
    logging.getLogger("app").addHandler(handler)
"""

from tablelog.config import (
    DEFAULT_COLUMNS,
    DEFAULT_TIME_FORMAT,
    TableHandlerConfig,
)
from tablelog.handler import TableHandler
from tablelog.predicates import any_of, at_level, every
from tablelog.sinks import CollectingSink, logger_sink, print_sink, stream_sink
from tablelog.table import DEFAULT_SEPARATOR, TextTable, render_rows

__version__ = "0.3.0"

__all__ = [
    # Handler
    "TableHandler",
    "TableHandlerConfig",
    "DEFAULT_COLUMNS",
    "DEFAULT_SEPARATOR",
    "DEFAULT_TIME_FORMAT",
    # Table
    "TextTable",
    "render_rows",
    # Flush predicates
    "every",
    "at_level",
    "any_of",
    # Sinks
    "print_sink",
    "stream_sink",
    "logger_sink",
    "CollectingSink",
]
