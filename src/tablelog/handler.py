"""Logging handler that collects records into a text table.

TableHandler plugs into Python's logging framework like any other handler.
Each record becomes one row of a TextTable; a flush predicate decides when
the accumulated table is sent to its sink and cleared, and closing the
handler sends whatever is still pending.

Example:
    import logging
    from tablelog import TableHandler
    from tablelog.predicates import every

    handler = TableHandler(name="text_table", level="DEBUG", flush_if=every(60))
    logging.getLogger("app").addHandler(handler)

    # every 60 records, a formatted table is printed to stdout
    for event in events:
        logging.getLogger("app").warning(event)

Records can also be fed directly, without going through a logger:

    with TableHandler(columns=["level", "message"]) as handler:
        handler.log_message({"level": "info", "message": "Worker connected"})
    # leaving the block transmits the pending row
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from tablelog.config import (
    DEFAULT_COLUMNS,
    DEFAULT_TIME_FORMAT,
    FlushPredicate,
    Record,
    SendSink,
    TableHandlerConfig,
)
from tablelog.observability import get_logger
from tablelog.sinks import describe_sink, print_sink
from tablelog.table import DEFAULT_SEPARATOR, TextTable

logger = get_logger(__name__)

# Attributes every LogRecord has; anything else on a record came from extra=.
_LOGRECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "structured_data"}


class TableHandler(logging.Handler):
    """Handler that buffers records as table rows and sends the table.

    Rows hold one value per configured column, looked up by field name in
    each record. Records dispatched by the logging framework are converted
    to field mappings first (see record_fields()); log_message() accepts
    such mappings directly.

    Thread Safety:
        logging.Handler.handle() serialises emit() on the handler lock.
        Direct callers of log_message(), flush() and transmit() must
        serialise access themselves.
    """

    def __init__(
        self,
        columns: Iterable[str] | None = None,
        send_to: SendSink | None = None,
        flush_if: FlushPredicate | None = None,
        *,
        separator: str = DEFAULT_SEPARATOR,
        time_format: str = DEFAULT_TIME_FORMAT,
        name: str | None = None,
        level: int | str = logging.NOTSET,
    ) -> None:
        """Create a handler with an empty table.

        Args:
            columns: Record fields to show, in order. Default
                time, level, message.
            send_to: Callable receiving the rendered table on every
                transmission. Default prints to stdout.
            flush_if: Callable (handler, record) -> bool evaluated after
                every row. Default: never flush automatically. A value that
                is not callable is treated as absent.
            separator: String placed between columns. Default " | ".
            time_format: strftime format for the time field.
            name: Handler name (logging.Handler.set_name).
            level: Minimum level handled, int or level name.

        Raises:
            TypeError: If columns is a bare string.
            ValueError: If columns is empty.
        """
        super().__init__(level)
        if name is not None:
            self.set_name(name)

        if columns is None:
            columns = DEFAULT_COLUMNS
        if isinstance(columns, str):
            raise TypeError("columns must be a sequence of field names, not str")

        self._columns: tuple[str, ...] = tuple(columns)
        self._table = TextTable(self._columns, separator=separator)
        self.send_to: SendSink = print_sink if send_to is None else send_to
        self.flush_if = flush_if
        self.time_format = time_format
        self._disposed = False
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: TableHandlerConfig) -> TableHandler:
        """Build a handler from a TableHandlerConfig."""
        return cls(
            columns=config.columns,
            send_to=config.send_to,
            flush_if=config.flush_if,
            separator=config.separator,
            time_format=config.time_format,
            name=config.name,
            level=config.level,
        )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def columns(self) -> tuple[str, ...]:
        """Configured column names."""
        return self._columns

    @property
    def table(self) -> TextTable:
        """The live table; it keeps changing as records are logged."""
        return self._table

    @property
    def entry_count(self) -> int:
        """Number of rows logged since the last flush."""
        return self._table.body_height

    @property
    def disposed(self) -> bool:
        """True once close() has run."""
        return self._disposed

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    def log_message(self, record: Record) -> None:
        """Add a record to the table, then flush if the predicate says so.

        A missing ``time`` field is filled with the current local time; the
        caller's mapping is left untouched. Fields that are not columns are
        ignored for the row but remain visible to the flush predicate.

        Once the handler is closed nothing can send its table any more, so
        records are dropped with a warning on the package logger.

        Args:
            record: Field name -> value mapping for one event.

        Raises:
            TypeError: If record is not a mapping.
            Exception: Whatever the sink raises if a flush is triggered.
        """
        if not isinstance(record, Mapping):
            raise TypeError(f"record must be a mapping, got {type(record).__name__}")
        if self._disposed:
            logger.warning(
                "Record dropped by closed table handler",
                handler=self.get_name(),
                dropped=record.get("message"),
            )
            return

        fields = dict(record)
        if "time" not in fields:
            fields["time"] = datetime.now().strftime(self.time_format)

        self._table.add(*(fields.get(column) for column in self._columns))

        if self.should_flush(fields):
            self.flush()

    def should_flush(self, record: Record) -> bool:
        """Ask the flush predicate whether to flush after this record.

        Always False unless a callable flush_if was given. The predicate
        receives this handler and the record just logged.
        """
        if not callable(self.flush_if):
            return False
        return bool(self.flush_if(self, record))

    def flush(self) -> None:
        """Send the table, then clear its rows.

        An empty table is still sent (header only). If the sink raises, the
        rows are kept so a later flush can retry. Does nothing once the
        handler has been closed: close() already sent the pending rows and
        later records are dropped.
        """
        if self._disposed:
            return
        rows = self.entry_count
        self.transmit()
        self._table.clear()
        logger.debug("Flushed table", handler=self.get_name(), rows=rows)

    def transmit(self) -> None:
        """Send the rendered table to the sink without clearing it.

        Raises:
            TypeError: If send_to is not callable.
            Exception: Whatever the sink raises, unmodified.
        """
        if not callable(self.send_to):
            raise TypeError(
                f"send_to must be callable, got {type(self.send_to).__name__}"
            )
        self.send_to(self._table.render())

    # -------------------------------------------------------------------------
    # logging.Handler protocol
    # -------------------------------------------------------------------------

    def record_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        """Turn a LogRecord into the field mapping rows are built from.

        Fields:
            time: an explicit time from extra= or structured data, else the
                record creation time, local, in time_format.
            level / levelno: level name and number.
            message: the formatted message (record.getMessage()).
            name, module, funcName, lineno, pathname, process, thread,
            threadName: as on the LogRecord.
            exception: formatted traceback, only when exc_info is set.
            Any attribute given via ``extra=`` and any structured_data key.
        """
        fields: dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _LOGRECORD_ATTRS
        }
        fields.update(getattr(record, "structured_data", None) or {})

        fields.setdefault(
            "time", datetime.fromtimestamp(record.created).strftime(self.time_format)
        )
        fields.update(
            level=record.levelname,
            levelno=record.levelno,
            message=record.getMessage(),
            name=record.name,
            module=record.module,
            funcName=record.funcName,
            lineno=record.lineno,
            pathname=record.pathname,
            process=record.process,
            thread=record.thread,
            threadName=record.threadName,
        )
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            fields["exception"] = formatter.formatException(record.exc_info)
        return fields

    def emit(self, record: logging.LogRecord) -> None:
        """Add a dispatched LogRecord to the table.

        Errors (including sink failures on a triggered flush) go to
        handleError(), so logging never raises into application code.
        Records produced while this handler is already emitting in the same
        thread, e.g. by a sink that logs, are dropped.
        """
        # Recursion guard: skip if we're already emitting in this thread
        if getattr(self._local, "emitting", False):
            return

        try:
            self._local.emitting = True
            self.log_message(self.record_fields(record))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)
        finally:
            self._local.emitting = False

    def close(self) -> None:
        """Send pending rows one last time and release the handler.

        Transmits only when rows are pending and never clears them. A sink
        failure here is logged and swallowed: close() runs during
        logging.shutdown() and context-manager exit, where raising is
        unsafe. Repeated calls do nothing.
        """
        if self._disposed:
            return
        self._disposed = True
        try:
            if self.entry_count:
                self._local.emitting = True
                try:
                    self.transmit()
                except Exception:
                    logger.warning(
                        "Final table transmission failed",
                        exc_info=True,
                        handler=self.get_name(),
                        rows=self.entry_count,
                        sink=describe_sink(self.send_to),
                    )
                finally:
                    self._local.emitting = False
        finally:
            super().close()

    # -------------------------------------------------------------------------
    # Scoped lifetime
    # -------------------------------------------------------------------------

    def __enter__(self) -> TableHandler:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        level = logging.getLevelName(self.level)
        return (
            f"<{type(self).__name__} {self.get_name() or ''} ({level}) "
            f"columns={list(self._columns)} rows={self.entry_count}>"
        )
