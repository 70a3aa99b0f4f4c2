"""Tests for tablelog's structured logging layer."""

import io
import logging

import pytest

from tablelog.observability import logging as log_module
from tablelog.observability.logging import (
    ROOT_LOGGER_NAME,
    LogContext,
    StructuredFormatter,
    StructuredLogger,
    _format_value,
    configure_logging,
    current_context,
    get_logger,
    reset_logging,
)


def _record(msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


# =============================================================================
# Formatter
# =============================================================================


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_basic_format(self):
        """Verifies formatter produces readable output for a plain message.

        Arrangement:
        1. StructuredFormatter with default settings.
        2. LogRecord without structured_data.

        Action:
        Formats the record.

        Assertion Strategy:
        Validates base formatting by confirming:
        - Message and level name appear.
        - No ' | ' suffix is appended.

        Testing Principle:
        Validates standard logging output is preserved.
        """
        result = StructuredFormatter().format(_record())

        assert "Test message" in result
        assert "INFO" in result
        assert " | " not in result

    def test_format_with_structured_data(self):
        """Verifies structured data is appended after a pipe."""
        record = _record("Table flushed")
        record.structured_data = {"rows": 3, "handler": "text_table"}

        result = StructuredFormatter().format(record)

        assert result.endswith("Table flushed | rows=3 handler=text_table")

    def test_include_structured_false(self):
        """Verifies structured data can be suppressed."""
        record = _record()
        record.structured_data = {"rows": 3}

        result = StructuredFormatter(include_structured=False).format(record)

        assert "rows=3" not in result

    def test_custom_format_string(self):
        """Verifies a custom fmt replaces the default layout."""
        formatter = StructuredFormatter(fmt="%(levelname)s: %(message)s")

        assert formatter.format(_record("hello")) == "INFO: hello"


class TestFormatValue:
    """Tests for _format_value."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "null"),
            ("simple", "simple"),
            ("has spaces", '"has spaces"'),
            (42, "42"),
            ({"key": 1}, '{"key": 1}'),
            (["time", "level"], '["time", "level"]'),
            (("level", "message"), '["level", "message"]'),
        ],
    )
    def test_values(self, value, expected):
        """Verifies each value type is rendered as documented."""
        assert _format_value(value) == expected


# =============================================================================
# Context
# =============================================================================


class TestLogContext:
    """Tests for LogContext."""

    def test_context_sets_and_restores(self):
        """Verifies context values exist only inside the with block.

        Arrangement:
        1. No active context.

        Action:
        Enters LogContext(session='m31'), reads context, exits.

        Assertion Strategy:
        Validates scoping by confirming session is present inside and
        absent afterwards.

        Testing Principle:
        Validates context cleanup even for simple use.
        """
        assert "session" not in current_context()

        with LogContext(session="m31"):
            assert current_context()["session"] == "m31"

        assert "session" not in current_context()

    def test_nested_contexts(self):
        """Verifies nested contexts merge and inner values win."""
        with LogContext(session="m31", camera="main"):
            with LogContext(camera="finder"):
                assert current_context() == {"session": "m31", "camera": "finder"}
            assert current_context()["camera"] == "main"

    def test_exit_without_enter(self):
        """Verifies exiting an unentered context is harmless."""
        LogContext(a=1).__exit__(None, None, None)

    def test_repr(self):
        assert repr(LogContext(a=1)) == "LogContext({'a': 1})"


# =============================================================================
# Logger
# =============================================================================


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    @pytest.fixture
    def logger_and_stream(self):
        """Create a StructuredLogger writing to a StringIO.

        Yields:
            Tuple[StructuredLogger, StringIO]: Adapter over a DEBUG-level
                logger with a StructuredFormatter, and the stream it
                writes to.
        """
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())

        base = logging.getLogger("tests.structured_logger")
        base.setLevel(logging.DEBUG)
        base.addHandler(handler)
        base.propagate = False

        yield StructuredLogger(base), stream

        base.handlers.clear()
        base.filters.clear()

    def test_structured_kwargs(self, logger_and_stream):
        """Verifies keyword arguments become structured data."""
        logger, stream = logger_and_stream

        logger.info("Table flushed", rows=3, handler="text_table")

        output = stream.getvalue()
        assert "rows=3" in output
        assert "handler=text_table" in output

    def test_kwargs_override_context(self, logger_and_stream):
        """Verifies explicit kwargs take precedence over LogContext.

        Arrangement:
        1. LogContext(camera='main') active.

        Action:
        Logs with camera='finder'.

        Assertion Strategy:
        Validates merge order by confirming finder appears and main
        does not.

        Testing Principle:
        Validates call-site data overrides ambient context.
        """
        logger, stream = logger_and_stream

        with LogContext(camera="main"):
            logger.info("Capture", camera="finder")

        output = stream.getvalue()
        assert "camera=finder" in output
        assert "camera=main" not in output

    def test_args_formatting(self, logger_and_stream):
        """Verifies %-style arguments still work."""
        logger, stream = logger_and_stream

        logger.warning("%d rows pending", 7)

        assert "7 rows pending" in stream.getvalue()

    def test_extra_dict_preserved(self, logger_and_stream):
        """Verifies extra= attributes reach the record alongside kwargs."""
        logger, stream = logger_and_stream
        seen = []
        logger.logger.addFilter(lambda record: seen.append(record) or True)

        logger.info("With extra", extra={"disk": "/data"}, rows=1)

        assert seen[0].disk == "/data"
        assert seen[0].structured_data == {"rows": 1}

    def test_exc_info(self, logger_and_stream):
        """Verifies exc_info=True includes the traceback."""
        logger, stream = logger_and_stream

        try:
            raise ValueError("bad row")
        except ValueError:
            logger.error("Failed", exc_info=True, rows=2)

        output = stream.getvalue()
        assert "ValueError: bad row" in output
        assert "rows=2" in output


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    """Tests for configure_logging, reset_logging and get_logger."""

    def test_configure_installs_stream_handler(self):
        """Verifies configure_logging attaches one handler to 'tablelog'.

        Arrangement:
        1. StringIO stream for output.

        Action:
        Configures with force=True and logs through get_logger().

        Assertion Strategy:
        Validates setup by confirming:
        - One handler on the 'tablelog' logger.
        - Propagation disabled.
        - Output reaches the stream with structured data.

        Testing Principle:
        Validates the package's diagnostic channel end to end.
        """
        stream = io.StringIO()
        configure_logging(level=logging.DEBUG, stream=stream, force=True)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        get_logger("tablelog.tests").debug("Configured", rows=0)

        assert len(root.handlers) == 1
        assert root.propagate is False
        assert "Configured | rows=0" in stream.getvalue()

    def test_configure_is_idempotent(self):
        """Verifies a second configure without force adds nothing."""
        configure_logging(stream=io.StringIO(), force=True)
        configure_logging(stream=io.StringIO())

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    def test_reset_removes_handlers(self):
        """Verifies reset_logging clears handlers and the configured flag."""
        configure_logging(stream=io.StringIO(), force=True)

        reset_logging()

        assert logging.getLogger(ROOT_LOGGER_NAME).handlers == []
        assert log_module._configured is False

    def test_get_logger_does_not_configure(self):
        """Verifies get_logger installs no handlers on its own."""
        reset_logging()

        logger = get_logger("tablelog.lazy")

        assert isinstance(logger, StructuredLogger)
        assert logger.logger is logging.getLogger("tablelog.lazy")
        assert logging.getLogger(ROOT_LOGGER_NAME).handlers == []
        assert log_module._configured is False

    def test_import_leaves_logger_class_alone(self):
        """Verifies using the package does not change the global logger class.

        Arrangement:
        1. tablelog imported and a package logger created.

        Action:
        Creates an unrelated application logger afterwards.

        Assertion Strategy:
        Validates host isolation by confirming:
        - logging.getLoggerClass() is still logging.Logger.
        - The new application logger is a plain logging.Logger.

        Testing Principle:
        Validates a library handler leaves the host's logging setup as
        it found it.
        """
        import tablelog  # noqa: F401

        get_logger("tablelog.handler")
        app_logger = logging.getLogger("tests.created_after_import")

        assert logging.getLoggerClass() is logging.Logger
        assert type(app_logger) is logging.Logger

    def test_adapter_fields_on_every_record(self):
        """Verifies fields given to get_logger are attached to each record."""
        stream = io.StringIO()
        configure_logging(stream=stream, force=True)

        get_logger("tablelog.tests", component="sink").info("Sent", rows=2)

        assert "Sent | component=sink rows=2" in stream.getvalue()
