"""Pytest configuration and fixtures for tablelog tests.

Provides a collecting sink for handler tests, a throwaway logger wired to
nothing but the handler under test, and resets the package's own logging
after every test so configuration never leaks between modules.
"""

import logging

import pytest

from tablelog.observability import reset_logging
from tablelog.sinks import CollectingSink


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Reset tablelog's diagnostic logging after each test.

    Tests call configure_logging(force=True) with their own streams; the
    reset removes and closes those handlers so the next test starts from
    the unconfigured state.

    Yields:
        None.
    """
    yield
    reset_logging()


@pytest.fixture
def sink():
    """Provide a fresh CollectingSink.

    Returns:
        CollectingSink: Records every rendered table it receives.
    """
    return CollectingSink()


@pytest.fixture
def app_logger():
    """Provide an isolated DEBUG logger for dispatch tests.

    The logger does not propagate, so records only reach the handlers a
    test attaches. Attached handlers are removed and closed afterwards.

    Yields:
        logging.Logger: Logger named 'tests.app'.
    """
    logger = logging.getLogger("tests.app")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
