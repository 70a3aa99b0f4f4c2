"""Table handler configuration.

Collects the options a TableHandler is built from in one dataclass, so
applications can keep them next to the rest of their settings and build
handlers with TableHandler.from_config().
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from tablelog.table import DEFAULT_SEPARATOR

if TYPE_CHECKING:
    from tablelog.handler import TableHandler

# =============================================================================
# Constants
# =============================================================================

DEFAULT_COLUMNS: tuple[str, ...] = ("time", "level", "message")

# Local time, second resolution
DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

#: One log event: field name -> value.
Record = Mapping[str, Any]

#: Receives the rendered table text on every transmission.
SendSink = Callable[[str], Any]

#: Called with (handler, last record) after every row; True means flush.
FlushPredicate = Callable[["TableHandler", Record], Any]


@dataclass
class TableHandlerConfig:
    """Options for building a TableHandler.

    Validated on creation, so a bad column list fails where the settings
    are loaded rather than when the first record is logged.

    Business context: Applications usually keep logging settings in a
    config file. from_mapping() turns such a section into a config and
    TableHandler.from_config() builds the handler from it.

    Attributes:
        columns: Record fields shown as columns, in order.
        separator: Literal string placed between columns.
        send_to: Sink for rendered tables (None prints to stdout).
        flush_if: Flush predicate (None never flushes automatically).
        time_format: strftime format for the time field.
        name: Handler name, passed to logging.Handler.
        level: Minimum level, passed to logging.Handler.

    Example:
        >>> config = TableHandlerConfig(columns=["level", "message"], level="INFO")
        >>> handler = TableHandler.from_config(config)
    """

    columns: tuple[str, ...] = field(default=DEFAULT_COLUMNS)
    separator: str = DEFAULT_SEPARATOR
    send_to: SendSink | None = None
    flush_if: FlushPredicate | None = None
    time_format: str = DEFAULT_TIME_FORMAT
    name: str | None = None
    level: int | str = logging.NOTSET

    def __post_init__(self) -> None:
        """Normalize columns to a tuple and reject unusable values.

        Raises:
            TypeError: If columns is a bare string.
            ValueError: If columns is empty.
        """
        if isinstance(self.columns, str):
            raise TypeError("columns must be a sequence of field names, not str")
        self.columns = tuple(self.columns)
        if not self.columns:
            raise ValueError("columns must name at least one field")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> TableHandlerConfig:
        """Build a config from a plain dict, e.g. one loaded from a file.

        Args:
            mapping: Option name -> value. Missing options keep their
                defaults; None values are treated as missing.

        Returns:
            The populated config.

        Raises:
            ValueError: If the mapping contains an unknown option.

        Example:
            >>> config = TableHandlerConfig.from_mapping(
            ...     {"columns": ["level", "message"], "level": "WARNING"}
            ... )
            >>> config.columns
            ('level', 'message')
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"Unknown table handler options: {', '.join(unknown)}")
        return cls(**{k: v for k, v in mapping.items() if v is not None})
