"""Ready-made flush predicates.

A flush predicate is called after every logged row with the handler and
the record just logged; a true result flushes the table.

Example:
    handler = TableHandler(flush_if=any_of(every(60), at_level("ERROR")))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tablelog.config import FlushPredicate, Record

if TYPE_CHECKING:
    from tablelog.handler import TableHandler


def every(count: int) -> FlushPredicate:
    """Flush once the table holds ``count`` rows.

    The returned predicate compares the handler's entry_count after each
    row, so tables are sent in batches of exactly ``count`` rows while
    records arrive one at a time.

    Business context: Batching keeps a noisy logger from producing one
    table per event. A batch of 60 turns a minute of per-second status
    lines into a single readable block.

    Args:
        count: Rows per transmitted table. Must be at least 1.

    Returns:
        A flush predicate for TableHandler(flush_if=...).

    Raises:
        ValueError: If count is less than 1.

    Example:
        >>> handler = TableHandler(flush_if=every(60))
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    def should_flush(handler: TableHandler, record: Record) -> bool:
        return handler.entry_count >= count

    return should_flush


def resolve_level(level: int | str) -> int:
    """Convert a level name ('warning', 'ERROR') or number to a number.

    Names are looked up case-insensitively in the logging module's level
    registry, so levels added with logging.addLevelName() work too.

    Args:
        level: Level number or name.

    Returns:
        The numeric level.

    Raises:
        ValueError: If the name is not a registered logging level.
    """
    if isinstance(level, int):
        return level
    levels = logging.getLevelNamesMapping()
    try:
        return levels[str(level).upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def _record_level(record: Record) -> int | None:
    levelno = record.get("levelno")
    if isinstance(levelno, int):
        return levelno
    level = record.get("level")
    if level is None:
        return None
    try:
        return resolve_level(level)
    except ValueError:
        return None


def at_level(level: int | str) -> FlushPredicate:
    """Flush when a record at or above ``level`` is logged.

    The record's numeric ``levelno`` is used when present, otherwise its
    ``level`` name. Records without a recognisable level never trigger.

    Business context: Mirrors MemoryHandler's flushLevel. Quiet rows wait
    in the table, and an error sends them together with the row that
    explains them.

    Args:
        level: Threshold as a number or a level name ('error', 'WARNING').

    Returns:
        A flush predicate for TableHandler(flush_if=...).

    Raises:
        ValueError: If level is an unknown level name.

    Example:
        >>> handler = TableHandler(flush_if=any_of(every(100), at_level("ERROR")))
    """
    threshold = resolve_level(level)

    def should_flush(handler: TableHandler, record: Record) -> bool:
        record_level = _record_level(record)
        return record_level is not None and record_level >= threshold

    return should_flush


def any_of(*predicates: FlushPredicate) -> FlushPredicate:
    """Flush when any of the given predicates asks for it.

    Predicates are evaluated in order and evaluation stops at the first
    true result. With no predicates the result never flushes.

    Args:
        *predicates: Flush predicates taking (handler, record).

    Returns:
        A flush predicate combining them.
    """

    def should_flush(handler: TableHandler, record: Record) -> bool:
        return any(predicate(handler, record) for predicate in predicates)

    return should_flush
