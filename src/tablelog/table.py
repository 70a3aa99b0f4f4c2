"""Aligned plain-text tables.

TextTable holds a fixed header and a growable list of rows and renders them
as a plain-text grid: every column padded to its widest cell, columns joined
by a literal separator string, one line per row, each line ending in a
newline.

Column widths are measured in terminal cells with rich.cells, so wide
characters (CJK, most emoji) keep the grid aligned. The separator is written
verbatim between cells; any string, including an empty one, can divide the
grid.

Example:
    >>> table = TextTable(["level", "message"])
    >>> table.add("INFO", "Worker connected")
    >>> print(table.render(), end="")
    level | message
    INFO  | Worker connected
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from rich.cells import cell_len, set_cell_size

DEFAULT_SEPARATOR = " | "


def _cell_text(value: Any) -> str:
    """Convert a cell value to its display string (None renders empty)."""
    if value is None:
        return ""
    return str(value).expandtabs()


def _display_width(text: str) -> int:
    """Terminal width of the widest line in text."""
    return max((cell_len(line) for line in text.splitlines()), default=0)


class TextTable:
    """Header plus rows, rendered as an aligned text grid.

    The header is fixed at construction. Rows are positional and must have
    exactly one value per header column.

    Attributes:
        header: Column names, in display order.
        separator: Literal string placed between adjacent columns.
    """

    def __init__(
        self, header: Iterable[str], separator: str = DEFAULT_SEPARATOR
    ) -> None:
        """Create an empty table.

        Args:
            header: Column names. Must contain at least one name.
            separator: String inserted between columns. Default " | ".

        Raises:
            ValueError: If header is empty.
            TypeError: If header is a bare string rather than a sequence
                of names.
        """
        if isinstance(header, str):
            raise TypeError("header must be a sequence of column names, not str")
        self._header: tuple[str, ...] = tuple(str(name) for name in header)
        if not self._header:
            raise ValueError("table needs at least one column")
        self.separator = separator
        self._rows: list[tuple[str, ...]] = []

    @property
    def header(self) -> tuple[str, ...]:
        """Column names in display order."""
        return self._header

    @property
    def rows(self) -> list[tuple[str, ...]]:
        """Copy of the current body rows as display strings."""
        return list(self._rows)

    @property
    def body_height(self) -> int:
        """Number of body rows (the header is not counted)."""
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def add(self, *values: Any) -> None:
        """Append one row.

        Args:
            *values: One value per column. None becomes an empty cell;
                everything else is converted with str().

        Raises:
            ValueError: If the number of values differs from the number
                of columns.
        """
        if len(values) != len(self._header):
            raise ValueError(
                f"row has {len(values)} values, table has "
                f"{len(self._header)} columns"
            )
        self._rows.append(tuple(_cell_text(value) for value in values))

    def clear(self) -> None:
        """Drop all body rows, keeping the header."""
        self._rows.clear()

    def column_widths(self) -> list[int]:
        """Display width of each column (widest of header and cells)."""
        widths = [_display_width(name) for name in self._header]
        for row in self._rows:
            for index, cell in enumerate(row):
                widths[index] = max(widths[index], _display_width(cell))
        return widths

    def render(self) -> str:
        """Render header and rows as an aligned grid.

        Every column, the last included, is padded to its display width
        and cells are joined with the separator exactly as given. A cell
        spanning several lines makes its row that many lines tall; the
        other cells of the row are blank on the extra lines, and the
        separators repeat on each of them.

        Returns:
            The grid as one string, one line per header/row line, each
            terminated by a newline. Cell text is emitted literally: no
            markup, emoji codes or ANSI styling.
        """
        widths = self.column_widths()
        lines = self._render_row(self._header, widths)
        for row in self._rows:
            lines.extend(self._render_row(row, widths))
        return "".join(f"{line}\n" for line in lines)

    def _render_row(self, cells: Sequence[str], widths: Sequence[int]) -> list[str]:
        cell_lines = [cell.splitlines() or [""] for cell in cells]
        height = max(len(parts) for parts in cell_lines)
        return [
            self.separator.join(
                set_cell_size(parts[index] if index < len(parts) else "", width)
                for parts, width in zip(cell_lines, widths)
            )
            for index in range(height)
        ]

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"TextTable(header={list(self._header)!r}, "
            f"separator={self.separator!r}, rows={len(self._rows)})"
        )


def render_rows(
    header: Sequence[str],
    rows: Iterable[Sequence[Any]],
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Render a one-off grid without keeping a TextTable around."""
    table = TextTable(header, separator=separator)
    for row in rows:
        table.add(*row)
    return table.render()
