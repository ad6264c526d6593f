"""Result cursor with forward-only or scrollable positioning.

Wraps a SQLAlchemy ``CursorResult``. Positions are 1-based like a SQL row
number: 0 means "before the first row".

A FORWARD_ONLY cursor pulls rows from the driver one at a time and can only
advance. A SCROLLABLE cursor buffers the whole result client-side on first
use, then supports ``absolute()`` seeks in either direction.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy.engine import CursorResult

from pagedb.contracts.enums import CursorMode
from pagedb.contracts.errors import DatabaseError
from pagedb.core.resources import database_errors


class ResultCursor:
    """Positioned access to the rows of one executed statement."""

    def __init__(self, result: CursorResult[Any], mode: CursorMode) -> None:
        self._result = result
        self.mode = mode
        self._position = 0
        self._current: Sequence[Any] | None = None
        self._exhausted = False
        self._buffer: list[Sequence[Any]] | None = None
        self._closed = False
        with database_errors("Reading result metadata"):
            self._labels = tuple(str(key) for key in result.keys())

    @property
    def column_labels(self) -> tuple[str, ...]:
        """Column labels in statement order."""
        return self._labels

    @property
    def column_count(self) -> int:
        return len(self._labels)

    @property
    def row_number(self) -> int:
        """1-based position of the current row, 0 before the first row."""
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    def _rows(self) -> list[Sequence[Any]]:
        if self._buffer is None:
            with database_errors("Fetching rows"):
                self._buffer = list(self._result.fetchall())
        return self._buffer

    def _check_open(self) -> None:
        if self._closed:
            raise DatabaseError("Cursor is closed")

    def next(self) -> Sequence[Any] | None:
        """Advance one row and return it, or None past the last row."""
        self._check_open()
        if self.mode is CursorMode.SCROLLABLE:
            rows = self._rows()
            if self._position >= len(rows):
                self._position = len(rows) + 1
                self._current = None
                return None
            self._position += 1
            self._current = rows[self._position - 1]
            return self._current
        if self._exhausted:
            return None
        with database_errors("Fetching row"):
            row = self._result.fetchone()
        if row is None:
            self._exhausted = True
            self._current = None
            return None
        self._position += 1
        self._current = row
        return row

    def absolute(self, row_number: int) -> None:
        """Move so that the next call to ``next()`` returns row ``row_number + 1``.

        ``absolute(0)`` rewinds before the first row. Seeking past the end
        leaves the cursor after the last row.

        Raises:
            DatabaseError: On a forward-only cursor
        """
        self._check_open()
        if self.mode is not CursorMode.SCROLLABLE:
            raise DatabaseError("Absolute positioning requires a scrollable cursor")
        if row_number < 0:
            raise ValueError(f"row_number must be >= 0, got {row_number}")
        rows = self._rows()
        self._position = min(row_number, len(rows))
        self._current = rows[self._position - 1] if self._position else None

    def skip(self, count: int) -> int:
        """Discard up to ``count`` rows; return how many were discarded."""
        skipped = 0
        while skipped < count and self.next() is not None:
            skipped += 1
        return skipped

    def last(self) -> int:
        """Move to the last row and return its 1-based position (0 if empty).

        On a forward-only cursor this drains the remaining rows; the position
        still counts rows consumed before the call.
        """
        self._check_open()
        if self.mode is CursorMode.SCROLLABLE:
            rows = self._rows()
            self._position = len(rows)
            self._current = rows[-1] if rows else None
            return self._position
        while self.next() is not None:
            pass
        return self._position

    def value(self, column_index: int) -> Any:
        """Value of the current row at the 0-based ``column_index``."""
        if self._current is None:
            raise DatabaseError("Cursor is not positioned on a row")
        return self._current[column_index]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._buffer = None
        self._current = None
        self._result.close()
