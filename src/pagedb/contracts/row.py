"""Schema-less positional row, used when no record type is supplied."""

from collections.abc import Iterator, Sequence
from typing import Any


class Row:
    """Fixed-size ordered container of column values.

    Indexes are 0-based. Negative and out-of-range indexes raise IndexError
    instead of wrapping around.
    """

    __slots__ = ("_columns",)

    def __init__(self, column_count: int) -> None:
        if column_count < 0:
            raise ValueError(f"column_count must be >= 0, got {column_count}")
        self._columns: list[Any] = [None] * column_count

    @classmethod
    def from_values(cls, values: Sequence[Any]) -> "Row":
        """Build a row holding a copy of the given column values."""
        row = cls(len(values))
        row._columns[:] = values
        return row

    def _check(self, column: int) -> None:
        if not 0 <= column < len(self._columns):
            raise IndexError(
                f"Column index {column} out of range for row of {len(self._columns)} columns"
            )

    def get(self, column: int) -> Any:
        """Return the value at ``column``, or None if the slot was never set."""
        self._check(column)
        return self._columns[column]

    def set(self, column: int, value: Any) -> None:
        self._check(column)
        self._columns[column] = value

    def __getitem__(self, column: int) -> Any:
        return self.get(column)

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._columns == other._columns

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Row({self._columns!r})"
