"""Tests for ResultCursor positioning."""

from collections.abc import Iterator

import pytest
from sqlalchemy import Connection, create_engine, text


@pytest.fixture
def connection(customers_url: str) -> Iterator[Connection]:
    engine = create_engine(customers_url)
    with engine.connect() as conn:
        yield conn
    engine.dispose()


def _cursor(connection: Connection, mode):
    from pagedb.core.cursor import ResultCursor

    result = connection.execute(text("SELECT id AS ID, name AS Name FROM customers ORDER BY id"))
    return ResultCursor(result, mode)


class TestForwardOnlyCursor:
    """Forward-only cursors advance row by row."""

    def test_column_labels(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        assert cursor.column_labels == ("ID", "Name")
        assert cursor.column_count == 2

    def test_next_tracks_position(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        assert cursor.row_number == 0

        first = cursor.next()
        assert first is not None
        assert first[0] == 1
        assert cursor.row_number == 1
        assert cursor.value(1) == "customer-1"

    def test_skip_discards_rows(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        assert cursor.skip(10) == 10
        row = cursor.next()
        assert row is not None
        assert row[0] == 11

    def test_skip_past_end_reports_actual(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        assert cursor.skip(100) == 25
        assert cursor.next() is None

    def test_last_counts_consumed_rows(self, connection: Connection) -> None:
        """Position is absolute even after partial consumption."""
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        cursor.skip(7)
        assert cursor.last() == 25
        # Calling again after exhaustion is stable
        assert cursor.last() == 25

    def test_absolute_not_supported(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode, DatabaseError

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        with pytest.raises(DatabaseError, match="scrollable"):
            cursor.absolute(3)

    def test_value_without_current_row(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode, DatabaseError

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        with pytest.raises(DatabaseError):
            cursor.value(0)


class TestScrollableCursor:
    """Scrollable cursors buffer rows and seek directly."""

    def test_absolute_then_next(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        cursor.absolute(20)
        assert cursor.row_number == 20
        row = cursor.next()
        assert row is not None
        assert row[0] == 21

    def test_absolute_can_rewind(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        cursor.skip(15)
        cursor.absolute(0)
        row = cursor.next()
        assert row is not None
        assert row[0] == 1

    def test_absolute_past_end(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        cursor.absolute(100)
        assert cursor.next() is None

    def test_absolute_rejects_negative(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        with pytest.raises(ValueError):
            cursor.absolute(-1)

    def test_last(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        assert cursor.last() == 25
        assert cursor.value(0) == 25
        assert cursor.next() is None


class TestCursorClose:
    def test_close_is_idempotent(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode

        cursor = _cursor(connection, CursorMode.FORWARD_ONLY)
        cursor.close()
        cursor.close()
        assert cursor.closed

    def test_next_after_close_raises(self, connection: Connection) -> None:
        from pagedb.contracts import CursorMode, DatabaseError

        cursor = _cursor(connection, CursorMode.SCROLLABLE)
        cursor.close()
        with pytest.raises(DatabaseError, match="closed"):
            cursor.next()
