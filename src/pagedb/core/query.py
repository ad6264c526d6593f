"""Query: one prepared statement, its result cursor and pagination settings.

Statement and cursor are closed when the Query, or the Transaction that
created it, is closed.

The main feature is returning a list of typed records instead of a raw
cursor:

    with factory.new_transaction(False, IsolationLevel.READ_COMMITTED) as tx:
        query = tx.prepare("SELECT * FROM customers WHERE status = :status")
        query.set_parameter("status", "open")
        query.set_first_result(0)
        query.set_max_results(10)
        customers = query.get_result_list(Customer)
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeVar, overload

from sqlalchemy import Connection, TextClause, text
from sqlalchemy.engine import CursorResult

from pagedb.contracts.enums import CursorMode
from pagedb.contracts.errors import DatabaseError
from pagedb.contracts.row import Row
from pagedb.core.cursor import ResultCursor
from pagedb.core.mapping import RowMapper
from pagedb.core.resources import close_quietly, database_errors

T = TypeVar("T")
R = TypeVar("R")

MAX_RESULTS_UNLIMITED = -1


class PreparedStatement:
    """A parameterized SQL statement bound to one connection.

    Parameters use SQLAlchemy named-bind syntax (``:name``).
    """

    def __init__(
        self,
        connection: Connection,
        sql: str,
        cursor_mode: CursorMode = CursorMode.FORWARD_ONLY,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        self._connection = connection
        self.sql = sql
        self.cursor_mode = cursor_mode
        self.parameters: dict[str, Any] = dict(parameters or {})
        self.fetch_size = 0  # 0 = driver default
        self._clause: TextClause | None = text(sql)

    @property
    def clause(self) -> TextClause:
        """The compiled SQLAlchemy text clause."""
        if self._clause is None:
            raise DatabaseError("Statement is closed")
        return self._clause

    @property
    def closed(self) -> bool:
        return self._clause is None

    def execute_query(self) -> CursorResult[Any]:
        """Execute as a row-returning statement."""
        clause = self.clause
        with database_errors("Statement execution"):
            result = self._connection.execute(clause, self.parameters)
            if self.fetch_size > 0 and self.cursor_mode is CursorMode.FORWARD_ONLY:
                result = result.yield_per(self.fetch_size)
        return result

    def execute_update(self) -> int:
        """Execute as a mutation and return the affected-row count."""
        clause = self.clause
        with database_errors("Update execution"):
            result = self._connection.execute(clause, self.parameters)
            try:
                return result.rowcount
            finally:
                result.close()

    def close(self) -> None:
        self._clause = None
        self.parameters = {}


class Query:
    """Wraps a PreparedStatement and, once executed, a ResultCursor.

    Pagination (``first_result`` / ``max_results``) only applies to the first
    result materialization. The typed record list is computed at most once
    and cached.
    """

    def __init__(self, statement: PreparedStatement) -> None:
        self._statement = statement
        self._cursor: ResultCursor | None = None
        self._result_list: list[Any] | None = None
        self._list_attempted = False
        self._first_result = 0
        self._max_results = MAX_RESULTS_UNLIMITED

    @property
    def first_result(self) -> int:
        return self._first_result

    @property
    def max_results(self) -> int:
        return self._max_results

    @property
    def parameters(self) -> dict[str, Any]:
        return self._statement.parameters

    def set_first_result(self, first_result: int) -> None:
        """Set the 0-based offset of the first row returned."""
        if first_result < 0:
            raise ValueError(f"first_result must be >= 0, got {first_result}")
        self._first_result = first_result

    def set_max_results(self, max_results: int) -> None:
        """Set the row-count cap; MAX_RESULTS_UNLIMITED disables it."""
        if max_results < MAX_RESULTS_UNLIMITED:
            raise ValueError(f"max_results must be >= -1, got {max_results}")
        self._max_results = max_results

    def set_parameter(self, name: str, value: Any) -> None:
        self._statement.parameters[name] = value

    def set_parameters(self, **values: Any) -> None:
        self._statement.parameters.update(values)

    def _check_cursor(self) -> ResultCursor:
        if self._cursor is None:
            if self._max_results != MAX_RESULTS_UNLIMITED:
                self._statement.fetch_size = self._max_results
            result = self._statement.execute_query()
            self._cursor = ResultCursor(result, self._statement.cursor_mode)
        return self._cursor

    def _move_to_first_result(self, cursor: ResultCursor) -> None:
        if cursor.mode is CursorMode.SCROLLABLE:
            cursor.absolute(self._first_result)
            return
        # Forward-only: discard rows until positioned before first_result
        missing = self._first_result - cursor.row_number
        if missing > 0:
            cursor.skip(missing)

    def _materialize(self, convert: Callable[[Any], R]) -> list[R]:
        cursor = self._check_cursor()
        self._move_to_first_result(cursor)
        items: list[R] = []
        limit = self._max_results
        while limit != 0:
            values = cursor.next()
            if values is None:
                break
            items.append(convert(values))
            limit -= 1
        return items

    @overload
    def get_result_list(self) -> list[Row]: ...

    @overload
    def get_result_list(self, record_type: type[T]) -> list[T]: ...

    def get_result_list(self, record_type: type[Any] | None = None) -> list[Any]:
        """Return the page of results.

        With a ``record_type``, rows are mapped to records of that type; the
        list is cached and every later call returns the same list object.
        Without one, a fresh list of schema-less Row values is built on each
        call; a forward-only cursor continues from its current position.

        Raises:
            DatabaseError: If execution or cursor positioning fails, or a
                forward-only list is requested again after a failed attempt
            MappingError: If a column value cannot be assigned
        """
        if record_type is None:
            return self._materialize(Row.from_values)
        if self._result_list is not None:
            return self._result_list
        if self._list_attempted and self._statement.cursor_mode is CursorMode.FORWARD_ONLY:
            # Rows consumed by the failed attempt cannot be re-read
            raise DatabaseError("Result list materialization already failed")
        cursor = self._check_cursor()
        mapper = RowMapper(record_type, cursor.column_labels)
        self._list_attempted = True
        self._result_list = self._materialize(mapper.map_row)
        return self._result_list

    def update(self) -> int:
        """Execute the statement as INSERT/UPDATE/DELETE; return the row count."""
        return self._statement.execute_update()

    def get_result_count(self) -> int:
        """Total number of rows matched by the statement.

        ``first_result`` and ``max_results`` are ignored.
        """
        return self._check_cursor().last()

    def get_result_set(self) -> ResultCursor:
        """The underlying result cursor, executing the statement if needed."""
        return self._check_cursor()

    def get_statement(self) -> PreparedStatement:
        return self._statement

    def close(self) -> None:
        """Close the cursor then the statement. Never raises."""
        close_quietly(cursor=self._cursor, statement=self._statement)
