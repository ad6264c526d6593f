"""Windowed, index-addressable view over a large query result.

PageDataModel caches one contiguous window of records. A table/grid
consumer moves a cursor one index at a time; when the cursor leaves the
cached window, the window is refetched through a fresh Transaction and a
Query supplied by the caller's query builder.

Example:
    def customers(tx: Transaction) -> Query:
        return tx.prepare("SELECT id, name FROM customers ORDER BY id")

    model = PageDataModel(factory, Customer, 25, customers)
    model.set_cursor(0)
    if model.is_row_available():
        first = model.get_current_record()
    total = model.get_row_count()
"""

from collections.abc import Iterator
from threading import RLock
from typing import Any, Generic, Protocol, TypeVar

import structlog

from pagedb.contracts.enums import IsolationLevel
from pagedb.core.connection import ConnectionFactory
from pagedb.core.query import Query
from pagedb.core.transaction import Transaction

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NO_CURSOR = -1


class QueryBuilder(Protocol):
    """Builds the Query for a page, bound to the given open transaction.

    Must not do anything beyond preparing the statement and binding its
    parameters. Pagination settings are applied by the caller.
    """

    def __call__(self, transaction: Transaction) -> Query: ...


class PageDataModel(Generic[T]):
    """Cache of one window of ``page_size`` records plus the total row count.

    Every method holds a single per-instance lock, so a window refresh
    (including its database round trip) blocks all other callers.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        record_type: type[T],
        page_size: int,
        query_builder: QueryBuilder,
        isolation_level: IsolationLevel = IsolationLevel.NONE,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")
        self._connection_factory = connection_factory
        self._record_type = record_type
        self._page_size = page_size
        self._query_builder = query_builder
        self._isolation_level = isolation_level
        self._lock = RLock()
        self._window_start = NO_CURSOR
        self._cursor = NO_CURSOR
        self._records: list[T] = []
        self._row_count = 0
        self._wrapped_data: Any = None

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def record_type(self) -> type[T]:
        return self._record_type

    @property
    def cursor(self) -> int:
        """Index selected by the consumer, NO_CURSOR if none."""
        with self._lock:
            return self._cursor

    @property
    def window_start(self) -> int:
        """Offset of the first cached record, NO_CURSOR if never populated."""
        with self._lock:
            return self._window_start

    @property
    def wrapped_data(self) -> Any:
        with self._lock:
            return self._wrapped_data

    @wrapped_data.setter
    def wrapped_data(self, data: Any) -> None:
        with self._lock:
            self._wrapped_data = data

    def _need_refresh(self, index: int) -> bool:
        if self._window_start == NO_CURSOR:
            return True
        return index < self._window_start or index >= self._window_start + self._page_size

    def get_row_count(self) -> int:
        """Total matching rows, as counted by the last refresh."""
        with self._lock:
            return self._row_count

    def get_current_record(self) -> T | None:
        """Record under the cursor, or None if it is not in the cached window."""
        with self._lock:
            if self._cursor == NO_CURSOR or self._window_start == NO_CURSOR:
                return None
            offset = self._cursor - self._window_start
            if not 0 <= offset < len(self._records):
                return None
            return self._records[offset]

    def is_row_available(self) -> bool:
        with self._lock:
            if self._need_refresh(self._cursor):
                return False
            offset = self._cursor - self._window_start
            return 0 <= offset < len(self._records)

    def set_cursor(self, index: int) -> None:
        """Select ``index``, refreshing the window if it falls outside.

        If the refresh fails, the previous cursor is restored and the error
        is raised.
        """
        with self._lock:
            previous = self._cursor
            self._cursor = index
            if index == NO_CURSOR:
                return
            if self._need_refresh(index):
                try:
                    self.populate(index)
                except Exception:
                    self._cursor = previous
                    raise

    def populate(self, index: int) -> None:
        """Load the window starting at ``index``.

        No-op when the window is already anchored at ``index``. The refresh
        transaction is closed whether or not loading succeeds, and the cached
        window only changes once records and count are both loaded.

        Raises:
            DatabaseError: If the connection or query fails
            MappingError: If a row cannot be mapped to ``record_type``
        """
        with self._lock:
            if index == self._window_start:
                return
            logger.debug(
                "Refreshing page window",
                record_type=self._record_type.__name__,
                start=index,
                page_size=self._page_size,
            )
            transaction = self._connection_factory.new_transaction(
                False, self._isolation_level
            )
            try:
                query = self._query_builder(transaction)
                query.set_first_result(index)
                query.set_max_results(self._page_size)
                records = query.get_result_list(self._record_type)
                row_count = query.get_result_count()
            finally:
                transaction.close()
            self._records = records
            self._row_count = row_count
            self._window_start = index

    def current_page_iterator(self) -> Iterator[T]:
        """Iterate over the currently cached window only."""
        with self._lock:
            return iter(list(self._records))
