"""Transaction: exclusive owner of one database connection.

A Transaction tracks every Query it prepares and closes them all before
releasing its connection. Always close it, preferably with ``with``:

    with factory.new_transaction(False, IsolationLevel.READ_COMMITTED) as tx:
        tx.update("UPDATE accounts SET status = 'closed' WHERE id = 1")
        tx.commit()
    # Queries and connection released here, no implicit commit or rollback
"""

from collections.abc import Mapping
from threading import Lock, RLock
from types import TracebackType
from typing import Any, Self

from sqlalchemy import Connection

from pagedb.contracts.enums import CursorMode, IsolationLevel
from pagedb.contracts.errors import DatabaseError
from pagedb.core.query import PreparedStatement, Query
from pagedb.core.resources import close_quietly, database_errors


class Transaction:
    """One connection plus the queries prepared on it.

    Mutating methods serialize on a per-instance lock. ``commit``,
    ``rollback`` and ``close`` then also take a connection lock, always in
    that order.
    """

    def __init__(
        self,
        connection: Connection,
        auto_commit: bool = True,
        isolation_level: IsolationLevel = IsolationLevel.NONE,
    ) -> None:
        """Take ownership of ``connection`` and configure it.

        Args:
            connection: SQLAlchemy connection, exclusively owned from now on
            auto_commit: Commit after every statement (AUTOCOMMIT isolation)
            isolation_level: Isolation level when auto_commit is disabled
        """
        self.auto_commit = auto_commit
        self.isolation_level = isolation_level
        self._lock = RLock()
        self._connection_lock = Lock()
        self._queries: set[Query] = set()
        with database_errors("Connection configuration"):
            if auto_commit:
                connection.execution_options(isolation_level="AUTOCOMMIT")
            elif isolation_level is not IsolationLevel.NONE:
                connection.execution_options(isolation_level=isolation_level.value)
        self._connection: Connection | None = connection

    @property
    def is_closed(self) -> bool:
        return self._connection is None

    @property
    def connection(self) -> Connection:
        """The owned connection, for callers needing raw access."""
        return self._require_connection()

    @property
    def queries(self) -> frozenset[Query]:
        """Snapshot of the queries currently owned."""
        with self._lock:
            return frozenset(self._queries)

    def _require_connection(self) -> Connection:
        connection = self._connection
        if connection is None:
            raise DatabaseError("Transaction is closed")
        return connection

    def prepare(
        self,
        sql: str,
        cursor_mode: CursorMode = CursorMode.FORWARD_ONLY,
        parameters: Mapping[str, Any] | None = None,
    ) -> Query:
        """Create a new Query owned by this transaction.

        Args:
            sql: Native SQL, with ``:name`` parameter placeholders
            cursor_mode: FORWARD_ONLY skips rows to reach an offset,
                SCROLLABLE seeks directly
            parameters: Initial bind values

        Returns:
            A new Query, closed no later than this transaction
        """
        with self._lock:
            connection = self._require_connection()
            with database_errors("Statement preparation"):
                statement = PreparedStatement(connection, sql, cursor_mode, parameters)
            query = Query(statement)
            self._queries.add(query)
            return query

    def update(self, sql: str, parameters: Mapping[str, Any] | None = None) -> int:
        """Prepare and execute an INSERT/UPDATE/DELETE; return the row count."""
        return self.prepare(sql, parameters=parameters).update()

    def commit(self) -> None:
        with self._lock, self._connection_lock:
            connection = self._require_connection()
            with database_errors("Commit"):
                connection.commit()

    def rollback(self) -> None:
        with self._lock, self._connection_lock:
            connection = self._require_connection()
            with database_errors("Rollback"):
                connection.rollback()

    def close_query(self, query: Query) -> None:
        """Close one owned query before the transaction itself closes."""
        with self._lock:
            query.close()
            self._queries.discard(query)

    def _close_queries(self) -> None:
        with self._lock:
            for query in self._queries:
                query.close()
            self._queries.clear()

    def close(self) -> None:
        """Close all queries, then the connection.

        No commit or rollback is performed. Closing twice is a no-op, and
        close failures are logged rather than raised.
        """
        with self._lock:
            if self._connection is None:
                return
            with self._connection_lock:
                self._close_queries()
                close_quietly(connection=self._connection)
                self._connection = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
