"""Modes, levels and kinds shared across the query and paging layers."""

from enum import Enum


class CursorMode(str, Enum):
    """How a query's result cursor may be positioned.

    FORWARD_ONLY cursors are advanced row by row, so pagination offsets are
    applied by discarding rows. SCROLLABLE cursors buffer the result and
    support absolute positioning.
    """

    FORWARD_ONLY = "forward_only"
    SCROLLABLE = "scrollable"


class IsolationLevel(str, Enum):
    """Transaction isolation level applied to a new connection.

    Values are the names SQLAlchemy accepts for the ``isolation_level``
    execution option. NONE leaves the driver default in place.
    """

    NONE = "NONE"
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class ErrorKind(str, Enum):
    """Category of a failure raised (or logged) by this layer.

    CLOSE failures are only ever logged, never raised.
    """

    EXECUTION = "execution"
    MAPPING = "mapping"
    CLOSE = "close"
