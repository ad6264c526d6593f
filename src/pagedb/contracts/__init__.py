"""Shared contracts for types that cross the query/paging boundary.

Import pattern:
    from pagedb.contracts import CursorMode, DatabaseError, Row
"""

from pagedb.contracts.enums import CursorMode, ErrorKind, IsolationLevel
from pagedb.contracts.errors import DatabaseError, MappingError, PagedbError
from pagedb.contracts.row import Row

__all__ = [
    # Enums
    "CursorMode",
    "ErrorKind",
    "IsolationLevel",
    # Errors
    "DatabaseError",
    "MappingError",
    "PagedbError",
    # Rows
    "Row",
]
