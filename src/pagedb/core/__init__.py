"""Core data access: connections, transactions, queries and paging."""

from pagedb.core.connection import (
    ConnectionFactory,
    EngineConnectionFactory,
    UrlConnectionFactory,
)
from pagedb.core.cursor import ResultCursor
from pagedb.core.mapping import RowMapper, register_record
from pagedb.core.paging import NO_CURSOR, PageDataModel, QueryBuilder
from pagedb.core.query import MAX_RESULTS_UNLIMITED, PreparedStatement, Query
from pagedb.core.transaction import Transaction

__all__ = [
    "MAX_RESULTS_UNLIMITED",
    "NO_CURSOR",
    "ConnectionFactory",
    "EngineConnectionFactory",
    "PageDataModel",
    "PreparedStatement",
    "Query",
    "QueryBuilder",
    "ResultCursor",
    "RowMapper",
    "Transaction",
    "UrlConnectionFactory",
    "register_record",
]
