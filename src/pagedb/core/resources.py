"""Resource helpers: quiet release and driver error translation."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError

from pagedb.contracts.enums import ErrorKind
from pagedb.contracts.errors import DatabaseError

logger = structlog.get_logger(__name__)


class Closeable(Protocol):
    def close(self) -> None: ...


@contextmanager
def database_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy/driver failures as DatabaseError.

    Args:
        action: Short description used as the error message prefix
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise DatabaseError(f"{action} failed: {e}") from e


def close_quietly(
    cursor: Closeable | None = None,
    statement: Closeable | None = None,
    connection: Closeable | None = None,
) -> None:
    """Close each given resource, in cursor -> statement -> connection order.

    None arguments are skipped. A failure closing one resource is logged and
    suppressed, and does not prevent closing the ones after it.
    """
    for label, resource in (
        ("cursor", cursor),
        ("statement", statement),
        ("connection", connection),
    ):
        if resource is None:
            continue
        _close_one(label, resource)


def _close_one(label: str, resource: Any) -> None:
    try:
        if label == "connection":
            logger.debug("Closing database connection")
        resource.close()
    except Exception as e:
        # Cleanup must never fail the caller's operation
        logger.warning(
            "Resource close failed",
            resource=label,
            error_kind=ErrorKind.CLOSE.value,
            error=str(e),
        )
