"""Error types raised by the query and paging layers."""

from pagedb.contracts.enums import ErrorKind


class PagedbError(Exception):
    """Base class for all pagedb failures."""

    kind: ErrorKind = ErrorKind.EXECUTION


class DatabaseError(PagedbError):
    """Connection, statement or cursor failure.

    Wraps the driver/SQLAlchemy exception, available as ``__cause__``.
    Never retried by this layer.
    """

    kind = ErrorKind.EXECUTION


class MappingError(PagedbError):
    """A column value could not be assigned to a record property.

    Aborts the whole result list being built.
    """

    kind = ErrorKind.MAPPING

    def __init__(self, column_index: int, property_name: str, value_type: type) -> None:
        self.column_index = column_index
        self.property_name = property_name
        self.value_type = value_type
        super().__init__(
            f"Error on column {column_index} property {property_name!r} "
            f"value type is {value_type.__name__}"
        )
