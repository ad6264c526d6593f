"""Column-to-property binding for typed record materialization.

A record type exposes writable properties. For a given result schema (the
ordered column labels), a binding table pairs each column with the first
property whose name matches the label case-insensitively. Columns without a
matching property get no entry; properties without a matching column are
never touched and keep their default value.

Writable properties are discovered, in declaration order with base classes
first, from:
- pydantic ``BaseModel.model_fields``
- dataclass fields
- class annotations
- ``property`` objects that define a setter

``register_record()`` replaces discovery with an explicit setter table.

Binding tables are built once per (record type, column labels) pair and
reused across queries.
"""

import dataclasses
import inspect
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Any, ClassVar, Generic, TypeVar, get_origin

import structlog
from pydantic import BaseModel

from pagedb.contracts.errors import MappingError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Setter = Callable[[Any, Any], None]


@dataclass(frozen=True)
class PropertyDescriptor:
    """A writable property of a record type."""

    name: str
    setter: Setter


@dataclass(frozen=True)
class ColumnBinding:
    """One binding table entry: 0-based column index to property setter."""

    column_index: int
    property_name: str
    setter: Setter


_registry: dict[type, tuple[PropertyDescriptor, ...]] = {}
_registry_lock = Lock()


def _attribute_setter(name: str) -> Setter:
    def setter(record: Any, value: Any) -> None:
        setattr(record, name, value)

    setter.__name__ = f"set_{name}"
    return setter


def register_record(record_type: type, setters: Mapping[str, Setter]) -> None:
    """Register explicit property setters for ``record_type``.

    Registered setters take precedence over discovered properties. Order of
    ``setters`` is the tie-break order for case-insensitive matches.
    """
    descriptors = tuple(
        PropertyDescriptor(name, setter) for name, setter in setters.items()
    )
    with _registry_lock:
        _registry[record_type] = descriptors
    # Tables built from discovered properties are now stale
    _property_descriptors.cache_clear()
    _binding_table.cache_clear()


def _is_class_var(annotation: Any) -> bool:
    if annotation is ClassVar or get_origin(annotation) is ClassVar:
        return True
    return isinstance(annotation, str) and annotation.startswith(("ClassVar", "typing.ClassVar"))


def _discover_names(record_type: type) -> Iterable[str]:
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        yield from record_type.model_fields
        return
    if dataclasses.is_dataclass(record_type):
        for field in dataclasses.fields(record_type):
            yield field.name
    for klass in reversed(record_type.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if not _is_class_var(annotation):
                yield name
        for name, member in vars(klass).items():
            if isinstance(member, property) and member.fset is not None:
                yield name


@lru_cache(maxsize=None)
def _property_descriptors(record_type: type) -> tuple[PropertyDescriptor, ...]:
    registered = _registry.get(record_type)
    if registered is not None:
        return registered
    seen: set[str] = set()
    descriptors = []
    for name in _discover_names(record_type):
        if name.startswith("_") or name in seen:
            continue
        seen.add(name)
        descriptors.append(PropertyDescriptor(name, _attribute_setter(name)))
    return tuple(descriptors)


@lru_cache(maxsize=256)
def _binding_table(record_type: type, labels: tuple[str, ...]) -> tuple[ColumnBinding, ...]:
    descriptors = _property_descriptors(record_type)
    logger.debug("Search properties for record", record_type=record_type.__name__)
    bindings = []
    for column_index, label in enumerate(labels):
        wanted = label.casefold()
        for descriptor in descriptors:
            if descriptor.name.casefold() == wanted:
                bindings.append(
                    ColumnBinding(column_index, descriptor.name, descriptor.setter)
                )
                logger.debug(
                    "Found property for column",
                    property=descriptor.name,
                    column=label,
                )
                break
    return tuple(bindings)


class RowMapper(Generic[T]):
    """Materializes rows of one result schema into ``record_type`` instances.

    Example:
        mapper = RowMapper(Customer, ("ID", "Name", "Extra"))
        customer = mapper.map_row((1, "Ada", "ignored"))
    """

    def __init__(self, record_type: type[T], column_labels: Sequence[str]) -> None:
        self.record_type = record_type
        self.bindings = _binding_table(record_type, tuple(column_labels))

    def map_row(self, values: Sequence[Any]) -> T:
        """Build one record from positional column values.

        None values leave the property at its default.

        Raises:
            MappingError: If a setter rejects a value
        """
        record = self.record_type()
        for binding in self.bindings:
            value = values[binding.column_index]
            if value is None:
                continue
            try:
                binding.setter(record, value)
            except Exception as e:
                raise MappingError(
                    binding.column_index, binding.property_name, type(value)
                ) from e
        return record
