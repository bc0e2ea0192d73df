"""
Database object types that generators are matched against.

The snapshot / diff subsystem produces instances of these classes; the
dispatcher only ever looks at ``type(obj)``. Generators declare applicability
through ``priority(object_type, database)`` and cross-type ordering through
``run_after_types()`` / ``run_before_types()``, both expressed in terms of
these classes.

Third-party object types subclass :class:`DatabaseObject` and may be made
resolvable by name with :func:`register_object_type`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from changegen.core.errors import UnknownObjectTypeError


@dataclass(eq=False)
class DatabaseObject:
    """Base class for every object found in a schema snapshot."""

    name: str | None = None

    @classmethod
    def object_type_name(cls) -> str:
        return cls.__name__

    def __str__(self) -> str:
        return f"{self.object_type_name()}({self.name})"


@dataclass(eq=False)
class Catalog(DatabaseObject):
    pass


@dataclass(eq=False)
class Schema(DatabaseObject):
    catalog: Catalog | None = None


@dataclass(eq=False)
class Relation(DatabaseObject):
    """Tables and views: anything with columns."""

    schema: Schema | None = None
    columns: list[Column] = field(default_factory=list)
    remarks: str | None = None


@dataclass(eq=False)
class Table(Relation):
    tablespace: str | None = None


@dataclass(eq=False)
class View(Relation):
    definition: str | None = None


@dataclass(eq=False)
class Column(DatabaseObject):
    relation: Relation | None = None
    data_type: str | None = None
    nullable: bool = True
    default_value: object | None = None


@dataclass(eq=False)
class PrimaryKey(DatabaseObject):
    table: Table | None = None
    columns: list[str] = field(default_factory=list)


@dataclass(eq=False)
class UniqueConstraint(DatabaseObject):
    table: Table | None = None
    columns: list[str] = field(default_factory=list)


@dataclass(eq=False)
class ForeignKey(DatabaseObject):
    foreign_key_table: Table | None = None
    foreign_key_columns: list[str] = field(default_factory=list)
    primary_key_table: Table | None = None
    primary_key_columns: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Index(DatabaseObject):
    table: Table | None = None
    columns: list[str] = field(default_factory=list)
    unique: bool = False


@dataclass(eq=False)
class Sequence(DatabaseObject):
    schema: Schema | None = None
    start_value: int | None = None
    increment_by: int | None = None


@dataclass(eq=False)
class StoredProcedure(DatabaseObject):
    schema: Schema | None = None
    body: str | None = None


@dataclass(eq=False)
class Data(DatabaseObject):
    """Row data of a table, compared when data diffing is enabled."""

    table: Table | None = None


# =========================================================================
# Name lookup
# =========================================================================


def _type_key(name: str) -> str:
    return name.strip().lower().replace("_", "").replace("-", "")


_OBJECT_TYPES: dict[str, type[DatabaseObject]] = {
    _type_key(cls.__name__): cls
    for cls in (
        Catalog,
        Schema,
        Table,
        View,
        Column,
        PrimaryKey,
        UniqueConstraint,
        ForeignKey,
        Index,
        Sequence,
        StoredProcedure,
        Data,
    )
}


def resolve_object_type(name: str) -> type[DatabaseObject]:
    """Resolve a case-insensitive type name (``"table"``, ``"PrimaryKey"``) to its class."""
    key = _type_key(name)
    if key not in _OBJECT_TYPES:
        raise UnknownObjectTypeError(name)
    return _OBJECT_TYPES[key]


def register_object_type(object_type: type[DatabaseObject]) -> type[DatabaseObject]:
    """Make a custom DatabaseObject subclass resolvable by name (usable as a decorator)."""
    if not (isinstance(object_type, type) and issubclass(object_type, DatabaseObject)):
        raise TypeError(f"Expected a DatabaseObject subclass, got {object_type!r}")
    _OBJECT_TYPES[_type_key(object_type.__name__)] = object_type
    return object_type


def object_type_names() -> list[str]:
    """Names of all resolvable object types, sorted."""
    return sorted(cls.__name__ for cls in _OBJECT_TYPES.values())


__all__ = [
    "DatabaseObject",
    "Catalog",
    "Schema",
    "Relation",
    "Table",
    "View",
    "Column",
    "PrimaryKey",
    "UniqueConstraint",
    "ForeignKey",
    "Index",
    "Sequence",
    "StoredProcedure",
    "Data",
    "resolve_object_type",
    "register_object_type",
    "object_type_names",
]
