"""
Generator contract and capability markers.

A generator is a plugin that turns one kind of schema difference into
corrective :class:`~changegen.core.changes.Change` objects. It declares:

- **what it can fix**, by subclassing one or more capability markers
  (:class:`MissingObjectChangeGenerator`, :class:`UnexpectedObjectChangeGenerator`,
  :class:`ChangedObjectChangeGenerator`);
- **when it applies**, through ``priority(object_type, database)``; a value of
  ``0`` or less means "not applicable";
- **how it orders against other types**, through ``run_after_types()`` and
  ``run_before_types()``.

Example::

    class MissingTableGenerator(MissingObjectChangeGenerator):
        def priority(self, object_type, database):
            if issubclass(object_type, Table):
                return PRIORITY_DEFAULT
            return PRIORITY_NONE

        def run_before_types(self):
            return (Column, PrimaryKey, Index)

        def fix_missing(self, obj, control, reference_db, comparison_db, chain):
            return [Change("createTable", {"table": obj.name})]

A generator receives the running :class:`~changegen.generators.chain.ChangeGeneratorChain`
as its last argument. Returning without touching the chain stops traversal;
returning ``own_changes + (chain.fix_missing(...) or [])`` accumulates;
returning ``chain.fix_missing(...)`` passes the request on unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from changegen.core.changes import Change
from changegen.core.database import Database
from changegen.core.diff import DiffOutputControl, ObjectDifferences
from changegen.core.structure import DatabaseObject

if TYPE_CHECKING:
    from changegen.generators.chain import ChangeGeneratorChain

PRIORITY_NONE = -1
PRIORITY_DEFAULT = 1
PRIORITY_DATABASE = 5
PRIORITY_ADDITIONAL = 50

ChangeList = Sequence[Change] | None
ObjectTypes = Sequence[type[DatabaseObject]] | None


class ChangeGenerator(ABC):
    """Base class of every generator."""

    @abstractmethod
    def priority(self, object_type: type[DatabaseObject], database: Database) -> int:
        """Priority for ``object_type`` on ``database``; ``<= 0`` means not applicable."""

    def run_after_types(self) -> ObjectTypes:
        """Object types whose changes must be generated before this generator's."""
        return None

    def run_before_types(self) -> ObjectTypes:
        """Object types whose changes must be generated after this generator's."""
        return None

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"<{self.name}>"


class MissingObjectChangeGenerator(ChangeGenerator):
    """Fixes objects present in the reference database but missing from the comparison."""

    @abstractmethod
    def fix_missing(
        self,
        missing_object: DatabaseObject,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
        chain: ChangeGeneratorChain,
    ) -> ChangeList:
        ...


class UnexpectedObjectChangeGenerator(ChangeGenerator):
    """Fixes objects present in the comparison database but absent from the reference."""

    @abstractmethod
    def fix_unexpected(
        self,
        unexpected_object: DatabaseObject,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
        chain: ChangeGeneratorChain,
    ) -> ChangeList:
        ...


class ChangedObjectChangeGenerator(ChangeGenerator):
    """Fixes objects present in both databases whose attributes differ."""

    @abstractmethod
    def fix_changed(
        self,
        changed_object: DatabaseObject,
        differences: ObjectDifferences,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
        chain: ChangeGeneratorChain,
    ) -> ChangeList:
        ...


class Capability(str, Enum):
    """Capability markers by name."""

    MISSING = "missing"
    UNEXPECTED = "unexpected"
    CHANGED = "changed"

    @property
    def marker(self) -> type[ChangeGenerator]:
        return _MARKERS[self]

    @classmethod
    def parse(cls, value: Capability | str | type[ChangeGenerator]) -> Capability:
        """Accept a Capability, its name (``"missing"``), or its marker class."""
        if isinstance(value, Capability):
            return value
        if isinstance(value, type):
            for capability, marker in _MARKERS.items():
                if value is marker:
                    return capability
            raise ValueError(f"{value.__name__} is not a capability marker")
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown capability {value!r}. Choose from: {choices}") from None


_MARKERS: dict[Capability, type[ChangeGenerator]] = {
    Capability.MISSING: MissingObjectChangeGenerator,
    Capability.UNEXPECTED: UnexpectedObjectChangeGenerator,
    Capability.CHANGED: ChangedObjectChangeGenerator,
}

CAPABILITY_MARKERS: tuple[type[ChangeGenerator], ...] = tuple(_MARKERS.values())


def capabilities_of(generator: ChangeGenerator | type[ChangeGenerator]) -> list[Capability]:
    """Capabilities a generator (instance or class) implements, in marker order."""
    cls = generator if isinstance(generator, type) else type(generator)
    return [capability for capability, marker in _MARKERS.items() if issubclass(cls, marker)]


__all__ = [
    "PRIORITY_NONE",
    "PRIORITY_DEFAULT",
    "PRIORITY_DATABASE",
    "PRIORITY_ADDITIONAL",
    "ChangeGenerator",
    "MissingObjectChangeGenerator",
    "UnexpectedObjectChangeGenerator",
    "ChangedObjectChangeGenerator",
    "Capability",
    "CAPABILITY_MARKERS",
    "capabilities_of",
]
