"""
Priority ordering of candidate generators.

For a fixed ``(object_type, database)`` pair, candidates are ordered by
priority (highest first) and then by registration sequence (earliest
first). The sequence is unique per registration, so two distinct
registrations never compare equal and a sort never merges or drops one of
them, even when the same generator class is registered twice.

Example::

    comparator = PriorityComparator(Table, Database.of("postgresql"))
    ranked = comparator.rank(registrations)      # list[RankedGenerator]
    [r.generator for r in ranked if r.priority > 0]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from changegen.core.database import Database
from changegen.core.structure import DatabaseObject
from changegen.generators.base import ChangeGenerator

if TYPE_CHECKING:
    from changegen.generators.registry import Registration


@dataclass(frozen=True)
class RankedGenerator:
    """A generator with the priority it reported for one query."""

    generator: ChangeGenerator
    priority: int
    sequence: int

    @property
    def sort_key(self) -> tuple[int, int]:
        return (-self.priority, self.sequence)


class PriorityComparator:
    """Total order over registrations for one ``(object_type, database)``."""

    def __init__(self, object_type: type[DatabaseObject], database: Database) -> None:
        self.object_type = object_type
        self.database = database

    def ranked(self, registration: Registration) -> RankedGenerator:
        return RankedGenerator(
            generator=registration.generator,
            priority=registration.generator.priority(self.object_type, self.database),
            sequence=registration.sequence,
        )

    def sort_key(self, registration: Registration) -> tuple[int, int]:
        return self.ranked(registration).sort_key

    def compare(self, a: Registration, b: Registration) -> int:
        """-1 if ``a`` runs first, 1 if ``b`` does; 0 only for the same registration."""
        key_a, key_b = self.sort_key(a), self.sort_key(b)
        if key_a < key_b:
            return -1
        if key_a > key_b:
            return 1
        return 0

    def rank(
        self,
        registrations: Iterable[Registration],
        accept: Callable[[RankedGenerator], bool] | None = None,
    ) -> list[RankedGenerator]:
        """Score each registration once, keep those ``accept`` allows, and sort."""
        ranked = [self.ranked(registration) for registration in registrations]
        if accept is not None:
            ranked = [r for r in ranked if accept(r)]
        ranked.sort(key=lambda r: r.sort_key)
        return ranked


def priority_sort_key(
    object_type: type[DatabaseObject], database: Database
) -> Callable[[Registration], tuple[int, int]]:
    """Key function for ``sorted()`` over registrations."""
    return PriorityComparator(object_type, database).sort_key


__all__ = [
    "RankedGenerator",
    "PriorityComparator",
    "priority_sort_key",
]
