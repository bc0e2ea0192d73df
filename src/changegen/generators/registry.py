"""Generator Registry: registration, candidate selection, and ordering hints.

Manifesto:
A diff produces thousands of objects, each of which needs the right
generator. The registry holds every registered generator and answers one
question quickly and deterministically: *which generators can fix this
kind of object on this database, and in what order?*

ARCHITECTURE
────────────
::

    register(generator)                      → appends (no dedup)
    unregister(generator)                    → removes first identity match
    unregister_type(cls)                     → removes last instance of exactly cls
    select_candidates(capability, type, db)  → list, priority desc
    run_after_types(type, db)                → frozenset of types
    run_before_types(type, db)               → frozenset of types

Each registration gets a sequence number. Candidate ordering is
``(-priority, sequence)``, so equal priorities keep registration order and
nothing is ever dropped.

Mutations and snapshots share one lock; filtering and sorting happen on a
copy outside it, so a query never sees a register/unregister half-way.

Related modules:
    comparator.py: the ordering used by select_candidates
    factory.py: owns a registry and drives chains over it

Tags:
    changegen, registry, plugins, priority

Doc-Types:
    api-reference
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator
from dataclasses import dataclass

from changegen.core.database import Database
from changegen.core.errors import InvalidGeneratorError
from changegen.core.logging import get_logger
from changegen.core.structure import DatabaseObject
from changegen.generators.base import (
    CAPABILITY_MARKERS,
    Capability,
    ChangeGenerator,
)
from changegen.generators.comparator import PriorityComparator, RankedGenerator

logger = get_logger(__name__)


@dataclass(frozen=True)
class Registration:
    """A registered generator and its registration sequence."""

    generator: ChangeGenerator
    sequence: int


class GeneratorRegistry:
    """Collection of registered generators."""

    def __init__(self) -> None:
        self._registrations: list[Registration] = []
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, generator: ChangeGenerator) -> ChangeGenerator:
        """Append a generator. Registering the same type twice is allowed."""
        if not isinstance(generator, ChangeGenerator):
            raise InvalidGeneratorError(
                f"Expected a ChangeGenerator, got {type(generator).__name__}"
            ).with_context(generator=type(generator).__name__)

        with self._lock:
            registration = Registration(generator, next(self._sequence))
            self._registrations.append(registration)

        logger.debug(
            "generator_registered",
            generator=generator.name,
            sequence=registration.sequence,
        )
        return generator

    def unregister(self, generator: ChangeGenerator | type[ChangeGenerator] | None) -> None:
        """Remove the first registration of this exact instance; no-op if absent.

        Passing a class delegates to :meth:`unregister_type`.
        """
        if isinstance(generator, type):
            self.unregister_type(generator)
            return
        if generator is None:
            return

        with self._lock:
            for index, registration in enumerate(self._registrations):
                if registration.generator is generator:
                    del self._registrations[index]
                    break
            else:
                return

        logger.debug("generator_unregistered", generator=generator.name)

    def unregister_type(self, generator_type: type[ChangeGenerator]) -> None:
        """Remove the most recently registered instance whose type is exactly ``generator_type``.

        Subclasses do not match. No match is a no-op.
        """
        with self._lock:
            match = None
            for registration in self._registrations:
                if type(registration.generator) is generator_type:
                    match = registration.generator
            if match is not None:
                self.unregister(match)
                return

        logger.debug(
            "generator_unregister_no_match",
            generator_type=getattr(generator_type, "__name__", repr(generator_type)),
        )

    def clear(self) -> None:
        with self._lock:
            self._registrations.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def registrations(self) -> tuple[Registration, ...]:
        """Snapshot of all registrations in registration order."""
        with self._lock:
            return tuple(self._registrations)

    def generators(self) -> tuple[ChangeGenerator, ...]:
        """Snapshot of all generators in registration order."""
        return tuple(r.generator for r in self.registrations())

    def rank_candidates(
        self,
        capability: Capability | str | type[ChangeGenerator],
        object_type: type[DatabaseObject],
        database: Database,
    ) -> list[RankedGenerator]:
        """Applicable generators with their priorities, best first."""
        marker = Capability.parse(capability).marker
        snapshot = [r for r in self.registrations() if isinstance(r.generator, marker)]
        comparator = PriorityComparator(object_type, database)
        return comparator.rank(snapshot, accept=lambda r: r.priority > 0)

    def select_candidates(
        self,
        capability: Capability | str | type[ChangeGenerator],
        object_type: type[DatabaseObject],
        database: Database,
    ) -> list[ChangeGenerator]:
        """Generators implementing ``capability`` with positive priority, best first."""
        ranked = self.rank_candidates(capability, object_type, database)
        logger.debug(
            "candidates_selected",
            capability=Capability.parse(capability).value,
            object_type=object_type.__name__,
            database=database.short_name,
            candidates=[r.generator.name for r in ranked],
        )
        return [r.generator for r in ranked]

    def run_after_types(
        self, object_type: type[DatabaseObject], database: Database
    ) -> frozenset[type[DatabaseObject]]:
        """Union of ``run_after_types()`` across every applicable generator."""
        return self._ordering_types(object_type, database, after=True)

    def run_before_types(
        self, object_type: type[DatabaseObject], database: Database
    ) -> frozenset[type[DatabaseObject]]:
        """Union of ``run_before_types()`` across every applicable generator."""
        return self._ordering_types(object_type, database, after=False)

    def _ordering_types(
        self, object_type: type[DatabaseObject], database: Database, *, after: bool
    ) -> frozenset[type[DatabaseObject]]:
        types: set[type[DatabaseObject]] = set()
        for marker in CAPABILITY_MARKERS:
            for generator in self.select_candidates(marker, object_type, database):
                declared = generator.run_after_types() if after else generator.run_before_types()
                if declared:
                    types.update(declared)
        return frozenset(types)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.registrations())

    def __iter__(self) -> Iterator[ChangeGenerator]:
        return iter(self.generators())

    def __contains__(self, generator: object) -> bool:
        return any(g is generator for g in self.generators())

    def __repr__(self) -> str:
        return f"GeneratorRegistry({len(self)} generators)"


__all__ = [
    "Registration",
    "GeneratorRegistry",
]
