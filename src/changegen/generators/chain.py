"""
Single-pass execution over an ordered candidate set.

A chain is built for one request, from the candidates the registry selected
for one ``(capability, object_type, database)`` query. Each ``fix_*`` call
advances the cursor by one and invokes that generator, passing the chain
along so the generator can hand the request on::

    CREATED ──fix_*()──▶ RUNNING ──cursor past end──▶ EXHAUSTED

Once exhausted, every ``fix_*`` call returns ``None``. Exceptions raised by
a generator are not caught here; they abort the request.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum

from changegen.core.changes import Change
from changegen.core.database import Database
from changegen.core.diff import DiffOutputControl, ObjectDifferences
from changegen.core.logging import get_logger
from changegen.core.structure import DatabaseObject
from changegen.generators.base import (
    Capability,
    ChangeGenerator,
)

logger = get_logger(__name__)


class ChainState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    EXHAUSTED = "exhausted"


def _normalize(changes: Sequence[Change] | None) -> list[Change] | None:
    if not changes:
        return None
    return list(changes)


class ChangeGeneratorChain:
    """Cursor over an ordered, non-empty list of generators."""

    def __init__(
        self,
        generators: Iterable[ChangeGenerator],
        capability: Capability | None = None,
    ) -> None:
        self._generators = list(generators)
        if not self._generators:
            raise ValueError("A generator chain needs at least one generator")
        self._capability = capability
        self._position = 0

    @property
    def state(self) -> ChainState:
        if self._position == 0:
            return ChainState.CREATED
        if self._position >= len(self._generators):
            return ChainState.EXHAUSTED
        return ChainState.RUNNING

    @property
    def generators(self) -> tuple[ChangeGenerator, ...]:
        return tuple(self._generators)

    @property
    def remaining(self) -> int:
        return len(self._generators) - self._position

    def _advance(self, capability: Capability) -> ChangeGenerator | None:
        if self._capability is not None and capability is not self._capability:
            raise ValueError(
                f"Chain was built for {self._capability.value!r} generators, "
                f"cannot fix {capability.value!r}"
            )
        if self._position >= len(self._generators):
            logger.debug("chain_exhausted", capability=capability.value)
            return None
        generator = self._generators[self._position]
        self._position += 1
        logger.debug(
            "chain_invoking_generator",
            capability=capability.value,
            generator=generator.name,
            position=self._position,
        )
        return generator

    def fix_missing(
        self,
        missing_object: DatabaseObject | None,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        if missing_object is None:
            return None
        generator = self._advance(Capability.MISSING)
        if generator is None:
            return None
        return _normalize(
            generator.fix_missing(missing_object, control, reference_db, comparison_db, self)
        )

    def fix_unexpected(
        self,
        unexpected_object: DatabaseObject | None,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        if unexpected_object is None:
            return None
        generator = self._advance(Capability.UNEXPECTED)
        if generator is None:
            return None
        return _normalize(
            generator.fix_unexpected(unexpected_object, control, reference_db, comparison_db, self)
        )

    def fix_changed(
        self,
        changed_object: DatabaseObject | None,
        differences: ObjectDifferences,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        if changed_object is None:
            return None
        generator = self._advance(Capability.CHANGED)
        if generator is None:
            return None
        return _normalize(
            generator.fix_changed(
                changed_object, differences, control, reference_db, comparison_db, self
            )
        )

    def __repr__(self) -> str:
        names = ", ".join(g.name for g in self._generators)
        return f"ChangeGeneratorChain([{names}], state={self.state.value})"


__all__ = [
    "ChainState",
    "ChangeGeneratorChain",
]
