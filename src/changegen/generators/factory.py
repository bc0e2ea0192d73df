"""
Change generator factory: the dispatch entry point.

A :class:`ChangeGeneratorFactory` is an explicit context object that owns
one :class:`~changegen.generators.registry.GeneratorRegistry`, populated from
a :class:`~changegen.generators.discovery.GeneratorDiscovery` when the
factory is constructed. There is no process-wide instance: callers build a
factory at start-up and pass it to whatever turns a diff into a changelog.

Manifesto:
    Turning a diff into changes is a dispatch problem. For every missing,
    unexpected, or changed object the factory picks the generators that
    apply, orders them by priority, and runs them as a chain. When none
    apply it says so with ``None`` instead of raising: whether that is an
    error is the caller's decision.

Architecture:
    ::

        ChangeGeneratorFactory(discovery, settings)
            │  discovery.load() ── failure ──▶ GeneratorDiscoveryError (fatal)
            ▼
        GeneratorRegistry
            │  select_candidates(capability, type(obj), reference_db)
            ▼
        [] ──▶ None                 [g1, g2, …] ──▶ ChangeGeneratorChain
                                                        │ fix_*(…)
                                                        ▼
                                                  list[Change] | None

Examples:
    >>> factory = ChangeGeneratorFactory(discovery, settings)
    >>> changes = factory.fix_missing(table, DiffOutputControl(), reference, comparison)
    >>> factory.run_before_types(Table, reference)
    frozenset({<class 'changegen.core.structure.Column'>, ...})

Guardrails:
    ❌ DON'T: Cache candidate lists between requests
    ✅ DO: Let each request select and sort afresh

    ❌ DON'T: Catch generator exceptions to keep going
    ✅ DO: Let them abort the request

Tags:
    changegen, factory, dispatch, chain-of-responsibility

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from changegen.core.changes import Change
from changegen.core.database import Database
from changegen.core.diff import DiffOutputControl, ObjectDifferences
from changegen.core.errors import GeneratorDiscoveryError
from changegen.core.logging import get_logger
from changegen.core.settings import ChangeGenSettings, get_settings
from changegen.core.structure import DatabaseObject
from changegen.generators.base import Capability, ChangeGenerator
from changegen.generators.chain import ChangeGeneratorChain
from changegen.generators.comparator import RankedGenerator
from changegen.generators.discovery import GeneratorDiscovery, default_discovery
from changegen.generators.registry import GeneratorRegistry

logger = get_logger(__name__)


class ChangeGeneratorFactory:
    """Owns a generator registry and turns diff results into changes."""

    def __init__(
        self,
        discovery: GeneratorDiscovery | None = None,
        settings: ChangeGenSettings | None = None,
    ) -> None:
        self._discovery = discovery if discovery is not None else default_discovery()
        self._settings = settings if settings is not None else get_settings()
        self._registry = self._build_registry()

    def _build_registry(self) -> GeneratorRegistry:
        try:
            generators = self._discovery.load(self._settings)
        except GeneratorDiscoveryError as exc:
            logger.error("discovery_failed", **exc.to_dict())
            raise
        except Exception as exc:
            logger.error("discovery_failed", error=str(exc))
            raise GeneratorDiscoveryError(f"Generator discovery failed: {exc}", cause=exc) from exc

        registry = GeneratorRegistry()
        for generator in generators:
            registry.register(generator)
        return registry

    @property
    def registry(self) -> GeneratorRegistry:
        return self._registry

    @property
    def settings(self) -> ChangeGenSettings:
        return self._settings

    @property
    def discovery(self) -> GeneratorDiscovery:
        return self._discovery

    # ── Lifecycle ────────────────────────────────────────────────

    def reset(self) -> ChangeGeneratorFactory:
        """A fresh factory from the same discovery and settings.

        Manual registrations and unregistrations made on this factory are
        not carried over. This factory is left untouched.
        """
        logger.debug("factory_reset", generators=len(self._registry))
        return type(self)(self._discovery, self._settings)

    # ── Registration ─────────────────────────────────────────────

    def register(self, generator: ChangeGenerator) -> ChangeGenerator:
        return self._registry.register(generator)

    def unregister(self, generator: ChangeGenerator | type[ChangeGenerator] | None) -> None:
        self._registry.unregister(generator)

    def unregister_type(self, generator_type: type[ChangeGenerator]) -> None:
        self._registry.unregister_type(generator_type)

    def generators(self) -> tuple[ChangeGenerator, ...]:
        return self._registry.generators()

    # ── Selection ────────────────────────────────────────────────

    def select_candidates(
        self,
        capability: Capability | str | type[ChangeGenerator],
        object_type: type[DatabaseObject],
        database: Database,
    ) -> list[ChangeGenerator]:
        return self._registry.select_candidates(capability, object_type, database)

    def rank_candidates(
        self,
        capability: Capability | str | type[ChangeGenerator],
        object_type: type[DatabaseObject],
        database: Database,
    ) -> list[RankedGenerator]:
        return self._registry.rank_candidates(capability, object_type, database)

    def _create_chain(
        self,
        capability: Capability,
        object_type: type[DatabaseObject],
        database: Database,
    ) -> ChangeGeneratorChain | None:
        candidates = self._registry.select_candidates(capability, object_type, database)
        if not candidates:
            logger.debug(
                "no_candidates",
                capability=capability.value,
                object_type=object_type.__name__,
                database=database.short_name,
            )
            return None
        return ChangeGeneratorChain(candidates, capability)

    # ── Fixes ────────────────────────────────────────────────────

    def fix_missing(
        self,
        missing_object: DatabaseObject,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        """Changes that create ``missing_object`` in the comparison database."""
        chain = self._create_chain(Capability.MISSING, type(missing_object), reference_db)
        if chain is None:
            return None
        return chain.fix_missing(missing_object, control, reference_db, comparison_db)

    def fix_unexpected(
        self,
        unexpected_object: DatabaseObject,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        """Changes that remove ``unexpected_object`` from the comparison database."""
        chain = self._create_chain(Capability.UNEXPECTED, type(unexpected_object), reference_db)
        if chain is None:
            return None
        return chain.fix_unexpected(unexpected_object, control, reference_db, comparison_db)

    def fix_changed(
        self,
        changed_object: DatabaseObject,
        differences: ObjectDifferences,
        control: DiffOutputControl,
        reference_db: Database,
        comparison_db: Database,
    ) -> list[Change] | None:
        """Changes that bring ``changed_object`` in line with the reference."""
        chain = self._create_chain(Capability.CHANGED, type(changed_object), reference_db)
        if chain is None:
            return None
        return chain.fix_changed(changed_object, differences, control, reference_db, comparison_db)

    # ── Ordering hints ───────────────────────────────────────────

    def run_after_types(
        self, object_type: type[DatabaseObject], database: Database
    ) -> frozenset[type[DatabaseObject]]:
        return self._registry.run_after_types(object_type, database)

    def run_before_types(
        self, object_type: type[DatabaseObject], database: Database
    ) -> frozenset[type[DatabaseObject]]:
        return self._registry.run_before_types(object_type, database)

    def __repr__(self) -> str:
        return f"ChangeGeneratorFactory({len(self._registry)} generators)"


__all__ = ["ChangeGeneratorFactory"]
