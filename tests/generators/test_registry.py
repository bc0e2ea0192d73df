"""
Tests for changegen.generators.registry.

Tests cover:
- Registration without deduplication
- Unregistering by instance and by type
- Candidate filtering and ordering
- Ordering hints (run-after / run-before unions)
"""

from __future__ import annotations

import threading

import pytest

from changegen.core.errors import InvalidGeneratorError
from changegen.core.database import Database, DatabaseType
from changegen.core.structure import Column, ForeignKey, Index, PrimaryKey, Table, View
from changegen.generators.base import (
    Capability,
    ChangedObjectChangeGenerator,
    MissingObjectChangeGenerator,
    UnexpectedObjectChangeGenerator,
)
from changegen.generators.registry import GeneratorRegistry
from tests._support import OrderValidator, labels
from tests._support.generators import (
    FakeAllGenerator,
    FakeChangedGenerator,
    FakeGenerator,
    FakeMissingGenerator,
    FakeUnexpectedGenerator,
    OtherMissingGenerator,
)


@pytest.fixture
def registry() -> GeneratorRegistry:
    return GeneratorRegistry()


class TestRegister:
    def test_register_appends(self, registry):
        g1 = FakeMissingGenerator("g1")
        g2 = FakeMissingGenerator("g2")
        registry.register(g1)
        registry.register(g2)

        assert registry.generators() == (g1, g2)
        assert len(registry) == 2

    def test_register_returns_generator(self, registry):
        g = FakeMissingGenerator("g")
        assert registry.register(g) is g

    def test_register_same_instance_twice_is_kept_twice(self, registry):
        g = FakeMissingGenerator("g")
        registry.register(g)
        registry.register(g)
        assert len(registry) == 2

    def test_register_rejects_non_generator(self, registry):
        with pytest.raises(InvalidGeneratorError, match="Expected a ChangeGenerator"):
            registry.register(object())  # type: ignore[arg-type]

    def test_sequences_increase(self, registry):
        registry.register(FakeMissingGenerator("a"))
        registry.register(FakeMissingGenerator("b"))
        first, second = registry.registrations()
        assert first.sequence < second.sequence

    def test_contains_uses_identity(self, registry):
        g = FakeMissingGenerator("g")
        registry.register(g)
        assert g in registry
        assert FakeMissingGenerator("g") not in registry


class TestUnregister:
    def test_unregister_instance(self, registry):
        g1 = FakeMissingGenerator("g1")
        g2 = FakeMissingGenerator("g2")
        registry.register(g1)
        registry.register(g2)

        registry.unregister(g1)

        assert registry.generators() == (g2,)

    def test_unregister_removes_only_first_identity_match(self, registry):
        g = FakeMissingGenerator("g")
        registry.register(g)
        registry.register(g)

        registry.unregister(g)

        assert len(registry) == 1

    def test_unregister_absent_is_noop(self, registry):
        registry.register(FakeMissingGenerator("g1"))
        registry.unregister(FakeMissingGenerator("stranger"))
        assert len(registry) == 1

    def test_unregister_none_is_noop(self, registry):
        registry.register(FakeMissingGenerator("g1"))
        registry.unregister(None)
        assert len(registry) == 1

    def test_register_then_unregister_restores_candidates(self, registry, any_db):
        registry.register(FakeMissingGenerator("base", priority=3))
        before = registry.select_candidates(Capability.MISSING, Table, any_db)

        extra = FakeMissingGenerator("extra", priority=10)
        registry.register(extra)
        assert labels(registry.select_candidates(Capability.MISSING, Table, any_db)) == ["extra", "base"]

        registry.unregister(extra)
        assert registry.select_candidates(Capability.MISSING, Table, any_db) == before


class TestUnregisterType:
    def test_removes_last_registered_instance_of_type(self, registry):
        first = FakeMissingGenerator("first")
        second = FakeMissingGenerator("second")
        registry.register(first)
        registry.register(second)

        registry.unregister_type(FakeMissingGenerator)

        assert registry.generators() == (first,)

    def test_exact_type_only(self, registry):
        sub = OtherMissingGenerator("sub")
        registry.register(sub)

        registry.unregister_type(FakeMissingGenerator)

        assert registry.generators() == (sub,)

    def test_no_match_is_noop(self, registry):
        registry.register(FakeMissingGenerator("g"))
        registry.unregister_type(FakeUnexpectedGenerator)
        assert len(registry) == 1

    def test_no_match_on_empty_registry(self, registry):
        registry.unregister_type(FakeMissingGenerator)
        assert len(registry) == 0

    def test_unregister_with_class_delegates(self, registry):
        registry.register(FakeMissingGenerator("a"))
        registry.register(OtherMissingGenerator("b"))

        registry.unregister(OtherMissingGenerator)

        assert labels(registry.generators()) == ["a"]


class TestSelectCandidates:
    def test_scenario_priorities_and_exclusion(self, registry, any_db):
        """G1 (10), G2 (5), G3 (0) for Table: G3 is excluded."""
        g1 = FakeMissingGenerator("G1", priority=10, applies_to=(Table,))
        g2 = FakeMissingGenerator("G2", priority=5, applies_to=(Table,))
        g3 = FakeMissingGenerator("G3", priority=0, applies_to=(Table,))
        for g in (g3, g2, g1):
            registry.register(g)

        assert registry.select_candidates(MissingObjectChangeGenerator, Table, any_db) == [g1, g2]

    def test_negative_priority_excluded(self, registry, any_db):
        registry.register(FakeMissingGenerator("neg", priority=-1))
        assert registry.select_candidates("missing", Table, any_db) == []

    def test_filters_by_capability(self, registry, any_db):
        registry.register(FakeMissingGenerator("missing"))
        registry.register(FakeUnexpectedGenerator("unexpected"))
        registry.register(FakeChangedGenerator("changed"))

        assert labels(registry.select_candidates(Capability.MISSING, Table, any_db)) == ["missing"]
        assert labels(registry.select_candidates(Capability.UNEXPECTED, Table, any_db)) == ["unexpected"]
        assert labels(registry.select_candidates(Capability.CHANGED, Table, any_db)) == ["changed"]

    def test_generator_without_marker_never_selected(self, registry, any_db):
        registry.register(FakeGenerator("plain", priority=100))
        for capability in Capability:
            assert registry.select_candidates(capability, Table, any_db) == []

    def test_multi_capability_generator_selected_for_each(self, registry, any_db):
        g = FakeAllGenerator("all")
        registry.register(g)
        for marker in (
            MissingObjectChangeGenerator,
            UnexpectedObjectChangeGenerator,
            ChangedObjectChangeGenerator,
        ):
            assert registry.select_candidates(marker, Table, any_db) == [g]

    def test_filters_by_object_type(self, registry, any_db):
        registry.register(FakeMissingGenerator("tables", applies_to=(Table,)))
        registry.register(FakeMissingGenerator("columns", applies_to=(Column,)))

        assert labels(registry.select_candidates("missing", Column, any_db)) == ["columns"]

    def test_filters_by_database(self, registry, postgres, oracle):
        registry.register(
            FakeMissingGenerator("pg_only", priority=5, databases=[DatabaseType.POSTGRESQL])
        )
        registry.register(FakeMissingGenerator("generic", priority=1))

        assert labels(registry.select_candidates("missing", Table, postgres)) == ["pg_only", "generic"]
        assert labels(registry.select_candidates("missing", Table, oracle)) == ["generic"]

    def test_equal_priorities_keep_registration_order(self, registry, any_db):
        a = FakeMissingGenerator("a", priority=5)
        b = FakeMissingGenerator("b", priority=5)
        c = FakeMissingGenerator("c", priority=5)
        for g in (a, b, c):
            registry.register(g)

        assert registry.select_candidates("missing", Table, any_db) == [a, b, c]

    def test_equal_priority_same_type_neither_dropped(self, registry, any_db):
        a = FakeMissingGenerator("a", priority=7)
        b = FakeMissingGenerator("b", priority=7)
        registry.register(b)
        registry.register(a)

        candidates = registry.select_candidates("missing", Table, any_db)
        assert candidates == [b, a]

    def test_strictly_descending_priority(self, registry, any_db):
        priorities = [3, 50, 1, 5, 50, 2]
        for index, priority in enumerate(priorities):
            registry.register(FakeMissingGenerator(f"g{index}", priority=priority))

        ranked = registry.rank_candidates("missing", Table, any_db)

        assert len(ranked) == len(priorities)
        keys = [r.sort_key for r in ranked]
        assert keys == sorted(keys)
        assert len(set(keys)) == len(keys)
        OrderValidator(ranked).assert_exact_order(["g1", "g4", "g3", "g0", "g5", "g2"])

    def test_selection_recomputed_per_query(self, registry, any_db):
        registry.register(FakeMissingGenerator("a", priority=1))
        first = registry.select_candidates("missing", Table, any_db)
        registry.register(FakeMissingGenerator("b", priority=2))
        second = registry.select_candidates("missing", Table, any_db)

        assert labels(first) == ["a"]
        assert labels(second) == ["b", "a"]

    def test_unknown_capability_raises(self, registry, any_db):
        with pytest.raises(ValueError, match="Unknown capability"):
            registry.select_candidates("renamed", Table, any_db)


class TestOrderingTypes:
    def test_union_across_generators_and_capabilities(self, registry, any_db):
        registry.register(FakeMissingGenerator("m", applies_to=(Column,), after=[Table], before=[Index]))
        registry.register(
            FakeUnexpectedGenerator("u", applies_to=(Column,), after=[View], before=[PrimaryKey])
        )
        registry.register(FakeChangedGenerator("c", applies_to=(Column,), after=[Table]))

        assert registry.run_after_types(Column, any_db) == frozenset({Table, View})
        assert registry.run_before_types(Column, any_db) == frozenset({Index, PrimaryKey})

    def test_only_applicable_generators_contribute(self, registry, any_db):
        registry.register(FakeMissingGenerator("col", applies_to=(Column,), after=[Table]))
        registry.register(FakeMissingGenerator("fk", applies_to=(ForeignKey,), after=[PrimaryKey]))
        registry.register(FakeMissingGenerator("off", priority=0, applies_to=(Column,), after=[View]))

        assert registry.run_after_types(Column, any_db) == frozenset({Table})

    def test_none_hints_contribute_nothing(self, registry, any_db):
        registry.register(FakeMissingGenerator("quiet"))
        assert registry.run_after_types(Table, any_db) == frozenset()
        assert registry.run_before_types(Table, any_db) == frozenset()

    def test_order_independent(self, any_db):
        gens = [
            FakeMissingGenerator("a", after=[Table, View]),
            FakeUnexpectedGenerator("b", after=[View, Index]),
            FakeChangedGenerator("c", after=[Index]),
        ]
        forward, backward = GeneratorRegistry(), GeneratorRegistry()
        for g in gens:
            forward.register(g)
        for g in reversed(gens):
            backward.register(g)

        assert forward.run_after_types(Column, any_db) == backward.run_after_types(Column, any_db)

    def test_database_specific_hints(self, registry, postgres, oracle):
        registry.register(
            FakeMissingGenerator("pg", databases=[DatabaseType.POSTGRESQL], before=[Index])
        )

        assert registry.run_before_types(Table, postgres) == frozenset({Index})
        assert registry.run_before_types(Table, oracle) == frozenset()


def test_generators_snapshot_is_immutable(any_db):
    registry = GeneratorRegistry()
    registry.register(FakeMissingGenerator("a"))
    snapshot = registry.generators()
    registry.register(FakeMissingGenerator("b"))

    assert labels(snapshot) == ["a"]
    assert isinstance(snapshot, tuple)
    assert repr(registry) == "GeneratorRegistry(2 generators)"
    assert Database().short_name == "unknown"


def test_clear_empties_registry():
    registry = GeneratorRegistry()
    registry.register(FakeMissingGenerator("a"))
    registry.clear()
    assert len(registry) == 0
    assert list(registry) == []


class MutatingGenerator(FakeMissingGenerator):
    """Runs ``on_priority`` the first time it is scored."""

    def __init__(self, label, on_priority, **kwargs):
        super().__init__(label, **kwargs)
        self.on_priority = on_priority

    def priority(self, object_type, database):
        hook, self.on_priority = self.on_priority, None
        if hook is not None:
            hook()
        return super().priority(object_type, database)


class TestMutationDuringQuery:
    def test_select_candidates_uses_snapshot(self, registry, any_db):
        victim = FakeMissingGenerator("victim", priority=1)
        late = FakeMissingGenerator("late", priority=100)

        def mutate():
            registry.unregister(victim)
            registry.register(late)

        mutator = MutatingGenerator("mutator", mutate, priority=5)
        registry.register(mutator)
        registry.register(victim)

        assert registry.select_candidates("missing", Table, any_db) == [mutator, victim]
        assert registry.select_candidates("missing", Table, any_db) == [late, mutator]

    def test_ordering_query_tolerates_mutation(self, registry, any_db):
        extra = FakeMissingGenerator("extra", after=[View])
        mutator = MutatingGenerator("mutator", lambda: registry.register(extra), after=[Table])
        registry.register(mutator)

        assert registry.run_after_types(Column, any_db) == frozenset({Table})
        assert registry.run_after_types(Column, any_db) == frozenset({Table, View})

    def test_other_thread_can_register_while_query_scores(self, registry, any_db):
        registered = threading.Event()
        other = FakeMissingGenerator("other", priority=100)

        def register_from_thread():
            registry.register(other)
            registered.set()

        def wait_for_other_thread():
            worker = threading.Thread(target=register_from_thread)
            worker.start()
            assert registered.wait(timeout=5), "register() blocked while a query was scoring"
            worker.join(timeout=5)

        mutator = MutatingGenerator("mutator", wait_for_other_thread)
        registry.register(mutator)

        assert registry.select_candidates("missing", Table, any_db) == [mutator]
        assert labels(registry.select_candidates("missing", Table, any_db)) == ["other", "mutator"]
