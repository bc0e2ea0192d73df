"""
Test support utilities for changegen tests.

Helpers that don't fit as pytest fixtures but are useful across test files.
Fake generators live in :mod:`tests._support.generators`.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def labels(generators: Iterable[Any]) -> list[str]:
    """Names of generators (or ranked generators) in order."""
    return [getattr(g, "generator", g).name for g in generators]


def change_types(changes: Iterable[Any] | None) -> list[str]:
    """``change_type`` of each change, or ``[]`` for ``None``."""
    return [c.change_type for c in changes or ()]


class OrderValidator:
    """
    Validates the order of a candidate list.

    Usage:
        validator = OrderValidator(factory.select_candidates("missing", Table, db))
        validator.assert_before("create_table", "create_table_fallback")
        validator.assert_exact_order(["create_table", "create_table_fallback"])
    """

    def __init__(self, generators: Iterable[Any]) -> None:
        self.names = labels(generators)
        self._index = {name: i for i, name in enumerate(self.names)}

    def get_index(self, name: str) -> int:
        if name not in self._index:
            raise ValueError(f"Generator '{name}' not among candidates {self.names}")
        return self._index[name]

    def assert_before(self, first: str, second: str) -> None:
        first_idx = self.get_index(first)
        second_idx = self.get_index(second)
        assert first_idx < second_idx, (
            f"Expected '{first}' (index {first_idx}) before "
            f"'{second}' (index {second_idx}), order: {self.names}"
        )

    def assert_exact_order(self, expected: list[str]) -> None:
        assert self.names == expected, (
            f"Candidate order mismatch:\n"
            f"  Expected: {expected}\n"
            f"  Actual:   {self.names}"
        )
