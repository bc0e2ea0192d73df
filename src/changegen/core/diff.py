"""
Diff payloads handed through the dispatcher to generators.

The dispatcher never reads these objects; it only forwards them. They live
here so generators and callers share one definition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from changegen.core.database import Database
from changegen.core.structure import DatabaseObject


@dataclass(frozen=True)
class Difference:
    """One attribute that differs between the reference and compared object."""

    field: str
    reference_value: Any = None
    compared_value: Any = None

    def __str__(self) -> str:
        return f"{self.field}: {self.reference_value!r} -> {self.compared_value!r}"


@dataclass
class ObjectDifferences:
    """All differences found for one changed object."""

    differences: list[Difference] = field(default_factory=list)

    def add(self, field_name: str, reference_value: Any, compared_value: Any) -> ObjectDifferences:
        self.differences.append(Difference(field_name, reference_value, compared_value))
        return self

    def get(self, field_name: str) -> Difference | None:
        for difference in self.differences:
            if difference.field == field_name:
                return difference
        return None

    def is_different(self, field_name: str) -> bool:
        return self.get(field_name) is not None

    def has_differences(self) -> bool:
        return bool(self.differences)

    def __iter__(self):
        return iter(self.differences)

    def __len__(self) -> int:
        return len(self.differences)


@dataclass
class DiffOutputControl:
    """
    Output options for turning a diff into changes.

    Besides the include flags, the control keeps a ledger of objects that a
    generator has already handled, so that a generator fixing a table can
    mark its columns as done and the column generators can skip them.
    """

    include_catalog: bool = True
    include_schema: bool = True
    include_tablespace: bool = True
    # Entries hold the object itself so its id() cannot be reused while marked.
    _handled: dict[str, dict[tuple[int, str], DatabaseObject]] = field(
        default_factory=lambda: {"missing": {}, "unexpected": {}, "changed": {}},
        repr=False,
    )

    @staticmethod
    def _key(obj: DatabaseObject, database: Database | None) -> tuple[int, str]:
        return id(obj), database.short_name if database is not None else ""

    def _mark(self, kind: str, obj: DatabaseObject, database: Database | None) -> None:
        self._handled[kind][self._key(obj, database)] = obj

    def _is_handled(self, kind: str, obj: DatabaseObject, database: Database | None) -> bool:
        return self._handled[kind].get(self._key(obj, database)) is obj

    def mark_handled_missing(self, obj: DatabaseObject, database: Database | None = None) -> None:
        self._mark("missing", obj, database)

    def mark_handled_unexpected(self, obj: DatabaseObject, database: Database | None = None) -> None:
        self._mark("unexpected", obj, database)

    def mark_handled_changed(self, obj: DatabaseObject, database: Database | None = None) -> None:
        self._mark("changed", obj, database)

    def already_handled_missing(self, obj: DatabaseObject, database: Database | None = None) -> bool:
        return self._is_handled("missing", obj, database)

    def already_handled_unexpected(self, obj: DatabaseObject, database: Database | None = None) -> bool:
        return self._is_handled("unexpected", obj, database)

    def already_handled_changed(self, obj: DatabaseObject, database: Database | None = None) -> bool:
        return self._is_handled("changed", obj, database)


__all__ = [
    "Difference",
    "ObjectDifferences",
    "DiffOutputControl",
]
