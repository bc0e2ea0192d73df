"""Base type for corrective actions returned by generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Change:
    """
    A migration step produced by a generator.

    Concrete change kinds (create table, add column, ...) belong to the
    changelog layer; the dispatcher treats every change as opaque and only
    collects them.
    """

    change_type: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        if not self.attributes:
            return self.change_type
        params = ", ".join(f"{k}={v}" for k, v in sorted(self.attributes.items()))
        return f"{self.change_type}({params})"


__all__ = ["Change"]
