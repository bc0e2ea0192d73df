"""
changegen: dispatch of schema-diff results to pluggable change generators.

Given an object that is missing, unexpected, or changed between two schema
snapshots, changegen selects the registered generators that can fix it,
orders them by priority, and runs them as a chain to produce corrective
changes. It also answers which object types must be processed before or
after a given type.

Quick start::

    from changegen import ChangeGeneratorFactory, GeneratorDiscovery, Database
    from changegen.core.diff import DiffOutputControl

    discovery = GeneratorDiscovery()
    discovery.add(MissingTableGenerator)

    factory = ChangeGeneratorFactory(discovery)
    changes = factory.fix_missing(
        table, DiffOutputControl(), Database.of("postgresql"), Database.of("postgresql")
    )
"""

from changegen.core.changes import Change
from changegen.core.database import Database, DatabaseType
from changegen.generators import (
    Capability,
    ChangedObjectChangeGenerator,
    ChangeGenerator,
    ChangeGeneratorChain,
    ChangeGeneratorFactory,
    GeneratorDiscovery,
    GeneratorRegistry,
    MissingObjectChangeGenerator,
    UnexpectedObjectChangeGenerator,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Change",
    "Database",
    "DatabaseType",
    "Capability",
    "ChangedObjectChangeGenerator",
    "ChangeGenerator",
    "ChangeGeneratorChain",
    "ChangeGeneratorFactory",
    "GeneratorDiscovery",
    "GeneratorRegistry",
    "MissingObjectChangeGenerator",
    "UnexpectedObjectChangeGenerator",
]
