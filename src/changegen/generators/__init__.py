"""Generator contract, registry, ordering, chain execution, discovery and the factory."""

from changegen.generators.base import (
    CAPABILITY_MARKERS,
    PRIORITY_ADDITIONAL,
    PRIORITY_DATABASE,
    PRIORITY_DEFAULT,
    PRIORITY_NONE,
    Capability,
    ChangedObjectChangeGenerator,
    ChangeGenerator,
    MissingObjectChangeGenerator,
    UnexpectedObjectChangeGenerator,
    capabilities_of,
)
from changegen.generators.chain import ChainState, ChangeGeneratorChain
from changegen.generators.comparator import PriorityComparator, RankedGenerator, priority_sort_key
from changegen.generators.discovery import (
    GeneratorDiscovery,
    GeneratorRegistration,
    default_discovery,
)
from changegen.generators.factory import ChangeGeneratorFactory
from changegen.generators.registry import GeneratorRegistry, Registration

__all__ = [
    "CAPABILITY_MARKERS",
    "PRIORITY_ADDITIONAL",
    "PRIORITY_DATABASE",
    "PRIORITY_DEFAULT",
    "PRIORITY_NONE",
    "Capability",
    "ChangedObjectChangeGenerator",
    "ChangeGenerator",
    "MissingObjectChangeGenerator",
    "UnexpectedObjectChangeGenerator",
    "capabilities_of",
    "ChainState",
    "ChangeGeneratorChain",
    "PriorityComparator",
    "RankedGenerator",
    "priority_sort_key",
    "GeneratorDiscovery",
    "GeneratorRegistration",
    "default_discovery",
    "ChangeGeneratorFactory",
    "GeneratorRegistry",
    "Registration",
]
