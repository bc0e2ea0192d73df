"""Core primitives: errors, logging, settings, database and object types, diff payloads."""

from changegen.core.changes import Change
from changegen.core.database import Database, DatabaseType
from changegen.core.diff import DiffOutputControl, Difference, ObjectDifferences
from changegen.core.errors import (
    ChangeGenError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    GeneratorDiscoveryError,
    GeneratorInstantiationError,
    InvalidConfigError,
    InvalidGeneratorError,
    UnknownDatabaseTypeError,
    UnknownObjectTypeError,
)
from changegen.core.logging import configure_logging, get_logger
from changegen.core.settings import ChangeGenSettings, get_settings
from changegen.core.structure import DatabaseObject, resolve_object_type

__all__ = [
    "Change",
    "Database",
    "DatabaseType",
    "DiffOutputControl",
    "Difference",
    "ObjectDifferences",
    "ChangeGenError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "GeneratorDiscoveryError",
    "GeneratorInstantiationError",
    "InvalidConfigError",
    "InvalidGeneratorError",
    "UnknownDatabaseTypeError",
    "UnknownObjectTypeError",
    "configure_logging",
    "get_logger",
    "ChangeGenSettings",
    "get_settings",
    "DatabaseObject",
    "resolve_object_type",
]
