"""
Structured error types for changegen.

Provides a small hierarchy of typed errors carrying a category, structured
context, and an optional chained cause. Errors raised by the dispatcher
itself (discovery, registration, structure lookups) are ``ChangeGenError``
subclasses. Errors raised *inside* a generator are never wrapped: they
propagate to the caller unmodified.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Fatal vs. expected:** Discovery failures abort start-up; a missing
      candidate is not an error at all
    - **Rich Context:** Errors carry the generator / object type involved
    - **Error Chaining:** Preserve original exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     ChangeGenError                           │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError           DiscoveryError        RegistryError   │
        │  (CONFIG)              (DISCOVERY)           (REGISTRY)      │
        │       │                     │                     │          │
        │  InvalidConfigError    GeneratorDiscovery    InvalidGenerator│
        │                        Error                 Error           │
        │                             │                                │
        │                        GeneratorInstantiationError           │
        │                                                              │
        │  StructureError (STRUCTURE)                                  │
        │       │                                                      │
        │  UnknownObjectTypeError   UnknownDatabaseTypeError           │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = GeneratorInstantiationError("Could not build generator")
    >>> error.category
    <ErrorCategory.DISCOVERY: 'DISCOVERY'>
    >>> error.with_context(generator="MissingTableGenerator").context.generator
    'MissingTableGenerator'

Guardrails:
    ❌ DON'T: Wrap exceptions raised by a generator
    ✅ DO: Let them propagate so the whole request aborts

    ❌ DON'T: Raise for "no generator applies"
    ✅ DO: Return ``None`` and let the caller decide

Tags:
    error-handling, exception-hierarchy, error-context, changegen

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        CONFIG: Missing or invalid settings
        DISCOVERY: Generator discovery / instantiation failures
        REGISTRY: Invalid registry mutations
        STRUCTURE: Unknown object or database types
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    CONFIG = "CONFIG"             # Missing config, invalid settings
    DISCOVERY = "DISCOVERY"       # Plugin discovery, constructor failures
    REGISTRY = "REGISTRY"         # Bad register/unregister calls
    STRUCTURE = "STRUCTURE"       # Unknown object / database types

    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the metadata the dispatcher knows about; anything else
    goes into ``metadata``. ``to_dict()`` drops unset fields.

    Attributes:
        generator: Name of the generator class involved
        capability: Capability marker name (missing / unexpected / changed)
        object_type: DatabaseObject type name
        database: Database type name
        entry_point: Entry point name, for discovery errors
        metadata: Additional key-value pairs
    """

    generator: str | None = None
    capability: str | None = None
    object_type: str | None = None
    database: str | None = None
    entry_point: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["generator", "capability", "object_type", "database", "entry_point"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ChangeGenError(Exception):
    """
    Base exception for all changegen errors.

    Every instance carries a ``category``, an ``ErrorContext`` and an
    optional ``cause`` which is also set as ``__cause__`` so tracebacks show
    the original failure.

    Subclasses set ``default_category`` to give sensible defaults for their
    domain; ``fatal`` marks errors that must abort start-up.

    Examples:
        >>> error = ChangeGenError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'ChangeGenError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    fatal: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ChangeGenError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidGeneratorError("Not a generator").with_context(
                generator=type(obj).__name__,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ChangeGenError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG
    fatal = True


class InvalidConfigError(ConfigError):
    """A setting has an invalid value."""

    def __init__(self, key: str, message: str, **kwargs: Any):
        super().__init__(f"Invalid value for {key!r}: {message}", **kwargs)
        self.key = key


# =============================================================================
# DISCOVERY ERRORS (fatal at start-up)
# =============================================================================


class DiscoveryError(ChangeGenError):
    """Base for generator discovery failures."""

    default_category = ErrorCategory.DISCOVERY
    fatal = True


class GeneratorDiscoveryError(DiscoveryError):
    """
    Generator discovery failed.

    Raised while building a registry. The partially populated registry is
    discarded; callers never see it.
    """


class GeneratorInstantiationError(GeneratorDiscoveryError):
    """A discovered generator constructor raised or returned a non-generator."""


# =============================================================================
# REGISTRY ERRORS
# =============================================================================


class RegistryError(ChangeGenError):
    """Base for invalid registry operations."""

    default_category = ErrorCategory.REGISTRY


class InvalidGeneratorError(RegistryError):
    """An object that is not a ChangeGenerator was offered to the registry."""


# =============================================================================
# STRUCTURE ERRORS
# =============================================================================


class StructureError(ChangeGenError):
    """Base for object / database type lookup errors."""

    default_category = ErrorCategory.STRUCTURE


class UnknownObjectTypeError(StructureError):
    """No DatabaseObject type is known under the given name."""

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(f"Unknown database object type: {name}", **kwargs)
        self.type_name = name


class UnknownDatabaseTypeError(StructureError):
    """No DatabaseType is known under the given name."""

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(f"Unknown database type: {name}", **kwargs)
        self.type_name = name


# =============================================================================
# HELPERS
# =============================================================================


def is_fatal(error: BaseException) -> bool:
    """Return True if the error must abort the whole diff/generation run."""
    if isinstance(error, ChangeGenError):
        return error.fatal
    return False


def categorize_error(error: BaseException) -> ErrorCategory:
    """Return the category of any exception (UNKNOWN for foreign errors)."""
    if isinstance(error, ChangeGenError):
        return error.category
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ChangeGenError",
    "ConfigError",
    "InvalidConfigError",
    "DiscoveryError",
    "GeneratorDiscoveryError",
    "GeneratorInstantiationError",
    "RegistryError",
    "InvalidGeneratorError",
    "StructureError",
    "UnknownObjectTypeError",
    "UnknownDatabaseTypeError",
    "is_fatal",
    "categorize_error",
]
