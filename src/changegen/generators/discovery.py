"""
Generator discovery: the start-up registration table.

Generators reach a registry in two ways:

1. **Registration table.** Code adds constructors to a
   :class:`GeneratorDiscovery` explicitly, either with :meth:`~GeneratorDiscovery.add`
   or with the :meth:`~GeneratorDiscovery.generator` class decorator.
2. **Entry points.** Installed distributions advertise generators in the
   ``changegen.generators`` entry-point group (configurable). An entry point
   may name a generator class, or a zero-argument callable returning one
   generator or an iterable of them.

``load()`` instantiates everything in a fixed order (table rows first, then
entry points sorted by name). Any failure is fatal: it is raised as a
:class:`~changegen.core.errors.GeneratorDiscoveryError` chained to the
cause, and the caller never receives a partial list.

Example::

    discovery = GeneratorDiscovery()

    @discovery.generator
    class MissingTableGenerator(MissingObjectChangeGenerator):
        ...

    discovery.add(make_index_generator, capability=Capability.MISSING)
    factory = ChangeGeneratorFactory(discovery)

Tags:
    changegen, discovery, plugins, entry-points

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from importlib.metadata import EntryPoint, entry_points
from typing import Any

from changegen.core.errors import (
    GeneratorDiscoveryError,
    GeneratorInstantiationError,
    InvalidGeneratorError,
)
from changegen.core.logging import get_logger
from changegen.core.settings import ChangeGenSettings
from changegen.generators.base import Capability, ChangeGenerator, capabilities_of

logger = get_logger(__name__)

GeneratorConstructor = Callable[[], ChangeGenerator]


def _qualified_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if module and qualname:
        return f"{module}:{qualname}"
    return repr(obj)


@dataclass(frozen=True)
class GeneratorRegistration:
    """One row of the registration table."""

    constructor: GeneratorConstructor
    capabilities: tuple[Capability, ...]
    name: str

    @property
    def short_name(self) -> str:
        return self.name.rsplit(":", 1)[-1].rsplit(".", 1)[-1]


class GeneratorDiscovery:
    """Ordered table of generator constructors plus the entry-point hook."""

    def __init__(self, rows: Iterable[GeneratorRegistration] = ()) -> None:
        self._rows: list[GeneratorRegistration] = list(rows)

    # ------------------------------------------------------------------
    # Table
    # ------------------------------------------------------------------

    def add(
        self,
        constructor: GeneratorConstructor,
        capability: Capability | str | type[ChangeGenerator] | None = None,
        name: str | None = None,
    ) -> GeneratorRegistration:
        """Add a constructor (a generator class or a zero-arg factory)."""
        if not callable(constructor):
            raise InvalidGeneratorError(f"Generator constructor must be callable, got {constructor!r}")

        if capability is not None:
            capabilities: tuple[Capability, ...] = (Capability.parse(capability),)
        elif isinstance(constructor, type):
            if not issubclass(constructor, ChangeGenerator):
                raise InvalidGeneratorError(
                    f"{constructor.__name__} is not a ChangeGenerator subclass"
                )
            capabilities = tuple(capabilities_of(constructor))
            if not capabilities:
                raise InvalidGeneratorError(
                    f"{constructor.__name__} implements no capability marker"
                )
        else:
            capabilities = ()

        row = GeneratorRegistration(
            constructor=constructor,
            capabilities=capabilities,
            name=name or _qualified_name(constructor),
        )
        self._rows.append(row)
        return row

    def generator(
        self,
        cls: type[ChangeGenerator] | None = None,
        *,
        capability: Capability | str | None = None,
        name: str | None = None,
    ) -> Any:
        """Class decorator form of :meth:`add`; usable bare or with arguments."""

        def decorator(target: type[ChangeGenerator]) -> type[ChangeGenerator]:
            self.add(target, capability=capability, name=name)
            return target

        if cls is not None:
            return decorator(cls)
        return decorator

    def rows(self) -> tuple[GeneratorRegistration, ...]:
        return tuple(self._rows)

    def copy(self) -> GeneratorDiscovery:
        return GeneratorDiscovery(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, settings: ChangeGenSettings | None = None) -> list[ChangeGenerator]:
        """Instantiate every table row, then every entry-point generator."""
        settings = settings or ChangeGenSettings()
        generators: list[ChangeGenerator] = []

        for row in self._rows:
            if settings.is_disabled(row.name, row.short_name):
                logger.debug("generator_disabled", generator=row.name)
                continue
            generator = _instantiate(row.constructor, row.name)
            for capability in row.capabilities:
                if not isinstance(generator, capability.marker):
                    raise GeneratorInstantiationError(
                        f"{row.name} was registered for {capability.value!r} "
                        f"but {generator.name} does not implement it"
                    ).with_context(generator=row.name, capability=capability.value)
            generators.append(generator)

        if settings.load_entry_points:
            generators.extend(_load_entry_points(settings))

        logger.debug("discovery_loaded", count=len(generators))
        return generators


def _instantiate(constructor: GeneratorConstructor, name: str) -> ChangeGenerator:
    try:
        generator = constructor()
    except Exception as exc:
        raise GeneratorInstantiationError(
            f"Could not instantiate generator {name}: {exc}", cause=exc
        ).with_context(generator=name) from exc

    if not isinstance(generator, ChangeGenerator):
        raise GeneratorInstantiationError(
            f"{name} returned {type(generator).__name__}, not a ChangeGenerator"
        ).with_context(generator=name)
    return generator


def _select_entry_points(group: str) -> list[EntryPoint]:
    return sorted(entry_points(group=group), key=lambda ep: ep.name)


def _load_entry_points(settings: ChangeGenSettings) -> list[ChangeGenerator]:
    generators: list[ChangeGenerator] = []
    for ep in _select_entry_points(settings.entry_point_group):
        if settings.is_disabled(ep.name, ep.value):
            logger.debug("generator_disabled", entry_point=ep.name)
            continue
        try:
            target = ep.load()
        except Exception as exc:
            logger.error("discovery_failed", entry_point=ep.name, error=str(exc))
            raise GeneratorDiscoveryError(
                f"Could not load entry point {ep.name!r} ({ep.value}): {exc}", cause=exc
            ).with_context(entry_point=ep.name) from exc

        if isinstance(target, type):
            if not issubclass(target, ChangeGenerator):
                raise GeneratorInstantiationError(
                    f"Entry point {ep.name!r} names {target.__name__}, not a ChangeGenerator"
                ).with_context(entry_point=ep.name)
            if settings.is_disabled(target.__name__):
                logger.debug("generator_disabled", entry_point=ep.name, generator=target.__name__)
                continue
            generators.append(_instantiate(target, ep.value))
            continue

        if not callable(target):
            raise GeneratorInstantiationError(
                f"Entry point {ep.name!r} is neither a generator class nor callable"
            ).with_context(entry_point=ep.name)

        try:
            produced = target()
        except Exception as exc:
            raise GeneratorInstantiationError(
                f"Entry point {ep.name!r} failed: {exc}", cause=exc
            ).with_context(entry_point=ep.name) from exc

        if isinstance(produced, ChangeGenerator):
            items = [produced]
        elif isinstance(produced, Iterable):
            items = list(produced)
        else:
            items = [produced]
        for item in items:
            if not isinstance(item, ChangeGenerator):
                raise GeneratorInstantiationError(
                    f"Entry point {ep.name!r} produced {type(item).__name__}, not a ChangeGenerator"
                ).with_context(entry_point=ep.name)
            if settings.is_disabled(item.name):
                logger.debug("generator_disabled", entry_point=ep.name, generator=item.name)
                continue
            generators.append(item)

    return generators


def default_discovery() -> GeneratorDiscovery:
    """A discovery with an empty registration table (entry points still apply)."""
    return GeneratorDiscovery()


__all__ = [
    "GeneratorConstructor",
    "GeneratorRegistration",
    "GeneratorDiscovery",
    "default_discovery",
]
