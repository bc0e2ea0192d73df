"""
Shared pytest fixtures for changegen tests.

This module provides:
- Environment and settings-cache isolation
- Settings with entry-point loading disabled
- Database descriptors for common backends
- A factory preloaded with fake generators
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from changegen.core.database import Database
from changegen.core.diff import DiffOutputControl
from changegen.core.settings import ChangeGenSettings, clear_settings_cache
from changegen.generators.discovery import GeneratorDiscovery
from changegen.generators.factory import ChangeGeneratorFactory


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip CHANGEGEN_* variables and run from a directory without a .env file."""
    for key in list(os.environ):
        if key.startswith("CHANGEGEN_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CHANGEGEN_LOAD_ENTRY_POINTS", "false")
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Settings / databases / payloads
# =============================================================================


@pytest.fixture
def settings() -> ChangeGenSettings:
    return ChangeGenSettings(load_entry_points=False)


@pytest.fixture
def postgres() -> Database:
    return Database.of("postgresql", name="reference")


@pytest.fixture
def oracle() -> Database:
    return Database.of("oracle", name="comparison")


@pytest.fixture
def any_db() -> Database:
    return Database()


@pytest.fixture
def control() -> DiffOutputControl:
    return DiffOutputControl()


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def empty_factory(settings: ChangeGenSettings) -> ChangeGeneratorFactory:
    return ChangeGeneratorFactory(GeneratorDiscovery(), settings)
