"""
Centralized settings for changegen.

:class:`ChangeGenSettings` is a validated, cached source of truth for the
few knobs the dispatcher has: log output, whether entry-point plugins are
loaded, and which generators are disabled at discovery time.

All fields can be set through ``CHANGEGEN_*`` environment variables or a
``.env`` file::

    CHANGEGEN_LOG_LEVEL=DEBUG
    CHANGEGEN_LOAD_ENTRY_POINTS=false
    CHANGEGEN_DISABLED_GENERATORS='["acme.gen:LegacyIndexGenerator"]'

Tags:
    changegen, configuration, settings, pydantic

Doc-Types:
    api-reference
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENTRY_POINT_GROUP = "changegen.generators"


class ChangeGenSettings(BaseSettings):
    """changegen configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHANGEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="json or console")

    # ── Discovery ────────────────────────────────────────────────
    load_entry_points: bool = Field(default=True)
    entry_point_group: str = Field(default=DEFAULT_ENTRY_POINT_GROUP)
    disabled_generators: list[str] = Field(
        default_factory=list,
        description="Generator names (module:QualName or bare class name) skipped at discovery",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return fmt

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    def is_disabled(self, *names: str) -> bool:
        """True if any of ``names`` is listed in ``disabled_generators``."""
        disabled = set(self.disabled_generators)
        return any(name in disabled for name in names)


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, ChangeGenSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ChangeGenSettings:
    """Load, validate, and cache a :class:`ChangeGenSettings` instance.

    Validation failures surface as
    :class:`~changegen.core.errors.InvalidConfigError`.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    from pydantic import ValidationError

    from changegen.core.errors import InvalidConfigError

    try:
        settings = ChangeGenSettings()
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise InvalidConfigError(key, first.get("msg", str(exc)), cause=exc) from exc

    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "ChangeGenSettings",
    "DEFAULT_ENTRY_POINT_GROUP",
    "get_settings",
    "clear_settings_cache",
]
