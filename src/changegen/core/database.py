"""Database descriptors passed to generator priority checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from changegen.core.errors import UnknownDatabaseTypeError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"
    DB2 = "db2"
    MSSQL = "mssql"
    H2 = "h2"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: DatabaseType | str) -> DatabaseType:
        """Parse a type name, accepting the usual aliases."""
        if isinstance(value, DatabaseType):
            return value
        key = value.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownDatabaseTypeError(value) from None


_ALIASES = {
    "postgres": "postgresql",
    "pg": "postgresql",
    "sqlserver": "mssql",
    "mariadb": "mysql",
}


@dataclass(frozen=True)
class Database:
    """
    A database taking part in a comparison.

    Generators only read it, typically to compare ``database_type`` in their
    ``priority()`` implementation. The reference database is the one used
    for candidate selection.
    """

    database_type: DatabaseType = DatabaseType.UNKNOWN
    name: str | None = None
    default_schema: str | None = None
    product_version: str | None = None

    @classmethod
    def of(cls, database_type: DatabaseType | str, **kwargs: str | None) -> Database:
        return cls(database_type=DatabaseType.parse(database_type), **kwargs)

    @property
    def short_name(self) -> str:
        return self.database_type.value

    def __str__(self) -> str:
        if self.name:
            return f"{self.short_name}:{self.name}"
        return self.short_name


__all__ = [
    "DatabaseType",
    "Database",
]
