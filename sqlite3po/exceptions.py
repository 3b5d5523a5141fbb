"""
Exception hierarchy for sqlite3po.

Driver execution failures are not wrapped: ``sqlite3.Error`` subclasses raised by
aiosqlite reach the caller unchanged. The classes below cover failures that the
schema-binding layer detects or classifies itself.
"""

from __future__ import annotations


class Sqlite3poError(Exception):
    """Base class for errors raised by sqlite3po."""


class SchemaError(Sqlite3poError, ValueError):
    """An attribute map or class registration is unusable."""


class MigrationError(Sqlite3poError):
    """An additive column migration failed for a reason other than a duplicate column."""

    def __init__(self, table: str, column: str, cause: BaseException) -> None:
        super().__init__(f"Could not add column '{column}' to table '{table}': {cause}")
        self.table = table
        self.column = column
        self.cause = cause


class StatementPreparationError(Sqlite3poError):
    """A statement failed to compile against the current schema."""

    def __init__(self, sql: str, cause: BaseException) -> None:
        super().__init__(f"Could not prepare statement '{sql}': {cause}")
        self.sql = sql
        self.cause = cause


class StatementFinalizedError(Sqlite3poError):
    """A finalized statement was used again."""


class EntityError(Sqlite3poError, TypeError):
    """A bound entity broke the serialize/deserialize contract."""


__all__ = [
    "Sqlite3poError",
    "SchemaError",
    "MigrationError",
    "StatementPreparationError",
    "StatementFinalizedError",
    "EntityError",
]
