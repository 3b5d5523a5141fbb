"""
sqlite3po - a lightweight object mapper over an asynchronous SQLite driver.

Bind a plain Python class to a table by declaring its columns, then persist,
fetch and evict its instances through a repository:

- additive schema binding (create table, add declared columns)
- prepared insert/update/delete statements per bound class
- a per-class identity map, so fetching the same row twice yields the same object
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlite3po.config import Settings, get_settings
from sqlite3po.database import Database
from sqlite3po.exceptions import (
    EntityError,
    MigrationError,
    SchemaError,
    Sqlite3poError,
    StatementFinalizedError,
    StatementPreparationError,
)
from sqlite3po.infrastructure import Connection, ExecutionResult, Statement
from sqlite3po.orm import IdentityMap, Persistable, Repository, SchemaRegistry, StatementCache
from sqlite3po.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Driver
    "Connection",
    "Database",
    "ExecutionResult",
    "Statement",
    # Schema binding
    "IdentityMap",
    "Persistable",
    "Repository",
    "SchemaRegistry",
    "StatementCache",
    # Errors
    "Sqlite3poError",
    "SchemaError",
    "MigrationError",
    "StatementPreparationError",
    "StatementFinalizedError",
    "EntityError",
    # Logging
    "configure_logging",
    "get_logger",
]
