"""
Infrastructure package for sqlite3po.

Centralizes database connectivity concerns (connection lifecycle, statement
handles, bind-variable handling). Keep this layer focused on I/O and free of
schema-binding logic.
"""

from sqlite3po.infrastructure.driver import Connection, ExecutionResult
from sqlite3po.infrastructure.statement import Statement

__all__ = [
    "Connection",
    "ExecutionResult",
    "Statement",
]
