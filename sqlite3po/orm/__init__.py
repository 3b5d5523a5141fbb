"""
Schema binding and identity caching on top of the async SQLite driver.

Exports the repository type, its statement and identity caches, the class
registry and the SQL text builders.
"""

from sqlite3po.orm.identity_map import IdentityMap
from sqlite3po.orm.registry import SchemaRegistry
from sqlite3po.orm.repository import Persistable, Repository, SqlOrStatement
from sqlite3po.orm.statements import StatementCache

__all__ = [
    "IdentityMap",
    "Persistable",
    "Repository",
    "SchemaRegistry",
    "SqlOrStatement",
    "StatementCache",
]
