"""
Repository binding an entity class to a table.

A ``Repository`` owns exactly one ``IdentityMap`` and one ``StatementCache`` for
its (class, table) pair. It creates the table, adds declared columns, prepares
the DML statements and then persists, fetches and evicts instances of the class.

Entities implement two methods:

- ``serialize()`` returns a mapping of column name to value, including ``id``
  (absent or None while the instance has never been saved)
- ``deserialize(row)`` loads state from such a mapping in place

Fetches are routed through the identity map: a row whose ``id`` is already cached
is loaded into the cached instance, so every holder of that reference sees the
refreshed state.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Mapping
from typing import (
    TYPE_CHECKING,
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from sqlite3po.exceptions import EntityError, MigrationError
from sqlite3po.infrastructure.statement import Statement
from sqlite3po.orm.identity_map import IdentityMap
from sqlite3po.orm.sql import (
    ID_COLUMN,
    add_column_sql,
    count_sql,
    create_table_sql,
    truncate_sql,
    validate_attributes,
)
from sqlite3po.orm.statements import StatementCache
from sqlite3po.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlite3po.infrastructure.driver import Connection

log = get_logger(__name__)


@runtime_checkable
class Persistable(Protocol):
    """Capabilities a class needs before it can be bound to a table."""

    def serialize(self) -> Mapping[str, Any]:
        ...

    def deserialize(self, row: Mapping[str, Any]) -> Any:
        ...


T = TypeVar("T", bound=Persistable)

SqlOrStatement = Union[str, Statement]


def is_duplicate_column(exc: BaseException) -> bool:
    """True if ``exc`` is SQLite refusing to add a column that already exists."""
    return isinstance(exc, sqlite3.OperationalError) and "duplicate column name" in str(exc).lower()


class Repository(Generic[T]):
    """
    Data access for one bound entity class.

    Construct through ``Database.bind_schema``; the constructor validates the
    attribute map but performs no I/O until ``setup()`` is awaited.

    Parameters
    ----------
    connection : Connection
        Open database connection.
    entity : type
        The bound class.
    table : str
        Table name.
    attributes : Mapping[str, str]
        Column name to column type (passed through to DDL). Must not contain ``id``.
    factory : callable, optional
        Builds a bare instance for rows not yet in the identity map. Defaults to
        allocating the class without calling ``__init__``.
    optimistic_eviction : bool
        Evict from the identity map before the DELETE is confirmed instead of after.
    """

    def __init__(
        self,
        connection: "Connection",
        entity: Type[T],
        table: str,
        attributes: Mapping[str, str],
        *,
        factory: Optional[Callable[[], T]] = None,
        optimistic_eviction: bool = False,
    ) -> None:
        self.attributes = validate_attributes(attributes)
        self.entity = entity
        self.table = table
        self.optimistic_eviction = optimistic_eviction
        self.identity_map: IdentityMap[T] = IdentityMap(name=entity.__name__)
        self.statements = StatementCache(table, self.attributes)
        self._connection = connection
        self._factory = factory or (lambda: entity.__new__(entity))

    def __repr__(self) -> str:
        cached = len(self.identity_map)
        return f"<Repository {self.entity.__name__} -> {self.table} ({cached} cached)>"

    # --- Binding ---

    async def setup(self) -> "Repository[T]":
        """
        Create the table, add declared columns and prepare the DML statements.

        Raises
        ------
        MigrationError
            If adding a column fails for a reason other than it already existing.
        StatementPreparationError
            If a DML statement does not compile.
        """
        log.info(
            f"Binding class {self.entity.__name__} with table {self.table}",
            extra={"table": self.table, "columns": dict(self.attributes)},
        )
        await self._connection.execute(create_table_sql(self.table))
        await self._add_columns()
        await self.statements.prepare(self._connection)
        return self

    async def _add_columns(self) -> None:
        columns = list(self.attributes.items())
        results = await asyncio.gather(
            *(
                self._connection.execute(add_column_sql(self.table, name, column_type))
                for name, column_type in columns
            ),
            return_exceptions=True,
        )

        failures: List[MigrationError] = []
        for (name, _), result in zip(columns, results):
            if not isinstance(result, BaseException):
                log.debug(f"Added column {name} to {self.table}", extra={"table": self.table})
            elif not isinstance(result, Exception):
                raise result
            elif is_duplicate_column(result):
                log.info(
                    f"Column {name} already exists in {self.table}",
                    extra={"table": self.table, "column": name},
                )
            else:
                log.error(
                    f"Adding column {name} to {self.table} failed: {result}",
                    extra={"table": self.table, "column": name},
                )
                failures.append(MigrationError(self.table, name, result))

        if failures:
            raise failures[0]

    def close(self) -> None:
        """Finalize the prepared statements; the repository is unusable afterwards."""
        self.statements.finalize()

    # --- Encoding helpers ---

    def _encode(self, obj: T) -> Dict[str, Any]:
        row = obj.serialize()
        if not isinstance(row, Mapping):
            raise EntityError(
                f"{type(obj).__name__}.serialize() must return a mapping, got {type(row).__name__}"
            )
        return dict(row)

    def _materialize(self, row: Optional[Mapping[str, Any]]) -> Optional[T]:
        if not row:
            return None
        row_id = row.get(ID_COLUMN)
        obj = self.identity_map.get(row_id)
        if obj is None:
            obj = self._factory()
            self.identity_map.set(row_id, obj)
        obj.deserialize(dict(row))
        return obj

    # --- Instance operations ---

    async def save(self, obj: T) -> T:
        """
        Insert ``obj`` if it has no id yet, otherwise update its row.

        After an insert the assigned id is loaded back into the instance and the
        instance is cached under it.
        """
        row = self._encode(obj)
        log.debug(f"Will save data {row}", extra={"table": self.table})

        if row.get(ID_COLUMN):
            await self.statements.perform_update(row)
            return obj

        result = await self.statements.perform_insert(row)
        log.debug(
            f"Inserted row with rowid {result.last_row_id}",
            extra={"table": self.table, "row_id": result.last_row_id},
        )
        row[ID_COLUMN] = result.last_row_id
        self.identity_map.set(result.last_row_id, obj)
        obj.deserialize(row)
        return obj

    async def delete(self, obj: T) -> T:
        """
        Delete the row of ``obj`` and detach it (its id becomes None).

        A never-saved instance is returned untouched without any I/O.
        """
        row = self._encode(obj)
        row_id = row.get(ID_COLUMN)
        if not row_id:
            return obj

        if self.optimistic_eviction:
            self.identity_map.set(row_id, None)
        await self.statements.perform_delete(row)
        if not self.optimistic_eviction:
            self.identity_map.set(row_id, None)

        row[ID_COLUMN] = None
        obj.deserialize(row)
        return obj

    def release(self, obj: T) -> None:
        """Stop caching ``obj`` without touching its row."""
        self.identity_map.set(self._encode(obj).get(ID_COLUMN), None)

    # --- Class operations ---

    async def get(self, query: SqlOrStatement, *params: Any) -> Optional[T]:
        """
        Fetch one row with raw SQL or a prepared statement and return its instance.

        Returns None when the query matches no row.
        """
        if isinstance(query, Statement):
            row = await query.fetch_one(*params)
        else:
            row = await self._connection.fetch_one(query, *params)
        return self._materialize(row)

    async def all(self, query: SqlOrStatement, *params: Any) -> List[T]:
        """Fetch all rows of a query as instances, in the order the rows were returned."""
        if isinstance(query, Statement):
            rows = await query.fetch_all(*params)
        else:
            rows = await self._connection.fetch_all(query, *params)
        return [self._materialize(row) for row in rows]

    async def iterate(self, query: SqlOrStatement, *params: Any) -> AsyncIterator[T]:
        """Yield instances row by row instead of loading the whole result."""
        if isinstance(query, Statement):
            rows = query.iterate(*params)
        else:
            rows = self._connection.iterate(query, *params)
        async for row in rows:
            yield self._materialize(row)

    async def get_by_id(self, row_id: int) -> Optional[T]:
        """Return the cached instance for ``row_id``, fetching it only on a cache miss."""
        cached = self.identity_map.get(row_id)
        if cached is not None:
            return cached
        select = self.statements.require(self.statements.select_by_id)
        return await self.get(select, {ID_COLUMN: row_id})

    def cached(self, row_id: int) -> Optional[T]:
        return self.identity_map.get(row_id)

    async def count(self) -> int:
        row = await self._connection.fetch_one(count_sql(self.table))
        return int(row["row_count"]) if row else 0

    async def truncate(self) -> int:
        """Delete every row of the table and clear the identity map. Returns the rows deleted."""
        result = await self._connection.execute(truncate_sql(self.table))
        evicted = self.identity_map.clear()
        log.info(
            f"Truncated {self.table}",
            extra={"table": self.table, "rows": result.changes, "evicted": evicted},
        )
        return result.changes

    def release_all(self) -> int:
        """Clear the identity map without touching the table."""
        return self.identity_map.clear()


__all__ = ["Persistable", "Repository", "SqlOrStatement", "is_duplicate_column"]
