"""
Reusable DML statements for one bound table.

The cache is prepared once, after the table and its columns exist, and then
serves every insert/update/delete for the lifetime of the binding. Row encodings
are projected down to the bind variables each statement declares; keys the
statement does not use are dropped, and a declared column the encoding lacks is
bound as NULL, as an unbound SQLite parameter would be.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from sqlite3po.exceptions import Sqlite3poError
from sqlite3po.infrastructure.statement import Statement
from sqlite3po.orm.sql import (
    ID_COLUMN,
    delete_sql,
    insert_sql,
    select_by_id_sql,
    update_sql,
)
from sqlite3po.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlite3po.infrastructure.driver import Connection, ExecutionResult

log = get_logger(__name__)


class StatementCache:
    """
    Holds the prepared insert, update, delete and select-by-id statements of a table.

    Attributes
    ----------
    table : str
        Bound table name.
    columns : tuple[str, ...]
        Declared attribute names, in declaration order (``id`` excluded).
    """

    def __init__(self, table: str, attributes: Mapping[str, str]) -> None:
        self.table = table
        self.columns: Tuple[str, ...] = tuple(attributes)
        self._attributes = attributes
        self.insert: Optional[Statement] = None
        self.update: Optional[Statement] = None
        self.delete: Optional[Statement] = None
        self.select_by_id: Optional[Statement] = None

        self._insert_vars = self.columns
        self._update_vars = self.columns + (ID_COLUMN,)
        self._id_vars: Tuple[str, ...] = (ID_COLUMN,)

    @property
    def prepared(self) -> bool:
        return self.insert is not None and not self.insert.finalized

    async def prepare(self, connection: "Connection") -> "StatementCache":
        """
        Prepare all statements; the table and its columns must already exist.

        Raises
        ------
        StatementPreparationError
            If any statement fails to compile.
        """
        self.insert = await connection.prepare_async(insert_sql(self.table, self._attributes))
        self.update = await connection.prepare_async(update_sql(self.table, self._attributes))
        self.delete = await connection.prepare_async(delete_sql(self.table))
        self.select_by_id = await connection.prepare_async(select_by_id_sql(self.table))
        return self

    def finalize(self) -> None:
        for statement in (self.insert, self.update, self.delete, self.select_by_id):
            if statement is not None:
                statement.finalize()

    def require(self, statement: Optional[Statement]) -> Statement:
        if statement is None:
            raise Sqlite3poError(f"Statements for table '{self.table}' have not been prepared")
        return statement

    @staticmethod
    def bind_vars(row: Mapping[str, Any], names: Tuple[str, ...]) -> Dict[str, Any]:
        """Project ``row`` onto ``names``; missing columns bind NULL."""
        return {name: row.get(name) for name in names}

    async def _run(
        self, statement: Optional[Statement], names: Tuple[str, ...], row: Mapping[str, Any]
    ) -> "ExecutionResult":
        statement = self.require(statement)
        bind_vars = self.bind_vars(row, names)
        log.debug(
            f"Running statement {statement.sql}",
            extra={"table": self.table, "bind": bind_vars},
        )
        return await statement.run(bind_vars)

    async def perform_insert(self, row: Mapping[str, Any]) -> "ExecutionResult":
        return await self._run(self.insert, self._insert_vars, row)

    async def perform_update(self, row: Mapping[str, Any]) -> "ExecutionResult":
        return await self._run(self.update, self._update_vars, row)

    async def perform_delete(self, row: Mapping[str, Any]) -> "ExecutionResult":
        return await self._run(self.delete, self._id_vars, row)


__all__ = ["StatementCache"]
