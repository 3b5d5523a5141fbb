"""
Prepared statement handles.

A ``Statement`` pins one SQL text to one connection. sqlite3 keeps its own
compiled-statement cache keyed by SQL text, so the handle's job is to carry the
text, optional default bindings and the finalized flag, and to expose the same
fetch/execute shapes as the connection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Dict, List, Optional

from sqlite3po.exceptions import StatementFinalizedError
from sqlite3po.infrastructure.binding import Params, bind_params

if TYPE_CHECKING:
    from sqlite3po.infrastructure.driver import Connection, ExecutionResult


class Statement:
    """
    Handle for a statement prepared on a ``Connection``.

    Bind values given to an individual call take precedence over the defaults
    set with ``bind()``.
    """

    def __init__(self, connection: "Connection", sql: str) -> None:
        self._connection = connection
        self.sql = sql
        self._bound: Params = ()
        self._finalized = False

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "open"
        return f"<Statement {self.sql!r} ({state})>"

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check(self) -> None:
        if self._finalized:
            raise StatementFinalizedError(f"Statement has been finalized: {self.sql}")

    def _params(self, params: tuple) -> Params:
        self._check()
        return bind_params(params) if params else self._bound

    def bind(self, *params: Any) -> "Statement":
        """Set default bind values for subsequent calls."""
        self._check()
        self._bound = bind_params(params)
        return self

    def reset(self) -> "Statement":
        """Drop default bind values."""
        self._check()
        self._bound = ()
        return self

    def finalize(self) -> None:
        """Release the handle; any further use raises ``StatementFinalizedError``."""
        self._finalized = True

    async def ready(self) -> "Statement":
        """Compile the statement against the current schema."""
        self._check()
        await self._connection.compile(self.sql)
        return self

    async def run(self, *params: Any) -> "ExecutionResult":
        return await self._connection.execute(self.sql, self._params(params))

    execute = run

    async def fetch_one(self, *params: Any) -> Optional[Dict[str, Any]]:
        return await self._connection.fetch_one(self.sql, self._params(params))

    async def fetch_all(self, *params: Any) -> List[Dict[str, Any]]:
        return await self._connection.fetch_all(self.sql, self._params(params))

    async def iterate(self, *params: Any) -> AsyncIterator[Dict[str, Any]]:
        async for row in self._connection.iterate(self.sql, self._params(params)):
            yield row

    async def for_each_row(self, callback: Callable[[Dict[str, Any]], Any], *params: Any) -> int:
        return await self._connection.for_each_row(self.sql, callback, self._params(params))


__all__ = ["Statement"]
