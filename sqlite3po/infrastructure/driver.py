"""
Asynchronous SQLite connection facade.

Wraps an ``aiosqlite`` connection with the small set of coroutine methods the
schema-binding layer relies on: execute-for-side-effect, fetch-one, fetch-all,
row iteration, script execution and statement preparation. Rows come back as
plain dicts, and connections are opened in autocommit mode so every statement is
durable once its coroutine resolves.

Opening a connection retries transient ``sqlite3.OperationalError`` failures
(locked or temporarily unavailable database files) using tenacity.
"""

from __future__ import annotations

import inspect
import sqlite3
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import aiosqlite
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sqlite3po.config import Settings, get_settings
from sqlite3po.exceptions import StatementPreparationError
from sqlite3po.infrastructure.binding import bind_params, placeholder_params
from sqlite3po.infrastructure.statement import Statement
from sqlite3po.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of a statement executed for its side effects.

    Attributes
    ----------
    last_row_id : int | None
        Row identifier assigned by the most recent INSERT on this cursor.
    changes : int
        Number of rows modified (-1 for statements that do not report it, e.g. DDL).
    """

    last_row_id: Optional[int]
    changes: int


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=retry_if_exception_type(sqlite3.OperationalError),
    reraise=True,
)
async def _open_raw(path: str, timeout: float) -> aiosqlite.Connection:
    """
    Open an autocommit aiosqlite connection with automatic retry.

    Raises
    ------
    sqlite3.OperationalError
        If the database cannot be opened after all retry attempts.
    """
    connection = await aiosqlite.connect(path, timeout=timeout, isolation_level=None)
    connection.row_factory = aiosqlite.Row
    return connection


class Connection:
    """
    Coroutine-based access to one SQLite database.

    Use ``await Connection.open(path)`` or ``async with Connection.connect(path)``
    rather than instantiating directly.
    """

    def __init__(
        self,
        connection: aiosqlite.Connection,
        path: str = ":memory:",
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self._conn = connection
        self.path = path
        self.settings = settings or get_settings()
        self._closed = False

    @classmethod
    async def open(cls, path: Optional[str] = None, *, settings: Optional[Settings] = None):
        """
        Open a database file (``:memory:`` for a private in-memory database).

        Parameters
        ----------
        path : str, optional
            Database path. Defaults to ``Settings.database_path``.
        settings : Settings, optional
            Overrides the cached process-wide settings.
        """
        settings = settings or get_settings()
        target = path or settings.database_path
        opener = _open_raw.retry_with(stop=stop_after_attempt(max(1, settings.connect_attempts)))
        raw = await opener(target, settings.connect_timeout)
        log.debug("Opened database", extra={"path": target})
        return cls(raw, target, settings=settings)

    @classmethod
    @asynccontextmanager
    async def connect(cls, path: Optional[str] = None, *, settings: Optional[Settings] = None):
        """
        Async context manager that opens a database and closes it on exit.

        Example
        -------
            async with Database.connect("app.db") as db:
                await db.execute("CREATE TABLE t (x)")
        """
        db = await cls.open(path, settings=settings)
        try:
            yield db
        finally:
            await db.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._conn.close()
        log.debug("Closed database", extra={"path": self.path})

    async def execute(self, sql: str, *params: Any) -> ExecutionResult:
        """Run a statement for its side effects."""
        bound = bind_params(params)
        log.debug(f"Running statement {sql}", extra={"bind": bound})
        async with self._conn.execute(sql, bound) as cursor:
            return ExecutionResult(last_row_id=cursor.lastrowid, changes=cursor.rowcount)

    run = execute

    async def execute_script(self, sql: str) -> None:
        """Run several ``;``-separated statements without bind values."""
        log.debug("Running script", extra={"sql": sql})
        await self._conn.executescript(sql)

    async def fetch_one(self, sql: str, *params: Any) -> Optional[Dict[str, Any]]:
        """Return the first result row, or None if the query matched nothing."""
        bound = bind_params(params)
        log.debug(f"Fetching one: {sql}", extra={"bind": bound})
        async with self._conn.execute(sql, bound) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        """Return every result row in the order the database produced them."""
        bound = bind_params(params)
        log.debug(f"Fetching all: {sql}", extra={"bind": bound})
        async with self._conn.execute(sql, bound) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def iterate(self, sql: str, *params: Any) -> AsyncIterator[Dict[str, Any]]:
        """Yield result rows one at a time."""
        bound = bind_params(params)
        async with self._conn.execute(sql, bound) as cursor:
            async for row in cursor:
                yield dict(row)

    async def for_each_row(
        self, sql: str, callback: Callable[[Dict[str, Any]], Any], *params: Any
    ) -> int:
        """
        Invoke ``callback`` once per result row and return the number of rows.

        ``callback`` may be a plain function or a coroutine function. It receives
        only the row; query and callback failures propagate as exceptions.
        """
        count = 0
        async for row in self.iterate(sql, *params):
            outcome = callback(row)
            if inspect.isawaitable(outcome):
                await outcome
            count += 1
        return count

    async def compile(self, sql: str) -> None:
        """
        Check that ``sql`` compiles against the current schema without running it.

        Raises
        ------
        StatementPreparationError
            If SQLite rejects the statement (syntax error, unknown table/column).
        """
        try:
            async with self._conn.execute(f"EXPLAIN {sql}", placeholder_params(sql)) as cursor:
                await cursor.fetchall()
        except sqlite3.Error as exc:
            raise StatementPreparationError(sql, exc) from exc

    def prepare(self, sql: str) -> Statement:
        """Return a statement handle immediately; see ``prepare_async`` for readiness."""
        return Statement(self, sql)

    async def prepare_async(self, sql: str) -> Statement:
        """Return a statement handle once it is known to compile."""
        statement = self.prepare(sql)
        await statement.ready()
        log.debug(f"Prepared statement {sql}")
        return statement


__all__ = ["Connection", "ExecutionResult"]
