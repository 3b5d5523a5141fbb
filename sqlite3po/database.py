"""
Database handle with schema binding.

``Database`` is the async SQLite connection plus a registry of bound classes.
Binding a class creates (or extends) its table and returns the ``Repository``
through which instances are saved, fetched and evicted:

    async with Database.connect(":memory:") as db:
        dummies = await db.bind_schema(Dummy, "dummy", {"text": "varchar(255)"})
        await dummies.save(Dummy("Bazinga"))
"""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping, Optional, Type, TypeVar

import aiosqlite

from sqlite3po.config import Settings
from sqlite3po.infrastructure.driver import Connection
from sqlite3po.orm.registry import SchemaRegistry
from sqlite3po.orm.repository import Repository
from sqlite3po.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class Database(Connection):
    """Async SQLite connection that can bind entity classes to tables."""

    def __init__(
        self,
        connection: aiosqlite.Connection,
        path: str = ":memory:",
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(connection, path, settings=settings)
        self.registry = SchemaRegistry()

    def bind_schema(
        self,
        entity: Type[T],
        table: str,
        attributes: Mapping[str, str],
        *,
        factory: Optional[Callable[[], T]] = None,
        optimistic_eviction: Optional[bool] = None,
    ) -> Awaitable[Repository[T]]:
        """
        Bind ``entity`` to ``table`` with the given column declarations.

        The attribute map is validated before anything is scheduled, so a
        reserved ``id`` attribute raises ``SchemaError`` from this call itself;
        the returned awaitable performs the DDL and statement preparation.

        Parameters
        ----------
        entity : type
            Class implementing ``serialize()`` and ``deserialize(row)``.
        table : str
            Table name.
        attributes : Mapping[str, str]
            Column name to column type, e.g. ``{"text": "varchar(255)"}``.
        factory : callable, optional
            Builds bare instances for rows fetched for the first time.
        optimistic_eviction : bool, optional
            Overrides ``Settings.optimistic_eviction`` for this binding.

        Returns
        -------
        Awaitable[Repository]
            Resolves to the repository once the table is ready.
        """
        if optimistic_eviction is None:
            optimistic_eviction = self.settings.optimistic_eviction
        repository = Repository(
            self,
            entity,
            table,
            attributes,
            factory=factory,
            optimistic_eviction=optimistic_eviction,
        )
        return self._bind(entity, repository)

    async def _bind(self, entity: Type[T], repository: Repository[T]) -> Repository[T]:
        await repository.setup()
        previous = self.registry.register(entity, repository)
        if previous is not None:
            log.info(
                f"Re-bound class {entity.__name__} with table {repository.table}",
                extra={"table": repository.table},
            )
            previous.close()
        return repository

    def repository(self, entity: Type[T]) -> Repository[T]:
        """Return the repository bound to ``entity``; raises ``SchemaError`` if there is none."""
        return self.registry.get(entity)

    def unbind(self, entity: Type[T]) -> None:
        repository = self.registry.remove(entity)
        if repository is not None:
            repository.close()

    async def close(self) -> None:
        for repository in self.registry.repositories():
            repository.close()
        self.registry.clear()
        await super().close()


__all__ = ["Database"]
