"""
Registry of bound classes for one database.

Each class maps to exactly one ``Repository``; binding a class again replaces its
entry, so the registry never holds two identity maps for the same class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Type

from sqlite3po.exceptions import SchemaError

if TYPE_CHECKING:
    from sqlite3po.orm.repository import Repository


class SchemaRegistry:
    def __init__(self) -> None:
        self._repositories: Dict[type, "Repository[Any]"] = {}

    def __contains__(self, entity: object) -> bool:
        return entity in self._repositories

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)

    def register(
        self, entity: Type[Any], repository: "Repository[Any]"
    ) -> Optional["Repository[Any]"]:
        """Install ``repository`` for ``entity`` and return the one it replaced, if any."""
        previous = self._repositories.get(entity)
        self._repositories[entity] = repository
        return previous

    def get(self, entity: Type[Any]) -> "Repository[Any]":
        try:
            return self._repositories[entity]
        except KeyError:
            raise SchemaError(f"Class {entity.__name__} is not bound to a table") from None

    def remove(self, entity: Type[Any]) -> Optional["Repository[Any]"]:
        return self._repositories.pop(entity, None)

    def repositories(self) -> List["Repository[Any]"]:
        return list(self._repositories.values())

    def clear(self) -> None:
        self._repositories.clear()


__all__ = ["SchemaRegistry"]
