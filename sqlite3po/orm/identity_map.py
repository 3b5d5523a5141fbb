"""
Per-class identity map: row identifier -> live instance.

Guarantees at most one cached instance per row of a bound class, so that
repeated fetches of the same row hand back the same object. The map never
touches the database; clearing it only invalidates the cache.
"""

from __future__ import annotations

from typing import Dict, Generic, Iterator, Optional, TypeVar

from sqlite3po.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class IdentityMap(Generic[T]):
    def __init__(self, name: str = "") -> None:
        self.name = name
        self._entries: Dict[int, T] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._entries))

    def get(self, row_id: Optional[int]) -> Optional[T]:
        if row_id is None:
            return None
        return self._entries.get(row_id)

    def set(self, row_id: Optional[int], instance: Optional[T]) -> Optional[T]:
        """
        Install ``instance`` under ``row_id``, or evict the entry when ``instance`` is None.

        Returns the instance that was passed in.
        """
        if row_id is None:
            return instance
        if instance is None:
            if self._entries.pop(row_id, None) is not None:
                log.debug(
                    f"Deleting {self.name} object with rowid {row_id}",
                    extra={"entity": self.name, "row_id": row_id},
                )
            return None

        previous = self._entries.get(row_id)
        if previous is not None and previous is not instance:
            log.debug(
                f"Replacing cached {self.name} object with rowid {row_id}",
                extra={"entity": self.name, "row_id": row_id},
            )
        else:
            log.debug(
                f"Caching new {self.name} object with rowid {row_id}",
                extra={"entity": self.name, "row_id": row_id},
            )
        self._entries[row_id] = instance
        return instance

    def clear(self) -> int:
        """Drop every entry and return how many were dropped."""
        dropped = len(self._entries)
        self._entries.clear()
        log.debug(f"Cleared {dropped} cached {self.name} objects", extra={"entity": self.name})
        return dropped


__all__ = ["IdentityMap"]
