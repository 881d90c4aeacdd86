"""In-memory index of cache entries ordered by age.

CacheIndex keeps a key -> entry dict for lookups and a SortedList of
(last_modified, key) pairs for oldest-first queries. Insert, update and
remove are O(log n); re-storing a key moves it to its new position.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sortedcontainers import SortedList

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tiles.keys import CacheEntry, TileKey


class CacheIndex:
    """Key -> CacheEntry map with a total (timestamp, key) age order."""

    def __init__(self) -> None:
        self._entries: dict[TileKey, CacheEntry] = {}
        self._order: SortedList[tuple[float, TileKey]] = SortedList()

    def insert_or_update(self, entry: CacheEntry) -> CacheEntry | None:
        """Add an entry, replacing any existing one with the same key.

        Returns:
            The replaced entry, or None if the key was new.
        """
        previous = self._entries.get(entry.key)
        if previous is not None:
            self._order.remove((previous.last_modified, previous.key))
        self._order.add((entry.last_modified, entry.key))
        self._entries[entry.key] = entry
        return previous

    def remove(self, key: TileKey) -> CacheEntry | None:
        """Drop an entry; no-op for unknown keys."""
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._order.remove((entry.last_modified, entry.key))
        return entry

    def get(self, key: TileKey) -> CacheEntry | None:
        return self._entries.get(key)

    def oldest(self) -> CacheEntry | None:
        """Entry with the smallest (last_modified, key)."""
        if not self._order:
            return None
        return self._entries[self._order[0][1]]

    def newest(self) -> CacheEntry | None:
        if not self._order:
            return None
        return self._entries[self._order[-1][1]]

    def expired(self, now: float, lifetime_s: float) -> list[CacheEntry]:
        """Entries whose age exceeds lifetime_s, oldest first.

        Expired entries form a prefix of the age order, so the walk stops at
        the first entry that is still fresh.
        """
        result = []
        for last_modified, key in self._order:
            if now - last_modified <= lifetime_s:
                break
            result.append(self._entries[key])
        return result

    def clear(self) -> None:
        self._entries.clear()
        self._order.clear()

    def keys(self) -> set[TileKey]:
        return set(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        """Iterate entries oldest first."""
        for _, key in self._order:
            yield self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f'CacheIndex(entries={len(self._entries)})'
