"""Age and capacity eviction rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tiles.index import CacheIndex
    from tiles.keys import CacheEntry, TileKey


@dataclass(frozen=True)
class EvictionPolicy:
    """When cache entries must go.

    Attributes:
        lifetime_s: Maximum entry age; older entries expire on refresh.
        max_entries: Entry cap enforced on insert of a new key, or None.
    """

    lifetime_s: float
    max_entries: int | None = None

    def __post_init__(self) -> None:
        if self.lifetime_s < 0:
            msg = f'lifetime_s must be >= 0, got {self.lifetime_s}'
            raise ValueError(msg)
        if self.max_entries is not None and self.max_entries < 1:
            msg = f'max_entries must be >= 1 or None, got {self.max_entries}'
            raise ValueError(msg)

    def is_expired(self, entry: CacheEntry, now: float) -> bool:
        return entry.age(now) > self.lifetime_s

    def expired(self, index: CacheIndex, now: float) -> list[CacheEntry]:
        """Entries to drop on refresh, oldest first."""
        return index.expired(now, self.lifetime_s)

    def overflow(self, index: CacheIndex, key: TileKey) -> int:
        """Number of oldest entries to evict before inserting key.

        Updating an existing key never evicts. Normally this is 0 or 1; it is
        larger only when the index was seeded above the cap by a scan.
        """
        if self.max_entries is None or key in index:
            return 0
        return max(0, len(index) - self.max_entries + 1)
