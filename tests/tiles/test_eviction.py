"""Tests for EvictionPolicy."""

from __future__ import annotations

from pathlib import Path

import pytest

from tiles.eviction import EvictionPolicy
from tiles.index import CacheIndex
from tiles.keys import CacheEntry, TileKey


def filled_index(count: int) -> CacheIndex:
    index = CacheIndex()
    for i in range(count):
        key = TileKey(i, 0, 1)
        index.insert_or_update(CacheEntry(key, Path('/c') / key.name, float(i)))
    return index


class TestEvictionPolicy:
    """Tests for EvictionPolicy class."""

    def test_rejects_negative_lifetime(self):
        """Negative lifetime raises ValueError."""
        with pytest.raises(ValueError):
            EvictionPolicy(lifetime_s=-1)

    def test_rejects_zero_cap(self):
        """max_entries=0 raises ValueError."""
        with pytest.raises(ValueError):
            EvictionPolicy(lifetime_s=10, max_entries=0)

    def test_is_expired(self):
        """Entries expire strictly after the lifetime."""
        policy = EvictionPolicy(lifetime_s=60)
        entry = CacheEntry(TileKey(0, 0, 0), Path('/c/x'), 100.0)
        assert not policy.is_expired(entry, 160.0)
        assert policy.is_expired(entry, 160.5)

    def test_expired_uses_lifetime(self):
        """expired() returns the entries past the lifetime."""
        policy = EvictionPolicy(lifetime_s=2)
        expired = policy.expired(filled_index(5), now=5.0)
        assert [e.key.x for e in expired] == [0, 1, 2]

    def test_no_cap_never_overflows(self):
        """Without a cap nothing is evicted."""
        policy = EvictionPolicy(lifetime_s=10)
        assert policy.overflow(filled_index(100), TileKey(999, 0, 1)) == 0

    def test_new_key_at_cap_overflows_by_one(self):
        """A new key at the cap needs one eviction."""
        policy = EvictionPolicy(lifetime_s=10, max_entries=3)
        assert policy.overflow(filled_index(2), TileKey(999, 0, 1)) == 0
        assert policy.overflow(filled_index(3), TileKey(999, 0, 1)) == 1

    def test_existing_key_never_overflows(self):
        """Updating a key needs no eviction."""
        policy = EvictionPolicy(lifetime_s=10, max_entries=3)
        assert policy.overflow(filled_index(3), TileKey(0, 0, 1)) == 0

    def test_overfull_index_overflows_to_make_room(self):
        """An overfull index evicts down to cap - 1."""
        policy = EvictionPolicy(lifetime_s=10, max_entries=2)
        assert policy.overflow(filled_index(5), TileKey(999, 0, 1)) == 4
