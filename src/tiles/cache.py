"""Flat-directory tile cache with age expiry and oldest-first eviction.

This module provides TileCache class for storing and retrieving map tiles
as individual files named by their tile key in a single directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from shared.constants import TILE_CACHE_LIFETIME_S, TILE_TMP_PREFIX
from tiles.errors import CacheIOError, InvalidCoordinateError
from tiles.eviction import EvictionPolicy
from tiles.keys import CacheEntry, TileKey, decode, encode
from tiles.scanner import ScanResult, scan_directory

if TYPE_CHECKING:
    from collections.abc import Callable

    from domain.models import CacheSettings
    from tiles.index import CacheIndex

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Statistics about the tile cache."""

    total_tiles: int
    total_size_bytes: int
    tiles_by_zoom: dict[int, int]
    oldest_tile: float | None
    newest_tile: float | None


@dataclass
class RefreshReport:
    """Result of an expiry pass."""

    removed: list[CacheEntry] = field(default_factory=list)
    errors: list[CacheIOError] = field(default_factory=list)


class TileCache:
    """Tile cache over one flat directory.

    Features:
    - Index rebuilt from the directory on open and on root change
    - Age expiry on refresh(), deleting expired files
    - Optional entry cap, evicting the oldest entry on insert
    - One lock around every public operation

    Usage:
        cache = TileCache('/tmp/tiles', lifetime_s=3600, max_entries=1000)
        cache.put(TileKey(100, 200, 15), tile_bytes)
        path = cache.get_path(TileKey(100, 200, 15))
        cache.refresh()
    """

    def __init__(
        self,
        cache_dir: str | Path,
        lifetime_s: float = TILE_CACHE_LIFETIME_S,
        max_entries: int | None = None,
        *,
        create: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Open the cache and index the files already in cache_dir.

        Args:
            cache_dir: Cache directory.
            lifetime_s: Maximum entry age in seconds.
            max_entries: Entry cap, or None for unbounded.
            create: Create cache_dir if it does not exist.
            clock: Wall-clock source for entry timestamps and expiry.

        Raises:
            RootUnavailableError: cache_dir is unusable.
        """
        self.policy = EvictionPolicy(lifetime_s, max_entries)
        self._clock = clock
        self._lock = threading.RLock()
        scan = scan_directory(cache_dir, create=create)
        self._root = scan.root
        self._index: CacheIndex = scan.index
        self.last_scan = scan
        logger.info(
            'TileCache opened at %s (%d entries, lifetime %ss, max %s)',
            self._root,
            len(self._index),
            lifetime_s,
            max_entries,
        )

    @classmethod
    def open(
        cls,
        cache_dir: str | Path,
        lifetime_s: float = TILE_CACHE_LIFETIME_S,
        max_entries: int | None = None,
        *,
        create: bool = True,
    ) -> TileCache:
        return cls(cache_dir, lifetime_s, max_entries, create=create)

    @classmethod
    def from_settings(cls, settings: CacheSettings, **kwargs) -> TileCache:
        return cls(
            settings.cache_dir,
            settings.lifetime_s,
            settings.max_entries,
            create=settings.create_dir,
            **kwargs,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def lifetime_s(self) -> float:
        return self.policy.lifetime_s

    @property
    def max_entries(self) -> int | None:
        return self.policy.max_entries

    def _target_path(self, key: TileKey) -> Path:
        return self._root / encode(key.x, key.y, key.zoom)

    @staticmethod
    def _lookup_key(key: TileKey | str) -> TileKey | None:
        if isinstance(key, str):
            return decode(key)
        return key

    @staticmethod
    def _store_key(key: TileKey | str) -> TileKey:
        if isinstance(key, str):
            parsed = decode(key)
            if parsed is None:
                msg = f'{key!r} is not a tile cache name'
                raise InvalidCoordinateError(msg)
            return parsed
        return TileKey(*key)

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug('Cache file %s already gone', path)
        except OSError as exc:
            raise CacheIOError(path, 'delete', str(exc)) from exc

    def _stage(self, target: Path, data: bytes | str | Path, now: float) -> Path | None:
        """Write and stamp the payload next to target.

        Returns:
            The staged temp file, or None when data already is target.
        """
        if isinstance(data, (str, Path)) and Path(data).resolve() == target.resolve():
            if not target.is_file():
                msg = f'{target} does not exist'
                raise CacheIOError(target, 'store', msg)
            try:
                os.utime(target, (now, now))
            except OSError as exc:
                raise CacheIOError(target, 'stamp', str(exc)) from exc
            return None
        tmp = self._root / f'{TILE_TMP_PREFIX}{target.name}'
        try:
            if isinstance(data, (str, Path)):
                shutil.copyfile(data, tmp)
            else:
                tmp.write_bytes(data)
            os.utime(tmp, (now, now))
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise CacheIOError(target, 'write', str(exc)) from exc
        return tmp

    def put(self, key: TileKey | str, data: bytes | str | Path) -> CacheEntry:
        """Store a tile and index it.

        The payload is staged in a temp file before any eviction, so a failed
        put leaves the directory and the index as they were.

        Args:
            key: Tile key or canonical file name.
            data: Tile payload, or path of a file to copy in. A path that
                already is root/<name> is adopted in place.

        Returns:
            The new index entry.

        Raises:
            InvalidCoordinateError: key cannot be encoded; nothing is written.
            CacheIOError: staging, evicting or moving a file failed.
        """
        tile_key = self._store_key(key)
        with self._lock:
            target = self._target_path(tile_key)
            now = self._clock()
            staged = self._stage(target, data, now)
            try:
                for _ in range(self.policy.overflow(self._index, tile_key)):
                    victim = self._index.oldest()
                    self._unlink(victim.path)
                    self._index.remove(victim.key)
                    logger.info('Evicted oldest tile %s (capacity %d)', victim.name, self.max_entries)

                if staged is not None:
                    try:
                        os.replace(staged, target)
                    except OSError as exc:
                        raise CacheIOError(target, 'write', str(exc)) from exc
            finally:
                if staged is not None:
                    staged.unlink(missing_ok=True)

            entry = CacheEntry(tile_key, target, now)
            previous = self._index.insert_or_update(entry)
            if previous is not None and previous.path != target:
                try:
                    self._unlink(previous.path)
                except CacheIOError as err:
                    logger.warning('Stale alias left on disk: %s', err)
            return entry

    def get(self, key: TileKey | str) -> bytes | None:
        """Read a cached tile.

        Raises:
            CacheIOError: the file is indexed but cannot be read.
        """
        entry = self.get_attr(key)
        if entry is None:
            return None
        try:
            return entry.path.read_bytes()
        except OSError as exc:
            raise CacheIOError(entry.path, 'read', str(exc)) from exc

    def get_path(self, key: TileKey | str) -> Path | None:
        entry = self.get_attr(key)
        return entry.path if entry is not None else None

    def get_attr(self, key: TileKey | str) -> CacheEntry | None:
        tile_key = self._lookup_key(key)
        if tile_key is None:
            return None
        with self._lock:
            return self._index.get(tile_key)

    def exists(self, key: TileKey | str) -> bool:
        return self.get_attr(key) is not None

    def delete(self, key: TileKey | str) -> bool:
        """Remove a tile from disk and from the index.

        Returns:
            True if the tile was cached.

        Raises:
            CacheIOError: the file could not be deleted; the entry stays.
        """
        tile_key = self._lookup_key(key)
        if tile_key is None:
            return False
        with self._lock:
            entry = self._index.get(tile_key)
            if entry is None:
                return False
            self._unlink(entry.path)
            self._index.remove(tile_key)
            return True

    def refresh(self) -> RefreshReport:
        """Delete every entry older than the configured lifetime.

        A failed delete is reported and the entry is kept; the pass goes on.
        """
        report = RefreshReport()
        with self._lock:
            now = self._clock()
            for entry in self.policy.expired(self._index, now):
                try:
                    self._unlink(entry.path)
                except CacheIOError as err:
                    logger.warning('%s', err)
                    report.errors.append(err)
                    continue
                self._index.remove(entry.key)
                report.removed.append(entry)
        logger.info(
            'Refresh: %d expired tiles removed, %d failures',
            len(report.removed),
            len(report.errors),
        )
        return report

    def set_root(self, cache_dir: str | Path, create: bool = False) -> ScanResult:
        """Switch to another directory and rebuild the index from it.

        Raises:
            RootUnavailableError: the new root is unusable; the cache keeps
                its current root and index.
        """
        with self._lock:
            scan = scan_directory(cache_dir, create=create)
            self._root = scan.root
            self._index = scan.index
            self.last_scan = scan
        logger.info('TileCache root changed to %s (%d entries)', scan.root, len(scan.index))
        return scan

    def entries(self) -> list[CacheEntry]:
        """Snapshot of all entries, oldest first."""
        with self._lock:
            return list(self._index)

    def get_stats(self) -> CacheStats:
        """Get cache statistics from the index and file sizes on disk."""
        entries = self.entries()
        total_size = 0
        for entry in entries:
            try:
                total_size += entry.path.stat().st_size
            except OSError as exc:
                logger.warning('Cannot stat %s: %s', entry.path, exc)
        return CacheStats(
            total_tiles=len(entries),
            total_size_bytes=total_size,
            tiles_by_zoom=dict(Counter(e.key.zoom for e in entries)),
            oldest_tile=entries[0].last_modified if entries else None,
            newest_tile=entries[-1].last_modified if entries else None,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (TileKey, str)):
            return False
        return self.exists(key)

    def __repr__(self) -> str:
        return (
            f'TileCache(root={str(self._root)!r}, lifetime_s={self.lifetime_s}, '
            f'max_entries={self.max_entries}, entries={len(self._index)})'
        )

    def __enter__(self) -> TileCache:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        logger.info('TileCache at %s closed', self._root)
