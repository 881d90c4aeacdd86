"""Disk-backed map tile cache.

This module provides:
- TileKey / CacheEntry: tile coordinates and their cache file names
- scan_directory: index rebuild from an existing cache directory
- CacheIndex: key lookup plus oldest-first age order
- EvictionPolicy: age expiry and entry-count cap
- TileCache: the cache facade used by tile fetchers
"""

from tiles.cache import CacheStats, RefreshReport, TileCache
from tiles.errors import (
    CacheIOError,
    InvalidCoordinateError,
    RootUnavailableError,
    TileCacheError,
)
from tiles.eviction import EvictionPolicy
from tiles.index import CacheIndex
from tiles.keys import CacheEntry, TileKey, decode, encode, is_cache_name, make_key
from tiles.scanner import ScanResult, scan_directory

__all__ = [
    'CacheEntry',
    'CacheIOError',
    'CacheIndex',
    'CacheStats',
    'EvictionPolicy',
    'InvalidCoordinateError',
    'RefreshReport',
    'RootUnavailableError',
    'ScanResult',
    'TileCache',
    'TileCacheError',
    'TileKey',
    'decode',
    'encode',
    'is_cache_name',
    'make_key',
    'scan_directory',
]
