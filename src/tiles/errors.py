"""Exceptions raised by the tile cache."""

from __future__ import annotations

from pathlib import Path


class TileCacheError(Exception):
    """Base class for tile cache errors."""


class RootUnavailableError(TileCacheError):
    """Cache root is missing, not a directory, or cannot be listed."""

    def __init__(self, root: str | Path, reason: str) -> None:
        self.root = Path(root)
        self.reason = reason
        super().__init__(f'Cache root {self.root} unavailable: {reason}')


class InvalidCoordinateError(TileCacheError, ValueError):
    """Tile coordinate or zoom cannot be encoded as a cache key."""


class CacheIOError(TileCacheError):
    """A single cache file could not be stat'ed, read, written or deleted.

    The originating OSError is chained as ``__cause__``.
    """

    def __init__(self, path: str | Path, operation: str, detail: str = '') -> None:
        self.path = Path(path)
        self.operation = operation
        msg = f'Failed to {operation} {self.path}'
        if detail:
            msg = f'{msg}: {detail}'
        super().__init__(msg)
