"""Tile keys and their on-disk file names.

A cache file name is 16 hex digits of tile X, 16 hex digits of tile Y and
2 decimal digits of zoom, e.g. ``00000000000004d2000000000000162e15``.
Hex digits are accepted in either case; ``encode`` always emits lower case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from shared.constants import (
    TILE_KEY_HEX_DIGITS,
    TILE_KEY_MAX_COORD,
    TILE_KEY_MAX_ZOOM,
    TILE_KEY_ZOOM_DIGITS,
)
from tiles.errors import InvalidCoordinateError

_NAME_RE = re.compile(
    rf'([0-9a-fA-F]{{{TILE_KEY_HEX_DIGITS}}})'
    rf'([0-9a-fA-F]{{{TILE_KEY_HEX_DIGITS}}})'
    rf'([0-9]{{{TILE_KEY_ZOOM_DIGITS}}})'
)


class TileKey(NamedTuple):
    """Tile coordinates; orders by x, then y, then zoom."""

    x: int
    y: int
    zoom: int

    @property
    def name(self) -> str:
        """Canonical cache file name."""
        return encode(self.x, self.y, self.zoom)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CacheEntry:
    """Indexed cache file.

    ``last_modified`` is the timestamp captured when the file was scanned or
    stored; it is not re-read from disk afterwards.
    """

    key: TileKey
    path: Path
    last_modified: float

    @property
    def name(self) -> str:
        return self.path.name

    def age(self, now: float) -> float:
        return now - self.last_modified


def _check_field(value: object, upper: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f'{field} must be an integer, got {value!r}'
        raise InvalidCoordinateError(msg)
    if not 0 <= value <= upper:
        msg = f'{field}={value} is outside [0, {upper}]'
        raise InvalidCoordinateError(msg)
    return value


def encode(x: int, y: int, zoom: int) -> str:
    """Build the cache file name for a tile.

    Raises:
        InvalidCoordinateError: x or y does not fit in 16 hex digits, or zoom
            is outside [0, 99].
    """
    x = _check_field(x, TILE_KEY_MAX_COORD, 'x')
    y = _check_field(y, TILE_KEY_MAX_COORD, 'y')
    zoom = _check_field(zoom, TILE_KEY_MAX_ZOOM, 'zoom')
    return (
        f'{x:0{TILE_KEY_HEX_DIGITS}x}'
        f'{y:0{TILE_KEY_HEX_DIGITS}x}'
        f'{zoom:0{TILE_KEY_ZOOM_DIGITS}d}'
    )


def make_key(x: int, y: int, zoom: int) -> TileKey:
    """Validated TileKey constructor."""
    encode(x, y, zoom)
    return TileKey(x, y, zoom)


def decode(name: str) -> TileKey | None:
    """Parse a cache file name; None for anything that is not one."""
    m = _NAME_RE.fullmatch(name)
    if m is None:
        return None
    return TileKey(int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 10))


def is_cache_name(name: str) -> bool:
    return _NAME_RE.fullmatch(name) is not None
