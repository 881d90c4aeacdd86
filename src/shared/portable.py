"""Portable-mode lookup: data kept next to the executable."""

import sys
from pathlib import Path

PORTABLE_MARKER = '_portable'


def is_portable_mode() -> bool:
    """True when the executable name contains '_portable' (e.g. tile-cache_portable.exe)."""
    return PORTABLE_MARKER in Path(sys.argv[0]).name.lower()


def portable_root() -> Path | None:
    """Directory of the executable in portable mode, otherwise None.

    Portable layout: cache/tiles for tiles, configs/profiles for profiles.
    """
    if not is_portable_mode():
        return None
    return Path(sys.argv[0]).resolve().parent
