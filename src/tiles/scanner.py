"""Build a CacheIndex from the files already present in a cache root."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tiles.errors import CacheIOError, RootUnavailableError
from tiles.index import CacheIndex
from tiles.keys import CacheEntry, decode

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of a directory scan.

    ``errors`` holds per-file failures (the file is left out of the index);
    ``ignored`` lists names that are not cache files or are subdirectories.
    """

    root: Path
    index: CacheIndex
    errors: list[CacheIOError] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


def ensure_root(root: str | Path, *, create: bool = False) -> Path:
    """Check that root is a usable directory, creating it when asked.

    Raises:
        RootUnavailableError: root is missing and create is False, is not a
            directory, or could not be created.
    """
    path = Path(root)
    if not path.exists():
        if not create:
            raise RootUnavailableError(path, 'does not exist')
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RootUnavailableError(path, f'cannot create: {exc}') from exc
        logger.info('Created cache directory %s', path)
    elif not path.is_dir():
        raise RootUnavailableError(path, 'not a directory')
    return path


def scan_directory(root: str | Path, *, create: bool = False) -> ScanResult:
    """Index every cache file directly under root.

    Subdirectories and foreign names are skipped. If two names decode to the
    same key (hex case variants), the one listed later wins.
    """
    path = ensure_root(root, create=create)
    result = ScanResult(root=path, index=CacheIndex())

    try:
        children = list(path.iterdir())
    except OSError as exc:
        raise RootUnavailableError(path, f'cannot list: {exc}') from exc

    for child in children:
        if child.is_dir():
            logger.debug('Skipping subdirectory %s', child)
            result.ignored.append(child.name)
            continue
        key = decode(child.name)
        if key is None or not child.is_file():
            logger.debug('Skipping non-cache file %s', child)
            result.ignored.append(child.name)
            continue
        try:
            mtime = child.stat().st_mtime
        except OSError as exc:
            err = CacheIOError(child, 'stat', str(exc))
            err.__cause__ = exc
            logger.warning('%s', err)
            result.errors.append(err)
            continue
        replaced = result.index.insert_or_update(CacheEntry(key, child, mtime))
        if replaced is not None:
            logger.warning(
                'Duplicate cache key %s: %s supersedes %s',
                key,
                child.name,
                replaced.name,
            )

    logger.info(
        'Scanned %s: %d entries, %d ignored, %d errors',
        path,
        len(result.index),
        len(result.ignored),
        len(result.errors),
    )
    return result
