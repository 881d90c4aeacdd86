"""Command-line entry point for the tile cache."""

import argparse
import logging
import sys
from pathlib import Path

from domain.models import CacheSettings
from domain.profiles import load_profile
from shared.constants import LOG_FORMAT
from tiles.cache import TileCache
from tiles.errors import TileCacheError
from tiles.keys import decode, encode, make_key

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISS = 1
EXIT_ERROR = 2


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Configure logging to stdout and, optionally, a log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tile-cache',
        description='Inspect and maintain a flat-directory map tile cache.',
    )
    parser.add_argument('--profile', help='TOML profile name or path')
    parser.add_argument('--cache-dir', help='Cache directory')
    parser.add_argument('--lifetime', type=int, help='Tile lifetime, seconds')
    parser.add_argument('--max-entries', type=int, help='Maximum number of tiles')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('--log-file', help='Also write the log to this file')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('stats', help='Show cache statistics')
    sub.add_parser('refresh', help='Delete expired tiles')

    put = sub.add_parser('put', help='Store a file under a tile key')
    put.add_argument('file', type=Path)
    _add_coords(put)

    get = sub.add_parser('get', help='Print the cached file path of a tile')
    _add_coords(get)

    key = sub.add_parser('key', help='Print the cache file name of a tile')
    _add_coords(key)

    dec = sub.add_parser('decode', help='Decode a cache file name')
    dec.add_argument('name')
    return parser


def _add_coords(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('x', type=int)
    parser.add_argument('y', type=int)
    parser.add_argument('zoom', type=int)


def resolve_settings(args: argparse.Namespace) -> CacheSettings:
    """Profile (or defaults) overridden by explicit command-line options."""
    settings = load_profile(args.profile) if args.profile else CacheSettings()
    overrides = {
        'cache_dir': args.cache_dir,
        'lifetime_s': args.lifetime,
        'max_entries': args.max_entries,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = CacheSettings.model_validate(settings.model_dump() | overrides)
    return settings


def _run_cache_command(args: argparse.Namespace, cache: TileCache) -> int:
    if args.command == 'stats':
        stats = cache.get_stats()
        print(f'root:    {cache.root}')
        print(f'tiles:   {stats.total_tiles}')
        print(f'bytes:   {stats.total_size_bytes}')
        for zoom, count in sorted(stats.tiles_by_zoom.items()):
            print(f'  z{zoom:02d}: {count}')
        print(f'oldest:  {stats.oldest_tile}')
        print(f'newest:  {stats.newest_tile}')
        return EXIT_OK

    if args.command == 'refresh':
        report = cache.refresh()
        print(f'removed: {len(report.removed)}')
        for err in report.errors:
            print(f'error:   {err}', file=sys.stderr)
        return EXIT_MISS if report.errors else EXIT_OK

    key = make_key(args.x, args.y, args.zoom)
    if args.command == 'put':
        entry = cache.put(key, args.file)
        print(entry.path)
        return EXIT_OK

    path = cache.get_path(key)
    if path is None:
        return EXIT_MISS
    print(path)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        if args.command == 'key':
            print(encode(args.x, args.y, args.zoom))
            return EXIT_OK
        if args.command == 'decode':
            key = decode(args.name)
            if key is None:
                print(f'not a tile cache name: {args.name}', file=sys.stderr)
                return EXIT_MISS
            print(f'{key.x} {key.y} {key.zoom}')
            return EXIT_OK

        settings = resolve_settings(args)
        with TileCache.from_settings(settings) as cache:
            return _run_cache_command(args, cache)
    except (TileCacheError, FileNotFoundError, ValueError) as exc:
        logger.error('%s', exc)
        print(f'error: {exc}', file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
