"""Tests for the tile-cache command line."""

import os

import pytest

from main import EXIT_ERROR, EXIT_MISS, EXIT_OK, main
from tiles.keys import encode


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / 'tiles'
    path.mkdir()
    return path


class TestMain:
    def test_key(self, capsys):
        """key prints the cache file name."""
        assert main(['key', '1234', '5678', '15']) == EXIT_OK
        assert capsys.readouterr().out.strip() == encode(1234, 5678, 15)

    def test_key_out_of_range(self, capsys):
        """key rejects zoom above 99."""
        assert main(['key', '1', '2', '100']) == EXIT_ERROR
        assert 'zoom' in capsys.readouterr().err

    def test_decode(self, capsys):
        """decode prints x, y and zoom."""
        assert main(['decode', encode(1, 2, 3)]) == EXIT_OK
        assert capsys.readouterr().out.strip() == '1 2 3'

    def test_decode_foreign(self):
        """decode exits 1 on a foreign name."""
        assert main(['decode', 'not-a-tile.png']) == EXIT_MISS

    def test_put_then_get(self, cache_dir, tmp_path, capsys):
        """get prints the path stored by put."""
        src = tmp_path / 'tile.png'
        src.write_bytes(b'png')

        assert main(['--cache-dir', str(cache_dir), 'put', str(src), '1', '2', '3']) == EXIT_OK
        capsys.readouterr()
        assert main(['--cache-dir', str(cache_dir), 'get', '1', '2', '3']) == EXIT_OK

        out = capsys.readouterr().out.strip()
        assert out == str(cache_dir / encode(1, 2, 3))

    def test_get_missing(self, cache_dir):
        """get exits 1 for an uncached tile."""
        assert main(['--cache-dir', str(cache_dir), 'get', '1', '2', '3']) == EXIT_MISS

    def test_stats(self, cache_dir, capsys):
        """stats reports count, size and zoom breakdown."""
        (cache_dir / encode(1, 2, 3)).write_bytes(b'12345')
        assert main(['--cache-dir', str(cache_dir), 'stats']) == EXIT_OK
        out = capsys.readouterr().out
        assert 'tiles:   1' in out
        assert 'bytes:   5' in out
        assert 'z03: 1' in out

    def test_refresh(self, cache_dir, capsys):
        """refresh deletes expired tiles and keeps foreign files."""
        old = cache_dir / encode(1, 2, 3)
        old.write_bytes(b'x')
        os.utime(old, (0, 0))
        (cache_dir / 'readme.txt').write_text('keep')

        assert main(['--cache-dir', str(cache_dir), '--lifetime', '60', 'refresh']) == EXIT_OK

        assert 'removed: 1' in capsys.readouterr().out
        assert not old.exists()
        assert (cache_dir / 'readme.txt').exists()

    def test_max_entries_option(self, cache_dir, tmp_path):
        """--max-entries caps the directory."""
        src = tmp_path / 'tile.png'
        src.write_bytes(b'png')
        for x in range(3):
            args = ['--cache-dir', str(cache_dir), '--max-entries', '2', 'put', str(src), str(x), '0', '1']
            assert main(args) == EXIT_OK
        assert len(list(cache_dir.iterdir())) == 2

    def test_profile(self, cache_dir, tmp_path, capsys):
        """--profile supplies the cache directory."""
        profile = tmp_path / 'cache.toml'
        profile.write_text(f"cache_dir = '{cache_dir.as_posix()}'\nlifetime_s = 10\n", encoding='utf-8')
        assert main(['--profile', str(profile), 'stats']) == EXIT_OK
        assert str(cache_dir) in capsys.readouterr().out

    def test_missing_profile(self, tmp_path, monkeypatch):
        """Unknown profile exits with an error."""
        monkeypatch.setattr('domain.profiles._user_profiles_dir', lambda: tmp_path / 'profiles')
        assert main(['--profile', str(tmp_path / 'nope.toml'), 'stats']) == EXIT_ERROR

    def test_invalid_lifetime(self, cache_dir):
        """Negative --lifetime exits with an error."""
        assert main(['--cache-dir', str(cache_dir), '--lifetime', '-1', 'stats']) == EXIT_ERROR

    def test_log_file(self, cache_dir, tmp_path):
        """--log-file creates the log file."""
        log_file = tmp_path / 'log' / 'tile_cache.log'
        assert main(['--cache-dir', str(cache_dir), '-v', '--log-file', str(log_file), 'stats']) == EXIT_OK
        assert log_file.exists()
