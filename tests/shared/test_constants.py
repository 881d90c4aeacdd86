"""Tests for shared constants and portable-mode paths."""

import sys

from shared import constants
from shared.portable import is_portable_mode, portable_root


class TestKeyConstants:
    """Tests for tile key constants."""

    def test_key_length(self):
        """File names are 16 + 16 + 2 characters."""
        assert constants.TILE_KEY_LENGTH == 34

    def test_limits(self):
        """Coordinates span 64 bits, zoom two decimal digits."""
        assert constants.TILE_KEY_MAX_COORD == 2**64 - 1
        assert constants.TILE_KEY_MAX_ZOOM == 99

    def test_tmp_prefix_is_not_a_cache_name(self):
        """Temp files written during put are never indexed."""
        from tiles.keys import is_cache_name

        assert not is_cache_name(constants.TILE_TMP_PREFIX + '0' * 34)


class TestCacheDir:
    """Tests for default cache directory resolution."""

    def test_default_cache_dir_uses_localappdata(self, tmp_path, monkeypatch):
        """Outside portable mode the cache lives under LOCALAPPDATA."""
        monkeypatch.setattr(sys, 'argv', ['tile-cache'])
        monkeypatch.setenv('LOCALAPPDATA', str(tmp_path))
        assert constants.default_cache_dir() == tmp_path / 'SK42mapper' / '.cache' / 'tiles'

    def test_portable_cache_dir(self, tmp_path, monkeypatch):
        """In portable mode the cache lives next to the executable."""
        exe = tmp_path / 'tile-cache_portable.exe'
        monkeypatch.setattr(sys, 'argv', [str(exe)])
        assert is_portable_mode()
        assert portable_root() == tmp_path.resolve()
        assert constants.default_cache_dir() == tmp_path.resolve() / 'cache' / 'tiles'

    def test_not_portable(self, monkeypatch):
        """A plain executable name has no portable root."""
        monkeypatch.setattr(sys, 'argv', ['tile-cache'])
        assert not is_portable_mode()
        assert portable_root() is None
