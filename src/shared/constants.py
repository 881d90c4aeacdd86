import os
from pathlib import Path

from shared.portable import portable_root

# Имя каталога приложения в пользовательских директориях
APP_DIR_NAME = 'SK42mapper'

# Формат строки лога
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Имя файла лога по умолчанию
LOG_FILE_NAME = 'tile_cache.log'


def _local_app_base() -> Path:
    return Path(os.getenv('LOCALAPPDATA') or Path.home() / 'AppData' / 'Local') / APP_DIR_NAME


def default_cache_dir() -> Path:
    """Каталог кэша тайлов по умолчанию (portable-режим: рядом с exe)."""
    base = portable_root()
    if base is not None:
        return base / 'cache' / 'tiles'
    return _local_app_base() / '.cache' / 'tiles'


# Каталог кэша тайлов
TILE_CACHE_DIR = default_cache_dir()

# Время жизни тайла в кэше (секунды), 30 суток
TILE_CACHE_LIFETIME_S = 30 * 24 * 60 * 60

# Максимальное число тайлов в кэше (None - без ограничения)
TILE_CACHE_MAX_ENTRIES: int | None = None

# Число шестнадцатеричных цифр на координату тайла в имени файла
TILE_KEY_HEX_DIGITS = 16

# Число десятичных цифр зума в имени файла
TILE_KEY_ZOOM_DIGITS = 2

# Полная длина имени файла тайла
TILE_KEY_LENGTH = 2 * TILE_KEY_HEX_DIGITS + TILE_KEY_ZOOM_DIGITS

# Максимальная координата тайла, представимая 16 hex-цифрами
TILE_KEY_MAX_COORD = 16**TILE_KEY_HEX_DIGITS - 1

# Максимальный зум, представимый 2 десятичными цифрами
TILE_KEY_MAX_ZOOM = 10**TILE_KEY_ZOOM_DIGITS - 1

# Префикс временных файлов при атомарной записи (не совпадает с форматом ключа)
TILE_TMP_PREFIX = '.tmp-'
