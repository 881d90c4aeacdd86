import logging
import os
from pathlib import Path

import tomlkit

from domain.models import CacheSettings
from shared.constants import APP_DIR_NAME
from shared.portable import portable_root

logger = logging.getLogger(__name__)


def _user_profiles_dir() -> Path:
    """
    Determine profiles directory.

    1) In portable mode, <app_dir>/configs/profiles.
    2) If <project_root>/configs/profiles exists, use it (run-from-repo setups).
    3) Otherwise, fall back to user APPDATA directory: %APPDATA%/SK42mapper/configs/profiles
       or ~/AppData/Roaming/SK42mapper/configs/profiles when APPDATA is not set.
    """
    base = portable_root()
    if base is not None:
        return base / 'configs' / 'profiles'

    project_root = Path(__file__).resolve().parent.parent.parent
    local_profiles = project_root / 'configs' / 'profiles'
    if local_profiles.exists():
        return local_profiles

    return (
        Path(os.getenv('APPDATA') or (Path.home() / 'AppData' / 'Roaming'))
        / APP_DIR_NAME
        / 'configs'
        / 'profiles'
    )


def ensure_profiles_dir() -> Path:
    profiles_dir = _user_profiles_dir()
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir


def list_profiles() -> list[str]:
    """Список имён профилей без расширения."""
    folder = ensure_profiles_dir()
    return sorted(p.stem for p in folder.glob('*.toml') if p.is_file())


def profile_path(name: str) -> Path:
    """Путь к файлу профиля по имени."""
    return ensure_profiles_dir() / f'{name}.toml'


def load_profile(name_or_path: str) -> CacheSettings:
    """
    Загрузка и валидация профиля TOML -> CacheSettings.

    Поддерживает как имя профиля (без .toml) из каталога profiles,
    так и абсолютный/относительный путь до TOML файла.
    """
    p = Path(name_or_path)
    path = (
        p if p.suffix.lower() == '.toml' and p.exists() else profile_path(name_or_path)
    )
    if not path.exists():
        msg = f'Профиль не найден: {path}'
        raise FileNotFoundError(msg)
    data = tomlkit.parse(path.read_text(encoding='utf-8'))
    settings = CacheSettings.model_validate(data.unwrap())
    logger.info(
        'Profile %s loaded: cache_dir=%s lifetime_s=%s max_entries=%s',
        path,
        settings.cache_dir,
        settings.lifetime_s,
        settings.max_entries,
    )
    return settings


def save_profile(name: str, settings: CacheSettings) -> Path:
    """Сохранение профиля в TOML (без атомарности и бэкапов)."""
    path = profile_path(name)
    # TOML не умеет null: max_entries=None просто не пишется
    data = settings.model_dump(exclude_none=True)
    path.write_text(tomlkit.dumps(data), encoding='utf-8')
    return path


def delete_profile(name: str) -> None:
    """Удаление файла профиля, если он существует."""
    path = profile_path(name)
    if path.exists():
        path.unlink()
