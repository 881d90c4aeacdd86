from pydantic import BaseModel, field_validator

from shared.constants import (
    TILE_CACHE_DIR,
    TILE_CACHE_LIFETIME_S,
    TILE_CACHE_MAX_ENTRIES,
)


class CacheSettings(BaseModel):
    """Настройки дискового кэша тайлов."""

    model_config = {
        'extra': 'ignore',  # игнорировать лишние поля из профилей
    }

    # Каталог кэша (плоский, без подкаталогов)
    cache_dir: str = str(TILE_CACHE_DIR)
    # Время жизни тайла (секунды)
    lifetime_s: int = TILE_CACHE_LIFETIME_S
    # Максимальное число тайлов (None - без ограничения)
    max_entries: int | None = TILE_CACHE_MAX_ENTRIES
    # Создавать каталог кэша, если его нет
    create_dir: bool = True

    @field_validator('cache_dir')
    @classmethod
    def validate_cache_dir(cls, v):
        v = str(v).strip()
        if not v:
            msg = 'cache_dir не может быть пустым'
            raise ValueError(msg)
        return v

    @field_validator('lifetime_s')
    @classmethod
    def validate_lifetime(cls, v):
        v = int(v)
        if v < 0:
            msg = 'lifetime_s не может быть отрицательным'
            raise ValueError(msg)
        return v

    @field_validator('max_entries')
    @classmethod
    def validate_max_entries(cls, v):
        if v is None:
            return v
        v = int(v)
        if v < 1:
            msg = 'max_entries должен быть >= 1 или не задан'
            raise ValueError(msg)
        return v
