"""Domain layer - cache settings and profiles."""
from domain.models import CacheSettings
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    'CacheSettings',
    'delete_profile',
    'ensure_profiles_dir',
    'list_profiles',
    'load_profile',
    'save_profile',
]
