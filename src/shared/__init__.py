"""Shared constants and helpers."""
from shared.portable import is_portable_mode, portable_root

__all__ = [
    'is_portable_mode',
    'portable_root',
]
