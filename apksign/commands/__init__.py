"""Commands module for apksign."""

from .sign import resolve_apks_dir, sign_apks

__all__ = [
    'resolve_apks_dir',
    'sign_apks',
]
