"""Signing module for APK batch signing operations."""

from apksign.signing.batch import find_candidates, sign_all
from apksign.signing.toolchain import ApkSigner, KeystoreSettings, find_build_tools

__all__ = [
    'ApkSigner',
    'KeystoreSettings',
    'find_build_tools',
    'find_candidates',
    'sign_all',
]
