"""Batch signing of Android APK packages."""

__version__ = "0.1.0"
