"""Custom exceptions for the apksign package."""

from pathlib import Path
from typing import Dict, Union


class ApkSignError(Exception):
    """Base exception for all apksign errors."""
    pass


class ConfigurationError(ApkSignError):
    """Raised when configuration is invalid or missing."""
    pass


class DirectoryAccessError(ApkSignError):
    """Raised when the APK directory does not exist or cannot be read."""
    pass


class NoCandidatesError(ApkSignError):
    """Raised when there are no .apk files available for signing."""

    def __init__(self, directory: Path):
        self.directory = directory
        super().__init__(
            f"There are no .apk files available for signing in '{directory}'"
        )


class ToolchainError(ApkSignError):
    """Raised when Android build-tools or their binaries cannot be found."""
    pass


class SigningFailure(ApkSignError):
    """
    Raised when one or more APKs could not be signed.

    Attributes:
        failures: Mapping of APK path to the error (or tool output) that
                  caused its signing to fail
    """

    def __init__(self, failures: Dict[Path, Union[BaseException, str]], message: str = ""):
        self.failures = dict(failures)
        if not message:
            lines = [f"Failed to sign {len(self.failures)} APK(s):"]
            for path, cause in sorted(self.failures.items()):
                lines.append(f"  {path}: {cause}")
            message = "\n".join(lines)
        super().__init__(message)


class SigningTimeoutError(SigningFailure):
    """Raised when the signing batch does not finish before its deadline."""
    pass
