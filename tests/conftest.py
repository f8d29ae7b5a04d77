"""Pytest configuration and fixtures."""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Iterable, Optional

import pytest


class RecordingSigner:
    """Signing collaborator that records every path it is asked to sign."""

    def __init__(self, fail_on: Iterable[str] = (), error: Optional[Exception] = None):
        self.fail_on = set(fail_on)
        self.error = error
        self.calls: list[Path] = []
        self._lock = threading.Lock()

    def sign(self, apk_path: Path) -> None:
        with self._lock:
            self.calls.append(Path(apk_path))
        if Path(apk_path).name in self.fail_on:
            raise self.error or RuntimeError(f"cannot sign {Path(apk_path).name}")

    @property
    def called_names(self) -> list[str]:
        return sorted(path.name for path in self.calls)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of configuration tests."""
    for name in (
        "ANDROID_HOME",
        "ANDROID_SDK_ROOT",
        "APKSIGN_APKS_DIR",
        "APKSIGN_KEYSTORE_PATH",
        "APKSIGN_KEYSTORE_PASSWORD",
        "APKSIGN_KEY_ALIAS",
        "APKSIGN_KEY_PASSWORD",
        "APKSIGN_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_apk_dir(tmp_path: Path) -> Callable[..., Path]:
    """Create an apks directory holding the given (empty) files."""

    def _make(*names: str, dirname: str = "apks") -> Path:
        directory = tmp_path / dirname
        directory.mkdir(parents=True, exist_ok=True)
        for name in names:
            (directory / name).write_bytes(b"PK\x03\x04")
        return directory

    return _make


@pytest.fixture
def recording_signer() -> RecordingSigner:
    return RecordingSigner()


@pytest.fixture
def build_tools(tmp_path: Path) -> Path:
    """Fake SDK with a single build-tools version containing apksigner."""
    build_tools_dir = tmp_path / "sdk" / "build-tools" / "34.0.0"
    build_tools_dir.mkdir(parents=True)
    (build_tools_dir / "apksigner").write_text("#!/bin/sh\n")
    return build_tools_dir


@pytest.fixture
def keystore(tmp_path: Path) -> Path:
    path = tmp_path / "release.keystore"
    path.write_bytes(b"keystore")
    return path


@pytest.fixture
def patch_signer(monkeypatch: pytest.MonkeyPatch) -> RecordingSigner:
    """Make the sign command use a RecordingSigner instead of the SDK tools."""
    signer = RecordingSigner()

    class FakeApkSigner:
        @classmethod
        def from_config(cls, config):
            return signer

    monkeypatch.setattr("apksign.commands.sign.ApkSigner", FakeApkSigner)
    return signer
