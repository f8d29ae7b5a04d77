"""Android SDK build-tools signing collaborator (zipalign + apksigner)."""

import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from apksign.config import Config
from apksign.logger import get_logger, mask_secret
from apksign.utils.exceptions import SigningFailure, ToolchainError

logger = get_logger(__name__)

APKS_EXTENSION = ".apks"
ZIP_ALIGNMENT = "4"
DEBUG_KEYSTORE_ALIAS = "androiddebugkey"
DEBUG_KEYSTORE_PASSWORD = "android"


def default_debug_keystore() -> Path:
    """Path of the debug keystore created by the Android tooling."""
    return Path.home() / ".android" / "debug.keystore"


@dataclass(frozen=True)
class KeystoreSettings:
    """Keystore used by apksigner."""
    path: Path
    alias: str
    password: str
    key_password: Optional[str] = None

    @classmethod
    def debug(cls) -> "KeystoreSettings":
        return cls(
            path=default_debug_keystore(),
            alias=DEBUG_KEYSTORE_ALIAS,
            password=DEBUG_KEYSTORE_PASSWORD,
            key_password=DEBUG_KEYSTORE_PASSWORD,
        )


def _version_key(name: str) -> Tuple[int, ...]:
    parts = []
    for part in name.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else -1)
    return tuple(parts)


def find_build_tools(android_home: Path, version: Optional[str] = None) -> Path:
    """
    Locate an Android SDK build-tools directory.

    Args:
        android_home: Android SDK root
        version: Exact build-tools version to use (defaults to the newest
                 installed version that ships apksigner)

    Returns:
        Path: build-tools directory

    Raises:
        ToolchainError: If no suitable build-tools directory exists
    """
    build_tools_root = Path(android_home) / "build-tools"

    if version:
        build_tools_dir = build_tools_root / version
        if not (build_tools_dir / "apksigner").exists():
            raise ToolchainError(f"apksigner not found in build-tools {version} under {build_tools_root}")
        return build_tools_dir

    if not build_tools_root.is_dir():
        raise ToolchainError(
            f"Android build-tools not found in {android_home}. "
            f"Set ANDROID_HOME or toolchain.android_home"
        )

    for build_tools_dir in sorted(build_tools_root.iterdir(), key=lambda p: _version_key(p.name), reverse=True):
        if (build_tools_dir / "apksigner").exists():
            logger.debug(f"Using build-tools: {build_tools_dir}")
            return build_tools_dir

    raise ToolchainError(f"No build-tools version with apksigner found under {build_tools_root}")


class ApkSigner:
    """Signs APKs in place with apksigner, aligning them with zipalign first."""

    def __init__(
        self,
        build_tools_dir: Path,
        keystore: Optional[KeystoreSettings] = None,
        zipalign: bool = True,
        command_timeout: Optional[float] = None
    ):
        """
        Initialize the signer.

        Args:
            build_tools_dir: Android SDK build-tools directory
            keystore: Keystore to sign with (defaults to the debug keystore)
            zipalign: Align APKs before signing
            command_timeout: Optional timeout for each tool invocation, in seconds

        Raises:
            ToolchainError: If apksigner or the keystore cannot be found
        """
        self.build_tools_dir = Path(build_tools_dir)
        self.apksigner = self.build_tools_dir / "apksigner"
        self.zipalign_binary = self.build_tools_dir / "zipalign"
        self.keystore = keystore or KeystoreSettings.debug()
        self.zipalign = zipalign
        self.command_timeout = command_timeout

        if not self.apksigner.exists():
            raise ToolchainError(f"apksigner not found in {self.build_tools_dir}")
        if not self.keystore.path.exists():
            raise ToolchainError(f"Keystore not found: {self.keystore.path}")

        logger.debug("APK signer initialized")
        logger.debug(f"  build-tools: {self.build_tools_dir}")
        logger.debug(f"  Keystore: {self.keystore.path} (alias {self.keystore.alias})")

    @classmethod
    def from_config(cls, config: Config) -> "ApkSigner":
        """Build a signer from the toolchain and keystore configuration sections."""
        toolchain = config.toolchain
        build_tools_dir = find_build_tools(
            toolchain.resolve_android_home(),
            toolchain.build_tools_version
        )

        keystore = None
        if config.keystore.path:
            if not config.keystore.alias or not config.keystore.password:
                raise ToolchainError("keystore.alias and keystore.password are required with keystore.path")
            keystore = KeystoreSettings(
                path=Path(config.keystore.path).expanduser(),
                alias=config.keystore.alias,
                password=config.keystore.password,
                key_password=config.keystore.key_password,
            )

        return cls(
            build_tools_dir,
            keystore=keystore,
            zipalign=toolchain.zipalign,
            command_timeout=toolchain.command_timeout
        )

    def sign(self, apk_path: Path) -> None:
        """
        Sign an APK in place.

        Args:
            apk_path: APK to sign

        Raises:
            SigningFailure: If the APK cannot be aligned or signed
        """
        apk_path = Path(apk_path)

        if apk_path.suffix == APKS_EXTENSION:
            raise SigningFailure({apk_path: "APK bundles (.apks) cannot be signed in place"})
        if not apk_path.is_file():
            raise SigningFailure({apk_path: "file not found"})

        if self.zipalign:
            self._zipalign(apk_path)

        logger.debug(f"Signing {apk_path.name} with {self.keystore.path.name}")
        self._run(apk_path, [str(self.apksigner), "sign", *self._key_args(), str(apk_path)])

    def _key_args(self) -> List[str]:
        args = [
            "--ks", str(self.keystore.path),
            "--ks-pass", f"pass:{self.keystore.password}",
            "--ks-key-alias", self.keystore.alias,
        ]
        if self.keystore.key_password:
            args += ["--key-pass", f"pass:{self.keystore.key_password}"]
        return args

    def _zipalign(self, apk_path: Path) -> None:
        """Align the APK in place unless it is already aligned."""
        if not self.zipalign_binary.exists():
            logger.debug(f"zipalign not found in {self.build_tools_dir}, skipping alignment")
            return

        check = self._run(
            apk_path,
            [str(self.zipalign_binary), "-c", ZIP_ALIGNMENT, str(apk_path)],
            check=False
        )
        if check.returncode == 0:
            logger.debug(f"{apk_path.name} is already aligned")
            return

        fd, tmp_name = tempfile.mkstemp(prefix=f".{apk_path.stem}-", suffix=".aligned", dir=apk_path.parent)
        os.close(fd)
        aligned = Path(tmp_name)
        try:
            self._run(
                apk_path,
                [str(self.zipalign_binary), "-p", "-f", ZIP_ALIGNMENT, str(apk_path), str(aligned)]
            )
            os.replace(aligned, apk_path)
        finally:
            if aligned.exists():
                aligned.unlink()

        logger.debug(f"{apk_path.name} aligned")

    def _run(self, apk_path: Path, cmd: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a build-tools binary for one APK.

        Raises:
            SigningFailure: If the tool cannot be launched, or exits non-zero when check is set
        """
        tool = Path(cmd[0]).name
        logger.debug(f"Executing: {' '.join(self._masked(cmd))}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.command_timeout
            )
        except subprocess.TimeoutExpired:
            raise SigningFailure({apk_path: f"{tool} timed out after {self.command_timeout}s"})
        except (OSError, subprocess.SubprocessError) as e:
            raise SigningFailure({apk_path: f"failed to run {tool}: {e}"}) from e

        if check and result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip()
            raise SigningFailure({apk_path: f"{tool} exited with code {result.returncode}: {output}"})

        return result

    def _masked(self, cmd: List[str]) -> List[str]:
        return [
            f"pass:{mask_secret(arg[len('pass:'):])}" if arg.startswith("pass:") else arg
            for arg in cmd
        ]
