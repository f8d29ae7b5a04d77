"""Sign command functions for apksign."""

from pathlib import Path
from typing import List

from rich.progress import Progress, SpinnerColumn, TextColumn

from apksign.config import ConfigManager
from apksign.logger import console, get_logger
from apksign.signing import ApkSigner, find_candidates, sign_all
from apksign.utils.exceptions import NoCandidatesError

logger = get_logger(__name__)


def resolve_apks_dir(config: ConfigManager) -> Path:
    """Get the directory scanned for APKs."""
    return config.get_apks_dir()


def sign_apks(config: ConfigManager, signer=None) -> List[Path]:
    """
    Sign every APK in the configured apks directory.

    Args:
        config: Loaded configuration
        signer: Signing collaborator (defaults to an ApkSigner built from config)

    Returns:
        List[Path]: The signed APKs

    Raises:
        ApkSignError: If the toolchain, directory or any signing call fails
    """
    apks_dir = resolve_apks_dir(config)
    signing = config.config.signing

    # Empty or missing apks directories are reported before the SDK lookup
    if not find_candidates(apks_dir):
        raise NoCandidatesError(apks_dir)

    if signer is None:
        signer = ApkSigner.from_config(config.config)

    console.print(f"[bold]Signing APKs in {apks_dir}[/bold]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        progress.add_task(description="Signing APKs...", total=None)
        signed = sign_all(
            apks_dir,
            signer,
            max_workers=signing.max_workers,
            timeout=signing.timeout
        )

    for apk in signed:
        console.print(f"[green]✓[/green] {apk.name}")
    console.print(f"[green]✓[/green] Signed {len(signed)} APK(s)")

    return signed
