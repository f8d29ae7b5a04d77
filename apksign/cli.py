"""Command-line interface for apksign."""

from pathlib import Path
from typing import Optional

import click

from apksign.commands import sign_apks
from apksign.config import ConfigManager
from apksign.logger import setup_logging, get_logger, console
from apksign.utils.exceptions import ApkSignError

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging (DEBUG level)"
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool):
    """APK signing tasks for Android build outputs."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigManager(config_path=config)
    except ApkSignError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        ctx.exit(1)

    log_level = "DEBUG" if verbose else config_manager.config.logging.level
    log_file = None
    if config_manager.config.logging.file_enabled:
        log_file = Path(config_manager.config.logging.file_path)
    setup_logging(
        level=log_level,
        log_file=log_file,
        format_string=config_manager.config.logging.format
    )

    ctx.obj["config"] = config_manager
    logger.debug("CLI initialized successfully")


@cli.command()
@click.option(
    "--apks-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the APKs to sign (overrides signing.apks_dir)"
)
@click.pass_context
def sign(ctx: click.Context, apks_dir: Optional[Path]):
    """Sign every APK in the apks directory."""
    config_manager: ConfigManager = ctx.obj["config"]

    if apks_dir:
        config_manager.config.signing.apks_dir = str(apks_dir)

    try:
        sign_apks(config_manager)
    except ApkSignError as e:
        console.print(f"[red]Signing failed: {e}[/red]")
        ctx.exit(1)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
