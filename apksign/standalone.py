"""Standalone entry point: sign the APKs in ./apks with the default configuration."""

import sys
from pathlib import Path

from apksign.commands import sign_apks
from apksign.config import ConfigManager
from apksign.logger import setup_logging, console
from apksign.utils.exceptions import ApkSignError


def main():
    """Sign every APK in the configured apks directory. Takes no arguments."""
    try:
        config_manager = ConfigManager()
        logging_config = config_manager.config.logging
        setup_logging(
            level=logging_config.level,
            log_file=Path(logging_config.file_path) if logging_config.file_enabled else None,
            format_string=logging_config.format
        )
        sign_apks(config_manager)
    except ApkSignError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
