"""Logging configuration for apksign."""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler
from rich.console import Console


# Shared by log output and the status lines printed by commands
console = Console()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Route apksign logging to the Rich console and, optionally, a log file.

    Per-APK signing results are logged at INFO, tool invocations
    (zipalign/apksigner command lines) at DEBUG.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file (logging.file_path in config)
        format_string: Optional format string for the file handler
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Replaces any handlers left by an earlier setup
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
    )
    rich_handler.setLevel(numeric_level)
    root_logger.addHandler(rich_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(format_string))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name (typically __name__)."""
    return logging.getLogger(name)


def mask_secret(secret: str, visible_chars: int = 2) -> str:
    """
    Mask a keystore or key password before it is logged.

    apksigner takes passwords on the command line as ``pass:<password>``;
    debug logging of those command lines goes through this function.

    Args:
        secret: The password to mask
        visible_chars: Number of characters to show at start and end

    Returns:
        str: Masked string (e.g., "se...23"), or "***" for short secrets
    """
    if not secret or len(secret) <= visible_chars * 2:
        return "***"

    return f"{secret[:visible_chars]}...{secret[-visible_chars:]}"
