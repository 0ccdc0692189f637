"""
Logging configuration utilities.

This module provides the standard logging setup for the converter CLI.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(
    log_file: Optional[Path] = None,
    verbose: bool = False,
    level: Optional[str] = None,
) -> None:
    """
    Configure root logging with a console handler and an optional file handler.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable DEBUG output
        level: Level name used when not verbose (default: INFO)
    """
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
