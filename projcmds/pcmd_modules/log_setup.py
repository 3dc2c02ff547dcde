"""Logging setup for the projcmds command line."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "projcmds"
LOG_FILE_NAME = "debug.log"
_MAX_LOG_LINES = 1000
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(
    data_dir: Path,
    *,
    verbose: bool = False,
) -> logging.Logger:
    """Set up file-based debug logging plus a stderr handler.

    The debug log under data_dir is truncated to its last
    _MAX_LOG_LINES lines on startup. Safe to call more than once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Don't add handlers if already configured
    if logger.handlers:
        _set_console_level(logger, verbose=verbose)
        return logger

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)
    _set_console_level(logger, verbose=verbose)

    log_file = data_dir / LOG_FILE_NAME
    try:
        data_dir.mkdir(parents=True, exist_ok=True)

        if log_file.exists():
            try:
                lines = log_file.read_text().splitlines()
                if len(lines) > _MAX_LOG_LINES:
                    log_file.write_text(
                        "\n".join(lines[-_MAX_LOG_LINES:]) + "\n",
                    )
            except OSError:
                pass

        handler = logging.FileHandler(str(log_file))
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    except OSError:
        # If we can't write logs, continue without them
        pass

    return logger


def _set_console_level(
    logger: logging.Logger,
    *,
    verbose: bool,
) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
