"""
Logging for docexpand.

Every module logs through the shared "docexpand" logger. Log records go to
stderr (and optionally a file) so that reports and registry dumps written
to stdout can be piped into other tools.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "docexpand"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _make_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: str = LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    (Re)configure a named logger from scratch.

    Existing handlers are dropped first, so calling this again for each CLI
    run never duplicates output. Unknown level names fall back to INFO.

    Args:
        name: Logger name (default: "docexpand")
        level: Level name, e.g. "DEBUG" to see per-document parse details
        log_file: Append log records to this file too (parent dirs are created)
        console_output: Write log records to stderr

    Returns:
        The configured logger

    Example:
        >>> logger = setup_logger(level="DEBUG", log_file=Path("logs/validate.log"))
        >>> logger.debug("Parsed quick-start.mdx: 9 blocks")
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    if console_output:
        logger.addHandler(_make_handler(logging.StreamHandler(sys.stderr), log_level))

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _make_handler(logging.FileHandler(log_file, mode="a", encoding="utf-8"), log_level)
        )

    # Keep records away from any root handlers an embedding app installs
    logger.propagate = False

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Look up a logger without touching its configuration."""
    return logging.getLogger(name)


_default_logger: Optional[logging.Logger] = None


def get_default_logger() -> logging.Logger:
    """
    Shared logger used at import time by every docexpand module.

    Starts at WARNING, so library use stays quiet until the CLI (or the
    caller) runs configure_logging().
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = setup_logger(level="WARNING")
    return _default_logger


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> None:
    """
    Apply the CLI's --log-level / --log-file to the shared logger.

    Modules keep a reference to the same named logger, so their level and
    handlers change in place.

    Example:
        >>> configure_logging(level="DEBUG", log_file=Path("validate.log"))
    """
    global _default_logger
    _default_logger = setup_logger(
        name=LOGGER_NAME,
        level=level,
        log_file=log_file,
        console_output=console_output,
    )
