"""
Logging management module.

Every logger handed out here lives under the `refsearch_server` logger, so one
setup_logger() call configures the package, the CLI and the server alike.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOGGER_NAME = "refsearch_server"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Transport loggers of the remote client; their per-request lines drown out
# the fan-out logging unless the package itself runs at DEBUG.
NOISY_LIBRARY_LOGGERS = ("urllib3", "requests")


def _qualified_name(name: Optional[str]) -> str:
    if not name or name == "__main__":
        return DEFAULT_LOGGER_NAME
    if name == DEFAULT_LOGGER_NAME or name.startswith(DEFAULT_LOGGER_NAME + "."):
        return name
    return f"{DEFAULT_LOGGER_NAME}.{name}"


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Setup and configure logger.

    Args:
        name: Logger name; names outside the package are nested under it
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        format_string: Optional custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(_qualified_name(name))

    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for library in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(library).setLevel(library_level)

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get logger instance.

    `__main__` and bare names (e.g. "cli") map into the package hierarchy.
    """
    return logging.getLogger(_qualified_name(name))
