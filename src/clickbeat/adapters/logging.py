"""Python logging setup for the clickbeat service.

Configures the ``clickbeat`` logger hierarchy from the ``log_level``
setting. At debug level each line also names the source file and line.
"""

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"

# Accepted names for log_level, mapped to logging levels
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(name: str) -> int:
    """Map a log_level name to a logging level, defaulting to INFO."""
    return _LEVELS.get(name.lower(), logging.INFO)


def configure_logging(level_name: str = "info") -> logging.Logger:
    """Attach a stream handler to the ``clickbeat`` logger.

    Calling it again replaces the handler instead of adding another.

    Args:
        level_name: A log_level name such as "debug" or "info".

    Returns:
        The configured package logger.
    """
    level = resolve_level(level_name)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(_DEBUG_FORMAT if level <= logging.DEBUG else _FORMAT)
    )
    logger = logging.getLogger("clickbeat")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
