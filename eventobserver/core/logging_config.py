"""Logging configuration for EventObserver."""

import logging
import sys

from eventobserver.core.config import ObserverConfig

PACKAGE_LOGGER = "eventobserver"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class PackageStreamHandler(logging.StreamHandler):
    """Stream handler installed by setup_logging()."""


def setup_logging(log_level: str | None = None, stream=None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling it again replaces the handler installed by the previous call
    instead of adding another one.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to ObserverConfig().log_level (EVENTOBSERVER_LOG_LEVEL).
        stream: Stream to write to. Defaults to sys.stderr.

    Returns:
        The package logger
    """
    if log_level is None:
        log_level = ObserverConfig().log_level

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, PackageStreamHandler):
            logger.removeHandler(handler)

    handler = PackageStreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(log_level.upper())
    return logger
