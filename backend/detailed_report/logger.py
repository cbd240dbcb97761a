"""
Logging setup for the report service.

Every module takes its own logger with ``logging.getLogger(__name__)``;
this module only attaches the console handler to the package logger once.
"""

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("detailed_report")


def configure_logging(level: str = None) -> logging.Logger:
    logger.setLevel(level or settings.log_level)
    if not any(getattr(h, '_detailed_report', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._detailed_report = True
        logger.addHandler(handler)
    return logger


__all__ = ["logger", "configure_logging", "LOG_FORMAT"]
