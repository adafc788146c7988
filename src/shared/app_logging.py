"""Logging configuration helpers."""

import logging

_APP_LOGGERS = ("shared", "api")


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the app's loggers. Safe to call twice."""
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    for name in _APP_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level.upper())
        if logger.handlers:
            continue
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
