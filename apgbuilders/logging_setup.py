from __future__ import annotations

import logging

LOGGER_NAME = "apgbuilders"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach one console handler to the package logger.

    Records still propagate to the root logger, so test capture and any
    host-level configuration keep working.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level if isinstance(level, int) else str(level).upper())

    # Avoid duplicate handlers when create_app() runs more than once
    for handler in list(logger.handlers):
        if getattr(handler, "_apgbuilders", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler._apgbuilders = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
