from __future__ import annotations

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "vulnrisk_cli"
_FORMAT = "[%(asctime)s] [%(levelname)s] (%(name)s) - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(LOGGER_NAME if name is None else name)


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the package logger and set its level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    existing = [h for h in logger.handlers if getattr(h, "_vulnrisk_handler", False)]
    for handler in existing:
        # sys.stderr may have been swapped since the handler was attached.
        handler.stream = sys.stderr  # type: ignore[attr-defined]
    if not existing:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._vulnrisk_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
