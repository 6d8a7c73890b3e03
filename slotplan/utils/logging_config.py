"""
Logging setup for callers embedding slotplan.

The package only creates module loggers; an application must call
`setup_logging()` once at startup to get output on stdout.
"""

import logging
import sys
from typing import Optional

from slotplan.config.settings import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure package-wide logging. Safe to call more than once."""
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger("slotplan")
    logger.setLevel(log_level)

    # Replace our own handler instead of stacking a new one per call
    for handler in list(logger.handlers):
        if getattr(handler, "_slotplan_handler", False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler._slotplan_handler = True
    logger.addHandler(console_handler)

    return logger
