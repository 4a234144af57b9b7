"""Application logging setup.

Modules create their own ``logging.getLogger(__name__)``; entry points call
``setup_logger`` once to attach a stdout handler and pick the level.
"""

import logging
import sys
from logging import Logger, StreamHandler
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(name: str = "ledger", level: str = "INFO") -> Logger:
    """Configure root logging and return the named logger.

    Unknown level names fall back to INFO.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,
    )
    return logging.getLogger(name)
