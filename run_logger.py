"""Logging setup for command-line runs."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(funcName)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

_installed: List[logging.Handler] = []


def install(level: int = logging.INFO, log_path: Optional[str] = None) -> None:
    """Configure the root logger for a run.

    Parameters
    ----------
    level:
        Level for the root logger and the console handler.
    log_path:
        Optional path for a rotating log file that records the full format.

    Handlers from a previous ``install`` call are removed first.
    """
    uninstall()
    logger = logging.getLogger()
    logger.setLevel(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)
    _installed.append(console)

    if log_path:
        handler = RotatingFileHandler(
            log_path, maxBytes=1_000_000, backupCount=5, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        _installed.append(handler)


def uninstall() -> None:
    """Remove the handlers added by :func:`install`."""
    logger = logging.getLogger()
    for handler in _installed:
        logger.removeHandler(handler)
        handler.close()
    _installed.clear()
