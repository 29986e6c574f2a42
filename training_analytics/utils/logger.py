"""Process-wide logging setup for the analytics service."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from training_analytics.utils.config import get_settings


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_configured_level: Optional[str] = None


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler once; later calls may only change the level."""

    global _configured_level
    resolved_level = (level or get_settings().log_level).upper()

    if _configured_level is None:
        logging.basicConfig(level=resolved_level, format=_LOG_FORMAT, stream=sys.stdout)
    elif resolved_level != _configured_level:
        logging.getLogger().setLevel(resolved_level)
    _configured_level = resolved_level


def get_logger(name: str) -> logging.Logger:
    if _configured_level is None:
        configure_logging()
    return logging.getLogger(name)
