"""Logging utilities for the eurofx package."""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "eurofx") -> logging.Logger:
    """Return a module-level logger configured with a simple formatter.

    The root level is read once from ``EUROFX_LOG_LEVEL`` (default ``INFO``).
    """
    global _LOGGER
    if _LOGGER is None:
        level_name = os.getenv("EUROFX_LOG_LEVEL", "INFO").strip().upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger(name)
    return logging.getLogger(name)
