"""
NDC Fare Engine - Logging Setup
Configures the loguru sink from settings
"""

import sys
from typing import Optional

from loguru import logger

from app.core.config import settings


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Replace the default loguru sink with one driven by LOG_LEVEL / LOG_FORMAT."""
    level = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT

    logger.remove()
    if fmt == "json":
        logger.add(sys.stderr, level=level, serialize=True, backtrace=False)
    else:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                   "<level>{level: <8}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        )
    logger.debug(f"Logging configured: level={level}, format={fmt}")
