from __future__ import annotations

import sys

from loguru import logger

from .settings import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

_configured = False

def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level or settings.ATHLETICS_LOG_LEVEL)
    _configured = True
