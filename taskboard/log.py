from __future__ import annotations

import sys

from loguru import logger

from taskboard.config import settings

_configured = False


def configure_logging(level: str | None = None) -> None:
  global _configured
  if _configured:
    return
  logger.remove()
  logger.add(
    sys.stderr,
    level=(level or settings.log_level).upper(),
    format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}",
    backtrace=False,
    diagnose=False,
  )
  _configured = True
