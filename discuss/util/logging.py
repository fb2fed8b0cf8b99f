"""Logging configuration for the comment engine.

Spans and structured events go through logfire; this only sets up the
stdlib root logger that logfire's console output and third-party libraries
share.
"""

import logging
import sys

from discuss.config import Settings

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "dishka")


def log_level(settings: Settings) -> int:
    """Level for the engine's own loggers.

    Debug wins; production only reports warnings; everything else is INFO.
    """
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "production":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Configure the root logger for the session.

    Args:
        settings: Application settings
    """
    level = log_level(settings)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger("discuss").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )
