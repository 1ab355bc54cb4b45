"""Loguru configuration for the deterministic sifters, policy loading and CLI.

Logs go to stderr in both modes; stdout is reserved for CLI reports.
"""

import sys
from typing import Optional

from loguru import logger

from event_trust.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure loguru from settings.

    Behavior:
    - Interactive terminal with LOG_FORMAT=console: colorized lines
    - Anything else: one JSON record per line
    - LOG_LEVEL applies unless level is given

    Args:
        level: Override for settings.log_level
    """
    # Drop the default handler and any from a previous call
    logger.remove()
    level = (level or settings.log_level).upper()

    if sys.stderr.isatty() and settings.log_format.lower() == "console":
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            serialize=True,
            diagnose=False,  # no variable values in JSON records
        )

    # Records logged without get_logger still carry a component
    logger.configure(extra={"component": "event_trust"})


def get_logger(component: str):
    """
    Logger bound to a component name.

    Example:
        >>> log = get_logger("sifters.quality")
        >>> log.info("Gate passed 12 of 40 candidates")
    """
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
