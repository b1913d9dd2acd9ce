"""Logging utilities."""

import logging
import sys
from typing import Optional, Sequence


ROOT_LOGGER = "security_agent"

# HTTP client loggers emit one INFO line per request
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None,
    quiet: Sequence[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Configure logging for the services and the CLI.

    Args:
        level: Level for security_agent loggers (default: INFO)
        format_str: Custom format string
        quiet: Third-party loggers held at WARNING unless level is DEBUG

    Returns:
        The security_agent root logger
    """
    if format_str is None:
        format_str = "[%(asctime)s] %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger under the security_agent hierarchy; bare names are prefixed."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
