"""Logging utilities."""

import logging
import sys
from typing import Optional


# Client libraries that log every HTTP request at DEBUG
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "github")


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging for the review bot.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string

    Returns:
        Configured logger
    """
    if format_str is None:
        format_str = "[%(asctime)s] %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger("review_bot")
    logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    return logger


def get_logger(name: str = "review_bot") -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
