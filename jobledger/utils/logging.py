"""
Logging utilities for the Job Ledger backend.

Provides standardized logger configuration following privacy rules.

RULES:
- NEVER log Supabase Auth tokens, API keys, or secrets
- NEVER log client contact details (phone, email, address)
- Log ids, statuses and high-level events (e.g. "derived transaction created")
"""

import logging
from typing import Optional

from jobledger.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once for the application process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from jobledger.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Job status changed")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if nothing upstream will emit (avoid duplicate handlers)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
