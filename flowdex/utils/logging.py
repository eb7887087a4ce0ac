"""
Logging setup.

Configures loguru sinks for the indexer process.
"""

import sys

from loguru import logger

from flowdex.config.settings import settings


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure logger with stderr output and optional file rotation.

    Args:
        level: Minimum level (defaults to settings.log_level)
        log_file: Log file path (defaults to settings.log_file)
    """
    level = level or settings.log_level
    log_file = log_file if log_file is not None else settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )

    logger.info("Starting flowdex indexer...")
