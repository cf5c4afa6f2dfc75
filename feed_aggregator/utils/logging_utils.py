"""
Logging utilities for the feed aggregator.
Contains helper functions for consistent logging across modules.
"""
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

logger = logging.getLogger(__name__)


def log_source_success(logger: logging.Logger, source: str, records: int, duration: float) -> None:
    """
    Log a feed source that was fetched and mapped.

    Args:
        logger: Logger instance to use
        source: Feed display name
        records: Number of records mapped from the feed
        duration: Time taken for fetch and mapping
    """
    logger.info(f"[OK] {source}: {records} items ({duration:.2f}s)")
    if records == 0:
        logger.warning(f"{source} returned no RSS items or Atom entries")


def log_source_failure(logger: logging.Logger, source: str, error: str) -> None:
    """
    Log a feed source that contributed no records because of an error.

    Args:
        logger: Logger instance to use
        source: Feed display name
        error: Error message
    """
    logger.error(f"[ERR] {source}: {error}")


def log_deduplication_results(logger: logging.Logger, total: int, kept: int, duplicates: int) -> None:
    """
    Log deduplication results in a consistent format.

    Args:
        logger: Logger instance to use
        total: Total number of records merged
        kept: Number of unique records kept
        duplicates: Number of duplicates dropped
    """
    if total == 0:
        logger.info("No records to deduplicate")
        return

    duplicate_percentage = duplicates / total * 100

    logger.info(f"Deduplication results: {total} total, {kept} unique, {duplicates} duplicates ({duplicate_percentage:.1f}%)")

    if duplicates > 0:
        logger.debug(f"Dropped {duplicates} records sharing an id with an earlier source")


def log_collection_summary(logger: logging.Logger, stats: dict) -> None:
    """
    Log the summary of one aggregation run.

    Args:
        logger: Logger instance to use
        stats: Run statistics dictionary
    """
    logger.info(
        f"Run completed in {stats.get('duration_seconds', 0.0):.2f}s: "
        f"{stats.get('items', 0)} items from {stats.get('sources', 0)} sources "
        f"({stats.get('failed_sources', 0)} failed, {stats.get('duplicates_dropped', 0)} duplicates, "
        f"status {stats.get('status', 'unknown')})"
    )


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> logging.Logger:
    """
    Configure console and file logging.

    Args:
        log_level: Minimum logging level (e.g., "INFO", "DEBUG")
        log_dir: Directory to store log files; None disables the file handler

    Returns:
        The configured root logger instance.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        # File handler (daily rotation)
        file_handler = TimedRotatingFileHandler(os.path.join(log_dir, 'feed_aggregator.log'), when='midnight', interval=1, backupCount=7)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured to level {log_level.upper()}. Log files in {log_dir}")
    return root_logger
