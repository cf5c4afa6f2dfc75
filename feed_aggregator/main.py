"""
Main entry point for the feed aggregator.
Loads configuration, runs the pipeline and writes the snapshot.
"""
import argparse
import logging
import os
import sys
import time
from json.decoder import JSONDecodeError
from typing import Optional

from . import __version__
from .config_manager import ConfigManager
from .exceptions import EmptySnapshotError
from .models import Snapshot, SnapshotStatus
from .pipeline import FeedPipeline
from .scheduler import initialize_scheduler
from .storage_manager import SnapshotWriter
from .utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 1
EXIT_EMPTY_SNAPSHOT = 2


def run_once(pipeline: FeedPipeline, writer: SnapshotWriter, fail_on_empty: bool = False) -> Snapshot:
    """
    Run the pipeline once and write its snapshot.

    Args:
        pipeline: Configured FeedPipeline
        writer: SnapshotWriter for the output file
        fail_on_empty: Treat a run without real records as an error

    Returns:
        The written snapshot

    Raises:
        EmptySnapshotError: If fail_on_empty is set and no feed produced a
            record. The previous output file is left untouched.
    """
    snapshot = pipeline.run()

    if snapshot.status is not SnapshotStatus.OK:
        if fail_on_empty:
            raise EmptySnapshotError(snapshot.status)
        logger.warning(f"Snapshot status is '{snapshot.status.value}': no feed produced any record")

    writer.write(snapshot)
    return snapshot


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Feed Aggregator - merges RSS/Atom feeds into one JSON snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  feed-aggregator                                  # Run once and write the snapshot
  feed-aggregator --schedule                       # Rerun at the configured daily times
  feed-aggregator --output public/articles.json    # Override the output path
  feed-aggregator --fail-on-empty                  # Exit with status 2 if no feed produced items
        """
    )
    parser.add_argument(
        "--config-dir",
        default="config",
        help="Path to configuration directory (default: config)"
    )
    parser.add_argument(
        "--output",
        help="Snapshot output path (overrides output.path)"
    )
    parser.add_argument(
        "--run-now",
        action="store_true",
        help="Run aggregation immediately (default when --schedule is not given)"
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Start scheduler for automatic aggregation"
    )
    parser.add_argument(
        "--fail-on-empty",
        action="store_true",
        help="Exit with a non-zero status when no feed produced any item"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Feed Aggregator v{__version__}"
    )
    return parser.parse_args(argv)


def main(argv=None) -> Optional[int]:
    """
    Main entry point for the script.
    """
    args = parse_arguments(argv)

    settings_path = os.path.join(args.config_dir, 'settings.json')
    feeds_path = os.path.join(args.config_dir, 'feeds.json')

    try:
        config_manager = ConfigManager(settings_path, feeds_path)
    except (FileNotFoundError, JSONDecodeError, ValueError, TypeError) as e:
        setup_logging(log_level='DEBUG' if args.debug else 'INFO', log_dir=None)
        logger.critical(f"Invalid configuration in {args.config_dir}: {e}")
        return EXIT_CONFIG_ERROR

    log_level = 'DEBUG' if args.debug else config_manager.get_config_value("logging.level", "INFO")
    setup_logging(log_level=log_level, log_dir=config_manager.get_config_value("logging.log_dir"))

    pipeline = FeedPipeline.from_config(config_manager)
    writer = SnapshotWriter(
        output_path=args.output or config_manager.get_config_value("output.path"),
        indent=config_manager.get_config_value("output.indent", 2),
    )
    fail_on_empty = args.fail_on_empty or config_manager.get_config_value("aggregation.fail_on_empty", False)

    if args.run_now or not args.schedule:
        try:
            run_once(pipeline, writer, fail_on_empty)
        except EmptySnapshotError as e:
            logger.critical(f"{e}; keeping the previous snapshot")
            return EXIT_EMPTY_SNAPSHOT

    if args.schedule:
        scheduler = initialize_scheduler(
            config_manager.get_config_value("schedule.times", []),
            config_manager.get_config_value("schedule.timezone", "UTC"),
            lambda: run_once(pipeline, writer, fail_on_empty),
        )
        if scheduler is None:
            logger.error("Failed to initialize scheduler.")
            return EXIT_CONFIG_ERROR

        scheduler.start()
        if not scheduler.running:
            return EXIT_CONFIG_ERROR

        logger.info("Scheduler started - Press Ctrl+C to stop")
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            logger.info("Scheduler stopped by user")
            scheduler.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
