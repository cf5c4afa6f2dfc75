"""
Pipeline module.
Orchestrates one aggregation run: fetch, parse, map and tag every feed,
then merge the per-source batches into a snapshot.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from .aggregator import Aggregator
from .config_manager import ConfigManager
from .exceptions import FetchError, ParseError
from .feed_mapper import FeedMapper
from .models import FeedSource, Snapshot, SourceBatch
from .rss_fetcher import FeedFetcher
from .tagger import Tagger
from .utils.logging_utils import (
    log_collection_summary,
    log_source_failure,
    log_source_success,
)
from .xml_tree import parse_xml

logger = logging.getLogger(__name__)


class FeedPipeline:
    """
    Runs the full feed aggregation for a fixed list of sources.
    """

    def __init__(self, sources: Sequence[FeedSource], fetcher: FeedFetcher, mapper: FeedMapper,
                 aggregator: Aggregator, max_workers: int = 4):
        """
        Initialize the pipeline.

        Args:
            sources: Feeds to process, in precedence order
            fetcher: FeedFetcher used for HTTP retrieval
            mapper: FeedMapper turning parsed documents into records
            aggregator: Aggregator merging the per-source batches
            max_workers: Number of feeds fetched concurrently
        """
        self.sources = list(sources)
        self.fetcher = fetcher
        self.mapper = mapper
        self.aggregator = aggregator
        self.max_workers = max_workers
        self.last_stats: Optional[Dict[str, Any]] = None

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "FeedPipeline":
        """
        Build a pipeline from loaded configuration.

        Args:
            config_manager: Configuration manager instance

        Returns:
            FeedPipeline wired with fetcher, mapper, tagger and aggregator
        """
        fetcher = FeedFetcher(
            timeout=config_manager.get_config_value("networking.timeout_seconds", 30),
            user_agent=config_manager.get_config_value("networking.user_agent"),
        )
        tagger = Tagger(config_manager.get_keywords(), config_manager.get_brands())
        aggregator = Aggregator(
            max_items=config_manager.get_config_value("aggregation.max_items", 600),
            placeholder_on_empty=config_manager.get_config_value("aggregation.placeholder_on_empty", False),
        )
        return cls(
            sources=config_manager.get_feed_sources(),
            fetcher=fetcher,
            mapper=FeedMapper(tagger),
            aggregator=aggregator,
            max_workers=config_manager.get_config_value("networking.max_workers", 4),
        )

    def process_source(self, source: FeedSource) -> SourceBatch:
        """
        Fetch, parse and map a single feed.

        Errors never escape: a failing feed yields an empty batch carrying the
        error message so the other feeds are unaffected.

        Args:
            source: Feed to process

        Returns:
            SourceBatch with the feed's records or its error
        """
        start_time = time.time()
        try:
            body = self.fetcher.fetch_content(source.url)
            tree = parse_xml(body)
            records = self.mapper.map_document(tree, source.name)
        except (FetchError, ParseError) as e:
            log_source_failure(logger, source.name, str(e))
            return SourceBatch(source=source.name, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error processing feed '{source.name}': {e}")
            return SourceBatch(source=source.name, error=str(e))

        log_source_success(logger, source.name, len(records), time.time() - start_time)
        return SourceBatch(source=source.name, records=tuple(records))

    def collect(self) -> List[SourceBatch]:
        """
        Process every source and wait for all of them to settle.

        Returns:
            Batches in source order, regardless of completion order
        """
        if not self.sources:
            return []

        workers = min(self.max_workers, len(self.sources))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.process_source, self.sources))

    def run(self) -> Snapshot:
        """
        Run the pipeline once.

        Returns:
            Snapshot of the aggregated records
        """
        start_time = time.time()
        logger.info(f"Starting aggregation run over {len(self.sources)} feeds")

        batches = self.collect()
        snapshot = self.aggregator.aggregate(batches)

        self.last_stats = {
            "sources": len(batches),
            "failed_sources": len(snapshot.failed_sources),
            "records_mapped": sum(len(batch.records) for batch in batches),
            "duplicates_dropped": snapshot.duplicates_dropped,
            "truncated": snapshot.truncated,
            "items": len(snapshot.items),
            "status": snapshot.status.value,
            "duration_seconds": time.time() - start_time,
        }
        log_collection_summary(logger, self.last_stats)
        return snapshot
