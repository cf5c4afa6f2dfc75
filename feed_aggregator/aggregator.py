"""
Aggregator module for merging per-source batches into a snapshot.
"""
import logging
from typing import Iterable, List, Set

from .models import (
    PLACEHOLDER_LINK,
    ArticleRecord,
    Snapshot,
    SnapshotStatus,
    SourceBatch,
)
from .utils.helpers import now_ms
from .utils.logging_utils import log_deduplication_results

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 600
PLACEHOLDER_SOURCE = "SmokeTest"


def placeholder_record(instant: int) -> ArticleRecord:
    """
    Build the synthetic record written when a run produced nothing.

    Args:
        instant: Timestamp used for both the id and ``published``

    Returns:
        ArticleRecord flagged with the ``SmokeTest`` source
    """
    return ArticleRecord(
        id=f"smoke-{instant}",
        title="Aggregator ran, but feeds returned 0 items",
        link=PLACEHOLDER_LINK,
        excerpt="This placeholder proves the run wrote the snapshot file.",
        source=PLACEHOLDER_SOURCE,
        published=instant,
    )


class Aggregator:
    """
    Deduplicates, orders and bounds the records of all feed sources.
    """

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS, placeholder_on_empty: bool = False):
        """
        Initialize the aggregator.

        Args:
            max_items: Maximum number of records kept in a snapshot
            placeholder_on_empty: Substitute a single placeholder record when
                no real record survives
        """
        self.max_items = max_items
        self.placeholder_on_empty = placeholder_on_empty

    def aggregate(self, batches: Iterable[SourceBatch]) -> Snapshot:
        """
        Merge settled source batches into a snapshot.

        Records are deduplicated by id in arrival order (the first source
        reporting an id wins, later ones are dropped without merging), sorted
        newest first with ties kept in arrival order, and cut to max_items.

        Args:
            batches: One batch per source, in configuration order

        Returns:
            Snapshot stamped with the completion instant
        """
        batches = list(batches)
        merged: List[ArticleRecord] = []
        seen: Set[str] = set()
        total = 0

        for batch in batches:
            for record in batch.records:
                total += 1
                if record.id in seen:
                    continue
                seen.add(record.id)
                merged.append(record)

        duplicates = total - len(merged)
        log_deduplication_results(logger, total, len(merged), duplicates)

        # sorted() is stable, also with reverse=True
        ordered = sorted(merged, key=lambda record: record.published, reverse=True)
        items = ordered[:self.max_items]
        truncated = len(ordered) - len(items)
        if truncated:
            logger.info(f"Truncated {truncated} older records beyond the {self.max_items} item limit")

        failed_sources = tuple(batch.source for batch in batches if batch.failed)
        status = self._status(batches, items)

        if not items and self.placeholder_on_empty:
            logger.warning(f"No records survived aggregation (status: {status.value}), writing placeholder record")
            items = [placeholder_record(now_ms())]

        return Snapshot(
            generated_at=now_ms(),
            items=tuple(items),
            status=status,
            duplicates_dropped=duplicates,
            truncated=truncated,
            failed_sources=failed_sources,
        )

    @staticmethod
    def _status(batches: List[SourceBatch], items: List[ArticleRecord]) -> SnapshotStatus:
        if items:
            return SnapshotStatus.OK
        if batches and all(batch.failed for batch in batches):
            return SnapshotStatus.FAILED
        return SnapshotStatus.EMPTY
