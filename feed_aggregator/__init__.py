"""
Feed Aggregator Package

Fetches a fixed list of RSS/Atom feeds, normalizes their entries into one
article schema, tags, deduplicates and orders them, and writes a bounded
JSON snapshot for display.
"""

__version__ = "1.0.0"

from .aggregator import Aggregator
from .config_manager import ConfigManager
from .feed_mapper import FeedMapper, map_document
from .models import ArticleRecord, FeedSource, Snapshot, SnapshotStatus, SourceBatch
from .pipeline import FeedPipeline
from .rss_fetcher import FeedFetcher
from .storage_manager import SnapshotWriter
from .tagger import Tagger

__all__ = [
    'Aggregator',
    'ArticleRecord',
    'ConfigManager',
    'FeedFetcher',
    'FeedMapper',
    'FeedPipeline',
    'FeedSource',
    'Snapshot',
    'SnapshotStatus',
    'SnapshotWriter',
    'SourceBatch',
    'Tagger',
    'map_document',
]
