"""
Exceptions raised by the feed aggregation pipeline.
"""
from typing import Optional


class FeedAggregatorError(Exception):
    """Base class for all feed aggregator errors."""


class FetchError(FeedAggregatorError):
    """Raised when a feed cannot be retrieved (non-2xx status or transport failure)."""

    def __init__(self, url: str, status_code: Optional[int] = None, message: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        if message is None:
            message = f"HTTP {status_code}" if status_code is not None else "request failed"
        self.message = message
        super().__init__(f"{message} ({url})")


class ParseError(FeedAggregatorError):
    """Raised when a feed body is not well-formed XML."""


class EmptySnapshotError(FeedAggregatorError):
    """Raised when a run produced no real records and the caller asked to treat that as fatal."""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Snapshot has no records (status: {status.value})")
