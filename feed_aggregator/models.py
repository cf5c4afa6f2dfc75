"""
Data models shared across the feed aggregator.

WARNING: ``ArticleRecord.to_dict`` and ``Snapshot.to_dict`` define the JSON
layout that downstream consumers read. Do not change the keys lightly.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

PLACEHOLDER_LINK = "#"
UNTITLED = "Untitled"


@dataclass(frozen=True)
class ArticleRecord:
    """
    One normalized feed entry, independent of the format it came from.
    """
    id: str
    title: str
    link: str
    excerpt: str
    source: str
    published: int
    keywords: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "excerpt": self.excerpt,
            "source": self.source,
            "published": self.published,
            "keywords": list(self.keywords),
            "brands": list(self.brands),
        }


@dataclass(frozen=True)
class FeedSource:
    """A configured feed: display name and URL."""
    name: str
    url: str


# Link representations found on a feed entry, decoded once by link_resolver.decode_link

@dataclass(frozen=True)
class NoLink:
    pass


@dataclass(frozen=True)
class PlainLink:
    url: str


@dataclass(frozen=True)
class LinkDescriptor:
    rel: Optional[str]
    href: Optional[str]


@dataclass(frozen=True)
class LinkDescriptorList:
    descriptors: Tuple[LinkDescriptor, ...]


LinkVariant = Union[NoLink, PlainLink, LinkDescriptor, LinkDescriptorList]


@dataclass(frozen=True)
class SourceBatch:
    """
    The settled outcome of processing one feed source.

    ``error`` carries the failure message when the source could not be
    fetched or parsed; such a batch has no records.
    """
    source: str
    records: Tuple[ArticleRecord, ...] = ()
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SnapshotStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class Snapshot:
    """
    Bounded, time-ordered output of one pipeline run.
    """
    generated_at: int
    items: Tuple[ArticleRecord, ...]
    status: SnapshotStatus
    duplicates_dropped: int = 0
    truncated: int = 0
    failed_sources: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "items": [item.to_dict() for item in self.items],
        }
