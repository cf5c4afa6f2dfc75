"""
Feed mapper module.
Detects RSS 2.0 vs Atom documents and maps their entries into ArticleRecords.
"""
import logging
from typing import Any, Dict, List, Optional

from .link_resolver import decode_link, resolve_entry_link, resolve_link
from .models import PLACEHOLDER_LINK, UNTITLED, ArticleRecord
from .tagger import TagResult, Tagger
from .utils.helpers import collapse_whitespace, sanitize, to_instant, truncate
from .xml_tree import TEXT_KEY

logger = logging.getLogger(__name__)

EXCERPT_MAX_LENGTH = 240


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_node(value: Any) -> Dict[str, Any]:
    # An empty <item/> parses to a string; treat it as an item with no fields
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    """
    Read the text of a field that may be a plain string or a node with attributes.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        text = value.get(TEXT_KEY, "")
        return text if isinstance(text, str) else ""
    if isinstance(value, list) and value:
        return _text(value[0])
    return ""


def _first_text(node: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        text = _text(node.get(key)).strip()
        if text:
            return text
    return ""


class FeedMapper:
    """
    Maps parsed feed documents into canonical article records.
    """

    def __init__(self, tagger: Optional[Tagger] = None):
        """
        Initialize the feed mapper.

        Args:
            tagger: Optional Tagger applied to every record
        """
        self.tagger = tagger

    def map_document(self, tree: Dict[str, Any], source_name: str) -> List[ArticleRecord]:
        """
        Map a parsed XML document into article records.

        Args:
            tree: Generic tree produced by xml_tree.parse_xml
            source_name: Display name of the feed, copied onto every record

        Returns:
            One record per RSS item or Atom entry; empty if the document is
            neither RSS nor Atom
        """
        channel = self._rss_channel(tree)
        if channel is not None and channel.get("item") is not None:
            items = _as_list(channel.get("item"))
            logger.debug(f"{source_name}: RSS document with {len(items)} items")
            return [self._map_rss_item(_as_node(item), source_name) for item in items]

        feed = _as_node(tree.get("feed"))
        if feed.get("entry") is not None:
            entries = _as_list(feed.get("entry"))
            logger.debug(f"{source_name}: Atom document with {len(entries)} entries")
            return [self._map_atom_entry(_as_node(entry), source_name) for entry in entries]

        logger.warning(f"{source_name}: document is neither an RSS channel with items nor an Atom feed with entries")
        return []

    @staticmethod
    def _rss_channel(tree: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rss = tree.get("rss")
        if not isinstance(rss, dict):
            return None
        channels = _as_list(rss.get("channel"))
        return _as_node(channels[0]) if channels else None

    def _map_rss_item(self, item: Dict[str, Any], source_name: str) -> ArticleRecord:
        link = _text(item.get("link")).strip()
        if not link:
            # Some feeds only carry <atom:link href="..."/> on the item
            link = resolve_link(decode_link(item.get("atom:link")))

        return self._build_record(
            title=_text(item.get("title")),
            link=link,
            raw_excerpt=_text(item.get("description")),
            published=to_instant(_first_text(item, "pubDate", "dc:date", "pubdate")),
            source_name=source_name,
        )

    def _map_atom_entry(self, entry: Dict[str, Any], source_name: str) -> ArticleRecord:
        return self._build_record(
            title=_text(entry.get("title")),
            link=resolve_entry_link(entry),
            raw_excerpt=_first_text(entry, "summary", "content"),
            published=to_instant(_first_text(entry, "updated", "published")),
            source_name=source_name,
        )

    def _build_record(self, title: str, link: str, raw_excerpt: str, published: int,
                      source_name: str) -> ArticleRecord:
        title = collapse_whitespace(title) or UNTITLED
        link = link or PLACEHOLDER_LINK
        full_excerpt = sanitize(raw_excerpt)
        # Tags see the whole excerpt, the record keeps the truncated one
        tags = self.tagger.tag(title, full_excerpt) if self.tagger else TagResult()
        excerpt = truncate(full_excerpt, EXCERPT_MAX_LENGTH)

        return ArticleRecord(
            id=link if link != PLACEHOLDER_LINK else title,
            title=title,
            link=link,
            excerpt=excerpt,
            source=source_name,
            published=published,
            keywords=tags.keywords,
            brands=tags.brands,
        )


def map_document(tree: Dict[str, Any], source_name: str, tagger: Optional[Tagger] = None) -> List[ArticleRecord]:
    """Map a parsed document with a one-off FeedMapper."""
    return FeedMapper(tagger).map_document(tree, source_name)
