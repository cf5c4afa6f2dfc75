"""
Helper functions for the feed aggregator.
Contains text cleanup, date normalization and URL validation utilities.
"""
import logging
import re
import time
import urllib.parse
from datetime import timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')
# Non-breaking space entities that survive as literal text in escaped HTML
_NBSP_RE = re.compile(r'&(?:nbsp|#160|#[xX]0*[aA]0);')
_WHITESPACE_RE = re.compile(r'\s+')

# Common timezone abbreviations seen in RFC-822 feed dates
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def now_ms() -> int:
    """Current wall-clock instant in milliseconds since the epoch."""
    return int(time.time() * 1000)


def sanitize(text: Optional[str]) -> str:
    """
    Strip markup and normalize whitespace in a free-text field.

    Anything between angle brackets is removed without checking tag names.
    Entities are left as the XML parser decoded them, except that a
    literal non-breaking space entity counts as whitespace.

    Args:
        text: Raw text, possibly containing HTML

    Returns:
        Plain text with whitespace runs collapsed to a single space
    """
    if not text:
        return ""

    cleaned = _TAG_RE.sub('', text)
    cleaned = _NBSP_RE.sub(' ', cleaned)
    return collapse_whitespace(cleaned)


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse whitespace runs to a single space and trim, leaving markup alone."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(' ', text).strip()


def truncate(text: str, max_length: int) -> str:
    """Cut text to at most max_length characters."""
    return text[:max_length]


def to_instant(date_string: Optional[str]) -> int:
    """
    Convert a feed date string to milliseconds since the epoch.

    Handles RFC-822 (RSS) and ISO-8601 (Atom) dates. Dates without a timezone
    are read as UTC. Missing or unparsable dates fall back to the current
    instant, so two undated entries get independent "now" values rather than
    a shared sentinel.

    Args:
        date_string: Raw date string from the feed

    Returns:
        Instant in milliseconds
    """
    if not date_string or not date_string.strip():
        return now_ms()

    try:
        parsed_date = date_parser.parse(date_string.strip(), tzinfos=TZINFOS)
        if parsed_date.tzinfo is None:
            parsed_date = parsed_date.replace(tzinfo=timezone.utc)
        return int(parsed_date.timestamp() * 1000)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{date_string}': {e}")
        return now_ms()


def validate_url(url: str) -> bool:
    """
    Validate if a string is an http(s) URL.

    Args:
        url: URL string to validate

    Returns:
        True if valid URL, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    parsed = urllib.parse.urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)
