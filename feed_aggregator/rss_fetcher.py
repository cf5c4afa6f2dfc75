"""
rss_fetcher.py - Module for fetching RSS/Atom feeds over HTTP using requests.
"""
import logging
from typing import Optional

import requests

from .exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "RetailTrendsTracker/1.0 (+https://github.com/)"
FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"


class FeedFetcher:
    """
    Retrieves raw feed documents with a fixed identifying user agent.
    Failed requests are not retried.
    """

    def __init__(self, timeout: float = 30, user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[requests.Session] = None):
        """
        Initialize the feed fetcher.

        Args:
            timeout (float): Request timeout in seconds.
            user_agent (str): User-Agent header sent with every request.
            session (Optional[requests.Session]): Session to reuse; a new one is created if omitted.
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent,
            'Accept': FEED_ACCEPT,
        })

        logger.debug(f"FeedFetcher initialized with timeout {timeout}s")

    def fetch_content(self, url: str) -> bytes:
        """
        Fetch a feed and return its raw body.

        The body is not decoded here: the XML parser honours the document's
        own encoding declaration, which servers often omit from Content-Type.

        Args:
            url (str): URL of the feed

        Returns:
            bytes: Response body

        Raises:
            FetchError: On a non-2xx status or a transport-level failure.
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(url, message=str(e)) from e

        if not 200 <= response.status_code < 300:
            raise FetchError(url, status_code=response.status_code)

        logger.debug(f"Fetched {len(response.content)} bytes from {response.url}")
        return response.content

    def close(self) -> None:
        self.session.close()
