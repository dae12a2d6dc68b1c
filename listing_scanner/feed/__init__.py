"""Feed access: paginated addresses, HTTP retrieval and RSS 1.0 decoding.

    from listing_scanner.feed import FeedFetcher, build_feed_url, parse_feed
    fetcher = FeedFetcher(timeout=30)
    listings = parse_feed(fetcher.fetch(build_feed_url(base_url, 0)))
"""

from .exceptions import FeedError, FeedFetchError, FeedParseError
from .fetcher import FeedFetcher
from .parser import RSS_NAMESPACE, parse_feed
from .urls import PAGE_SIZE, build_feed_url, page_offsets

__all__ = [
    "FeedFetcher",
    "build_feed_url",
    "page_offsets",
    "parse_feed",
    "PAGE_SIZE",
    "RSS_NAMESPACE",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
]
