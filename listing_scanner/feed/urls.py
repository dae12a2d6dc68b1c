"""Paginated feed address construction."""

from typing import List

from listing_scanner.config.models import PAGE_SIZE


def build_feed_url(base_url: str, offset: int, posted_today: bool = True) -> str:
    """Append feed parameters to a configured search endpoint.

    Returns the ``PAGE_SIZE`` listings starting at ``offset``:
    ``offset=0`` gives listings 1-25, ``offset=25`` gives 26-50.

    The base endpoint is taken as-is; a malformed base produces a malformed
    address.

    Args:
        base_url: Search endpoint, usually already carrying search parameters
        offset: Zero-based listing offset, a multiple of PAGE_SIZE
        posted_today: Restrict results to listings posted today

    Returns:
        Feed retrieval address

    Example:
        >>> build_feed_url("https://x.craigslist.org/search/cpg?query=data", 25)
        'https://x.craigslist.org/search/cpg?query=data&format=rss&is_paid=all&s=25&postedToday=1'
    """
    params = ["format=rss", "is_paid=all", f"s={offset}"]
    if posted_today:
        params.append("postedToday=1")

    separator = "&" if "?" in base_url else "?"
    return base_url + separator + "&".join(params)


def page_offsets(num_posts: int, page_size: int = PAGE_SIZE) -> List[int]:
    """Offsets of every page needed to cover ``num_posts`` listings."""
    return list(range(0, max(num_posts, 0), page_size))
