"""Errors raised while retrieving or decoding a feed.

None of these are caught by the pipeline: a fetch or parse failure aborts
the whole run.
"""

from typing import Optional


class FeedError(Exception):
    """Base exception for all feed errors."""


class FeedFetchError(FeedError):
    """The feed could not be retrieved (transport failure or HTTP error status)."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FeedParseError(FeedError):
    """The document is not well-formed XML or carries no RSS 1.0 content."""
