"""HTTP retrieval of raw feed documents."""

from typing import Optional

import requests

from listing_scanner.logging import get_logger

from .exceptions import FeedFetchError

logger = get_logger(__name__, component="feed")


class FeedFetcher:
    """Fetches feed documents over HTTP.

    There is no retry. Any transport failure or HTTP error status raises
    FeedFetchError, which the pipeline lets propagate.

    Attributes:
        timeout: Request timeout in seconds, or None to wait for the network
        user_agent: User-Agent header sent with every request
    """

    def __init__(
        self,
        timeout: Optional[int] = None,
        user_agent: str = "ListingScanner/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def fetch(self, url: str) -> str:
        """Retrieve the document body at ``url`` as text.

        Raises:
            FeedFetchError: On connection errors, timeouts or a 4xx/5xx status
        """
        logger.debug(
            f"HTTP GET {url}",
            extra={"event": "feed.fetch.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "feed.fetch.error",
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise FeedFetchError(f"Request to {url} failed: {e}", url=url) from e

        if response.status_code >= 400:
            logger.error(
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "feed.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise FeedFetchError(
                f"HTTP {response.status_code}: {response.reason}",
                url=url,
                status_code=response.status_code,
            )

        logger.debug(
            "Feed fetched",
            extra={
                "event": "feed.fetch.succeeded",
                "status_code": response.status_code,
                "bytes": len(response.content),
            },
        )
        return response.text

    def close(self) -> None:
        self._session.close()
