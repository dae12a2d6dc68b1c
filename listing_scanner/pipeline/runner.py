"""Pipeline orchestration: fetch, parse, filter, log, notify."""

from typing import Iterable, List, Optional
from uuid import uuid4

from listing_scanner.config.environment import EnvironmentConfig
from listing_scanner.config.models import AppConfig
from listing_scanner.domain.models import AnnotatedListing
from listing_scanner.feed import FeedFetcher, build_feed_url, page_offsets, parse_feed
from listing_scanner.logging import get_logger
from listing_scanner.logging.context import log_context
from listing_scanner.matching import KeywordMatcher, filter_matches
from listing_scanner.notifications.service import NotificationService
from listing_scanner.persistence.database import get_session
from listing_scanner.persistence.repositories import MAIN_SHEET, TEST_SHEET, ListingLogRepository
from listing_scanner.utils.timestamps import utc_now

from .models import PipelineRunResult

logger = get_logger(__name__, component="pipeline")


class ScanPipeline:
    """
    Runs one scan of the configured feed.

    Every page is fetched and parsed before anything is written. All
    listings, matched or not, are appended to the log in one write at the
    end, and the matched subset is then sent as a single digest. Any error
    aborts the run and nothing is logged or sent.

    Runs are not guarded against overlap; the scheduler allows a single
    instance at a time.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        notification_service: NotificationService,
        keyword_matcher: KeywordMatcher,
        fetcher: Optional[FeedFetcher] = None,
    ):
        self.app_config = app_config
        self.env_config = env_config
        self.notification_service = notification_service
        self.keyword_matcher = keyword_matcher
        self.fetcher = fetcher or FeedFetcher(
            timeout=app_config.advanced.http_request_timeout,
            user_agent=app_config.advanced.user_agent,
        )

    def run_once(self) -> PipelineRunResult:
        """
        Scan every page of the live feed, log to the main sheet and notify.

        Returns:
            PipelineRunResult for the run

        Raises:
            FeedError, PersistenceError, NotificationError: Propagated
                unchanged after logging ``pipeline.run.failed``
        """
        run_started_at = utc_now()

        with log_context(run_id=uuid4().hex, sheet=MAIN_SHEET):
            offsets = page_offsets(self.app_config.num_posts)
            logger.info(
                f"Pipeline run started ({len(offsets)} pages)",
                extra={
                    "event": "pipeline.run.started",
                    "page_count": len(offsets),
                    "keyword_count": len(self.keyword_matcher.keywords),
                },
            )
            try:
                annotated: List[AnnotatedListing] = []
                for offset in offsets:
                    with log_context(page_offset=offset):
                        url = build_feed_url(
                            self.app_config.base_url, offset, self.app_config.posted_today
                        )
                        annotated.extend(self._annotate(self.fetcher.fetch(url)))

                return self._finish(
                    annotated,
                    sheet=MAIN_SHEET,
                    notify=True,
                    pages=len(offsets),
                    run_started_at=run_started_at,
                )
            except Exception as e:
                self._log_failure(e)
                raise

    def run_documents(
        self,
        documents: Iterable[str],
        sheet: str = TEST_SHEET,
        notify: bool = False,
    ) -> PipelineRunResult:
        """
        Run parse, filter and log over saved feed pages instead of the network.

        Used to check configuration against sample pages without touching the
        main log. With ``notify`` set the digest is also sent.

        Args:
            documents: Raw RSS documents, one per page
            sheet: Log sheet to append to
            notify: Whether to send the digest

        Returns:
            PipelineRunResult for the run
        """
        run_started_at = utc_now()

        with log_context(run_id=uuid4().hex, sheet=sheet):
            documents = list(documents)
            logger.info(
                f"Offline run started ({len(documents)} documents)",
                extra={"event": "pipeline.run.started", "page_count": len(documents)},
            )
            try:
                annotated: List[AnnotatedListing] = []
                for document in documents:
                    annotated.extend(self._annotate(document))

                return self._finish(
                    annotated,
                    sheet=sheet,
                    notify=notify,
                    pages=len(documents),
                    run_started_at=run_started_at,
                )
            except Exception as e:
                self._log_failure(e)
                raise

    def _annotate(self, document: str) -> List[AnnotatedListing]:
        return self.keyword_matcher.annotate_all(parse_feed(document))

    def _finish(
        self,
        annotated: List[AnnotatedListing],
        sheet: str,
        notify: bool,
        pages: int,
        run_started_at,
    ) -> PipelineRunResult:
        matched = filter_matches(annotated)

        with get_session() as session:
            rows_logged = ListingLogRepository(session).append(annotated, sheet=sheet)

        notification_status = None
        if notify:
            notification = self.notification_service.send_digest(
                matched, self.app_config.email, self.env_config
            )
            notification_status = notification.status

        result = PipelineRunResult(
            run_started_at=run_started_at,
            run_finished_at=utc_now(),
            sheet=sheet,
            pages_fetched=pages,
            total_listings=len(annotated),
            total_matched=len(matched),
            rows_logged=rows_logged,
            notification_status=notification_status,
        )

        logger.info(
            "Pipeline run completed",
            extra={
                "event": "pipeline.run.completed",
                "duration_ms": int(result.total_duration_seconds * 1000),
                "pages_fetched": result.pages_fetched,
                "total_listings": result.total_listings,
                "total_matched": result.total_matched,
                "rows_logged": result.rows_logged,
                "notification_status": result.notification_status,
            },
        )
        return result

    def _log_failure(self, error: Exception) -> None:
        logger.error(
            f"Pipeline run failed: {error}",
            extra={"event": "pipeline.run.failed", "error_type": type(error).__name__},
            exc_info=True,
        )
