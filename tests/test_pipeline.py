"""Unit tests for the pipeline runner.

Tests the ScanPipeline orchestration including:
- Page iteration and URL construction
- Parse -> annotate -> reduce -> log -> notify ordering
- Single end-of-run log write to the main sheet
- Fault propagation (nothing logged or sent on failure)
- Offline runs over saved documents into the test sheet
"""

from unittest.mock import Mock

import pytest

from listing_scanner.config.environment import EnvironmentConfig
from listing_scanner.config.models import AppConfig, EmailConfig
from listing_scanner.feed import FeedFetchError, FeedParseError
from listing_scanner.matching import KeywordMatcher
from listing_scanner.notifications.models import NotificationResult, SMTPDeliveryError
from listing_scanner.notifications.service import NotificationService
from listing_scanner.persistence import (
    MAIN_SHEET,
    TEST_SHEET,
    ListingLogRepository,
    close_database,
    get_session,
    init_database,
)
from listing_scanner.pipeline import PipelineRunResult, ScanPipeline
from tests.helpers import StaticFetcher, build_feed, load_feed_fixture

BASE_URL = "https://boulder.craigslist.org/search/cpg?searchNearby=2"


@pytest.fixture(autouse=True)
def temp_database():
    """Create a temporary in-memory database for testing."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def app_config():
    return AppConfig(
        base_url=BASE_URL,
        num_posts=50,
        keywords=["data"],
        email=EmailConfig(recipients="alerts@example.com", subject="Craigslist Postings"),
    )


@pytest.fixture
def env_config():
    return EnvironmentConfig(smtp_host="smtp.example.com", smtp_port=587)


@pytest.fixture
def notification_service():
    service = Mock(spec=NotificationService)
    service.send_digest.return_value = NotificationResult(status="sent", listing_count=1)
    return service


@pytest.fixture
def matcher(app_config):
    return KeywordMatcher(app_config.keywords)


def make_pipeline(app_config, env_config, notification_service, matcher, fetcher):
    return ScanPipeline(
        app_config=app_config,
        env_config=env_config,
        notification_service=notification_service,
        keyword_matcher=matcher,
        fetcher=fetcher,
    )


def logged_rows(sheet=MAIN_SHEET):
    with get_session() as session:
        return ListingLogRepository(session).get_rows(sheet)


class TestRunOnce:
    """Tests for ScanPipeline.run_once."""

    def test_end_to_end(self, env_config, notification_service):
        """One matching and one non-matching listing flow to log and notify."""
        app_config = AppConfig(
            base_url=BASE_URL,
            num_posts=25,
            keywords=["data"],
            email=EmailConfig(recipients="alerts@example.com", subject="Craigslist Postings"),
        )
        fetcher = StaticFetcher(
            {
                0: build_feed(
                    [
                        {"title": "Data Analyst Needed", "description": "no fit", "link": "https://x.org/a"},
                        {"title": "Freezer for sale", "description": "barely used", "link": "https://x.org/b"},
                    ]
                )
            }
        )
        pipeline = make_pipeline(
            app_config, env_config, notification_service, KeywordMatcher(["data"]), fetcher
        )

        result = pipeline.run_once()

        rows = logged_rows()
        assert [row.title for row in rows] == ["Data Analyst Needed", "Freezer for sale"]
        assert [row.match for row in rows] == ["Data", ""]

        notified, email_config, sent_env = notification_service.send_digest.call_args[0]
        assert [listing.title for listing in notified] == ["Data Analyst Needed"]
        assert notified[0].match == ("Data",)
        assert email_config is app_config.email
        assert sent_env is env_config

        assert isinstance(result, PipelineRunResult)
        assert result.pages_fetched == 1
        assert result.total_listings == 2
        assert result.total_matched == 1
        assert result.rows_logged == 2
        assert result.sheet == MAIN_SHEET
        assert result.notification_status == "sent"

    def test_fetches_every_page_in_order(
        self, app_config, env_config, notification_service, matcher
    ):
        fetcher = StaticFetcher(
            {
                0: build_feed([{"title": "page one data"}]),
                25: build_feed([{"title": "page two"}]),
            }
        )
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, fetcher)

        result = pipeline.run_once()

        assert fetcher.requested_urls == [
            BASE_URL + "&format=rss&is_paid=all&s=0&postedToday=1",
            BASE_URL + "&format=rss&is_paid=all&s=25&postedToday=1",
        ]
        assert [row.title for row in logged_rows()] == ["page one data", "page two"]
        assert result.pages_fetched == 2

    def test_posted_today_disabled(self, env_config, notification_service, matcher):
        app_config = AppConfig(
            base_url=BASE_URL,
            posted_today=False,
            keywords=["data"],
            email=EmailConfig(recipients="alerts@example.com", subject="Postings"),
        )
        fetcher = StaticFetcher()

        make_pipeline(app_config, env_config, notification_service, matcher, fetcher).run_once()

        assert "postedToday" not in fetcher.requested_urls[0]

    def test_no_matches_still_logs_and_calls_notifier(
        self, app_config, env_config, notification_service, matcher
    ):
        notification_service.send_digest.return_value = NotificationResult(status="skipped")
        fetcher = StaticFetcher({0: build_feed([{"title": "Couch"}, {"title": "Chair"}])})

        result = make_pipeline(
            app_config, env_config, notification_service, matcher, fetcher
        ).run_once()

        assert len(logged_rows()) == 2
        assert notification_service.send_digest.call_args[0][0] == []
        assert result.total_matched == 0
        assert result.notification_status == "skipped"

    def test_empty_feed(self, app_config, env_config, notification_service, matcher):
        result = make_pipeline(
            app_config, env_config, notification_service, matcher, StaticFetcher()
        ).run_once()

        assert result.total_listings == 0
        assert result.rows_logged == 0
        assert logged_rows() == []

    def test_successive_runs_append(self, app_config, env_config, notification_service, matcher):
        fetcher = StaticFetcher({0: build_feed([{"title": "data gig"}])})
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, fetcher)

        pipeline.run_once()
        pipeline.run_once()

        rows = logged_rows()
        assert [row.row_number for row in rows] == [1, 2]
        assert rows[0].title == rows[1].title == "data gig"

    def test_fetch_error_aborts_run(self, app_config, env_config, notification_service, matcher):
        fetcher = StaticFetcher({0: build_feed([{"title": "data gig"}])})
        fetcher.fetch = Mock(
            side_effect=[
                build_feed([{"title": "data gig"}]),
                FeedFetchError("HTTP 503: Service Unavailable", url="u", status_code=503),
            ]
        )
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, fetcher)

        with pytest.raises(FeedFetchError):
            pipeline.run_once()

        assert logged_rows() == []
        notification_service.send_digest.assert_not_called()

    def test_parse_error_aborts_run(self, app_config, env_config, notification_service, matcher):
        fetcher = StaticFetcher({0: "<html>maintenance</html>"})
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, fetcher)

        with pytest.raises(FeedParseError):
            pipeline.run_once()

        assert logged_rows() == []
        notification_service.send_digest.assert_not_called()

    def test_notification_error_propagates_after_log(
        self, app_config, env_config, notification_service, matcher
    ):
        notification_service.send_digest.side_effect = SMTPDeliveryError("SMTP error")
        fetcher = StaticFetcher({0: build_feed([{"title": "data gig"}])})
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, fetcher)

        with pytest.raises(SMTPDeliveryError):
            pipeline.run_once()

        assert len(logged_rows()) == 1

    def test_default_fetcher_uses_advanced_config(
        self, app_config, env_config, notification_service, matcher
    ):
        pipeline = ScanPipeline(app_config, env_config, notification_service, matcher)

        assert pipeline.fetcher.timeout is None
        assert pipeline.fetcher.user_agent == "ListingScanner/1.0"


class TestRunDocuments:
    """Tests for ScanPipeline.run_documents."""

    def test_sample_page_logged_to_test_sheet(
        self, env_config, notification_service
    ):
        app_config = AppConfig(
            base_url=BASE_URL,
            keywords=["spreadsheet", "python"],
            email=EmailConfig(recipients="alerts@example.com", subject="Postings"),
        )
        fetcher = Mock()
        pipeline = make_pipeline(
            app_config,
            env_config,
            notification_service,
            KeywordMatcher(app_config.keywords),
            fetcher,
        )

        result = pipeline.run_documents([load_feed_fixture("sample_page.xml")])

        rows = logged_rows(TEST_SHEET)
        assert len(rows) == 3
        assert rows[0].match == "spreadsheet"
        assert logged_rows(MAIN_SHEET) == []
        assert result.sheet == TEST_SHEET
        assert result.total_matched == 1
        assert result.notification_status is None
        fetcher.fetch.assert_not_called()
        notification_service.send_digest.assert_not_called()

    def test_notify_sends_matched_subset(
        self, app_config, env_config, notification_service, matcher
    ):
        documents = [
            build_feed([{"title": "data entry"}, {"title": "couch"}]),
            build_feed([{"title": "big data"}]),
        ]
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, Mock())

        result = pipeline.run_documents(documents, notify=True)

        notified = notification_service.send_digest.call_args[0][0]
        assert [listing.title for listing in notified] == ["data entry", "big data"]
        assert result.pages_fetched == 2
        assert result.notification_status == "sent"

    def test_custom_sheet(self, app_config, env_config, notification_service, matcher):
        pipeline = make_pipeline(app_config, env_config, notification_service, matcher, Mock())

        pipeline.run_documents([build_feed([{"title": "data"}])], sheet="scratch")

        assert len(logged_rows("scratch")) == 1
