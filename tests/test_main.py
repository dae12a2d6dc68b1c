"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Manual run, offline feed-file and daemon modes
- Exit code handling
"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from listing_scanner.config.environment import EnvironmentConfig
from listing_scanner.config.exceptions import ConfigurationError
from listing_scanner.config.models import AppConfig, EmailConfig, LoggingConfig
from listing_scanner.main import build_parser, load_runtime_config, main, read_feed_files
from listing_scanner.pipeline import PipelineRunResult
from listing_scanner.utils.timestamps import utc_now


def make_configs(log_level="INFO", config_level="INFO"):
    app_config = AppConfig(
        base_url="https://boulder.craigslist.org/search/cpg",
        keywords=["python"],
        scan_interval="15m",
        email=EmailConfig(recipients="alerts@example.com", subject="Postings"),
        logging=LoggingConfig(level=config_level),
    )
    env_config = EnvironmentConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        log_level=log_level,
        database_url="sqlite:///:memory:",
    )
    return app_config, env_config


def make_result(sheet="main"):
    now = utc_now()
    return PipelineRunResult(run_started_at=now, run_finished_at=now, sheet=sheet)


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    @patch("listing_scanner.main.load_config")
    def test_cli_level_wins(self, mock_load):
        mock_load.return_value = make_configs(log_level="WARNING", config_level="ERROR")

        _, env_config = load_runtime_config(Path("config.yaml"), "DEBUG")

        assert env_config.log_level == "DEBUG"

    @patch("listing_scanner.main.load_config")
    def test_environment_level_beats_config(self, mock_load):
        mock_load.return_value = make_configs(log_level="WARNING", config_level="ERROR")

        _, env_config = load_runtime_config(Path("config.yaml"), None)

        assert env_config.log_level == "WARNING"

    @patch("listing_scanner.main.load_config")
    def test_config_level_is_fallback(self, mock_load):
        mock_load.return_value = make_configs(log_level=None, config_level="ERROR")

        _, env_config = load_runtime_config(Path("config.yaml"), None)

        assert env_config.log_level == "ERROR"

    @patch("listing_scanner.main.load_config")
    def test_scan_interval_computed(self, mock_load):
        mock_load.return_value = make_configs()

        app_config, _ = load_runtime_config(Path("config.yaml"), None)

        assert app_config.scan_interval_seconds == 900


class TestParser:
    """Tests for CLI argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.config == Path("config.yaml")
        assert args.manual_run is False
        assert args.feed_file == []
        assert args.send_email is False
        assert args.log_level is None

    def test_repeated_feed_files(self):
        args = build_parser().parse_args(["--feed-file", "a.xml", "--feed-file", "b.xml"])

        assert args.feed_file == [Path("a.xml"), Path("b.xml")]

    def test_invalid_log_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "VERBOSE"])


class TestReadFeedFiles:
    """Tests for reading saved feed pages."""

    def test_reads_in_order(self, tmp_path):
        first = tmp_path / "one.xml"
        second = tmp_path / "two.xml"
        first.write_text("<one/>", encoding="utf-8")
        second.write_text("<two/>", encoding="utf-8")

        assert read_feed_files([first, second]) == ["<one/>", "<two/>"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read feed file"):
            read_feed_files([tmp_path / "missing.xml"])


@patch("listing_scanner.main.ScanPipeline")
@patch("listing_scanner.main.KeywordMatcher")
@patch("listing_scanner.main.NotificationService")
@patch("listing_scanner.main.init_database")
@patch("listing_scanner.main.close_database")
@patch("listing_scanner.main.configure_logging")
@patch("listing_scanner.main.load_runtime_config")
class TestMain:
    """Test suite for main() function."""

    def test_manual_run_success(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.return_value = make_configs()
        pipeline = Mock()
        pipeline.run_once.return_value = make_result()
        mock_scan_pipeline.return_value = pipeline

        exit_code = main(["--manual-run", "--config", "config.yaml"])

        assert exit_code == 0
        mock_configure_logging.assert_called_once()
        mock_init_db.assert_called_once_with("sqlite:///:memory:")
        mock_close_db.assert_called_once()
        pipeline.run_once.assert_called_once()
        mock_keyword_matcher.assert_called_once_with(["python"], word_boundaries=False)

    def test_manual_run_failure(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.return_value = make_configs()
        pipeline = Mock()
        pipeline.run_once.side_effect = RuntimeError("feed down")
        mock_scan_pipeline.return_value = pipeline

        exit_code = main(["--manual-run"])

        assert exit_code == 1
        mock_close_db.assert_called_once()

    def test_feed_file_mode(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
        tmp_path,
    ):
        feed = tmp_path / "page.xml"
        feed.write_text("<rdf/>", encoding="utf-8")
        mock_load_config.return_value = make_configs()
        pipeline = Mock()
        pipeline.run_documents.return_value = make_result(sheet="test")
        mock_scan_pipeline.return_value = pipeline

        exit_code = main(["--feed-file", str(feed), "--send-email"])

        assert exit_code == 0
        pipeline.run_documents.assert_called_once_with(["<rdf/>"], notify=True)
        pipeline.run_once.assert_not_called()

    def test_missing_feed_file_is_config_error(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
        tmp_path,
    ):
        mock_load_config.return_value = make_configs()

        exit_code = main(["--feed-file", str(tmp_path / "nope.xml")])

        assert exit_code == 1
        mock_init_db.assert_not_called()

    def test_send_email_requires_feed_file(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        with pytest.raises(SystemExit):
            main(["--send-email"])

        mock_load_config.assert_not_called()

    def test_configuration_error(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.side_effect = ConfigurationError(
            "Config file not found",
            suggestions=["Create config.yaml"],
        )

        assert main(["--config", "nonexistent.yaml"]) == 1
        mock_init_db.assert_not_called()

    def test_keyboard_interrupt(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.side_effect = KeyboardInterrupt()

        assert main([]) == 0

    def test_log_level_override_passed_through(
        self,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.return_value = make_configs(log_level="DEBUG")
        mock_scan_pipeline.return_value.run_once.return_value = make_result()

        main(["--manual-run", "--log-level", "DEBUG"])

        mock_load_config.assert_called_once_with(Path("config.yaml"), "DEBUG")
        assert mock_configure_logging.call_args.kwargs["level"] == "DEBUG"

    @patch("listing_scanner.main.SchedulerService")
    @patch("signal.signal")
    def test_daemon_mode(
        self,
        mock_signal,
        mock_scheduler_service,
        mock_load_config,
        mock_configure_logging,
        mock_close_db,
        mock_init_db,
        mock_notification_service,
        mock_keyword_matcher,
        mock_scan_pipeline,
    ):
        mock_load_config.return_value = make_configs()
        scheduler = Mock()
        scheduler.start.side_effect = KeyboardInterrupt()
        mock_scheduler_service.return_value = scheduler

        exit_code = main([])

        assert exit_code == 0
        assert mock_scheduler_service.call_args.kwargs["interval_seconds"] == 900
        scheduler.start.assert_called_once()
        mock_close_db.assert_called_once()
