"""Command-line entry point for the listing scanner."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from listing_scanner.config.environment import EnvironmentConfig
from listing_scanner.config.exceptions import ConfigurationError
from listing_scanner.config.loader import load_config
from listing_scanner.config.models import AppConfig
from listing_scanner.logging import get_logger
from listing_scanner.logging.config import configure_logging
from listing_scanner.matching import KeywordMatcher
from listing_scanner.notifications.service import NotificationService
from listing_scanner.persistence.database import close_database, init_database
from listing_scanner.pipeline import PipelineRunResult, ScanPipeline
from listing_scanner.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Path, log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI flag, then LOG_LEVEL, then the config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Listing Scanner - keyword alerts for classified-ad feeds"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument(
        "--manual-run",
        action="store_true",
        help="Run a single scan immediately and exit",
    )
    parser.add_argument(
        "--feed-file",
        type=Path,
        action="append",
        default=[],
        metavar="PATH",
        help="Scan a saved feed page into the test sheet and exit (repeatable)",
    )
    parser.add_argument(
        "--send-email",
        action="store_true",
        help="With --feed-file, also send the digest",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def read_feed_files(paths: List[Path]) -> List[str]:
    """Read saved feed pages.

    Raises:
        ConfigurationError: If a file cannot be read
    """
    documents = []
    for path in paths:
        try:
            documents.append(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read feed file: {path}",
                errors=[str(e)],
                suggestions=["Check the --feed-file path and permissions"],
            ) from e
    return documents


def _log_summary(result: PipelineRunResult) -> None:
    logger.info(
        f"Scan completed: {result.pages_fetched} pages, "
        f"{result.total_listings} listings, "
        f"{result.total_matched} matched, "
        f"{result.rows_logged} logged to {result.sheet}, "
        f"notification {result.notification_status or 'not requested'}",
        extra={
            "event": "service.scan.completed",
            "duration_seconds": result.total_duration_seconds,
            "total_listings": result.total_listings,
            "total_matched": result.total_matched,
            "rows_logged": result.rows_logged,
        },
    )


def _run_daemon(pipeline: ScanPipeline, interval_seconds: int) -> int:
    shutdown_event = threading.Event()
    scheduler_service = SchedulerService(
        pipeline_callable=pipeline.run_once,
        interval_seconds=interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        scheduler_service.shutdown(wait=False)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the scanner.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    start_time = time.time()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.send_email and not args.feed_file:
        parser.error("--send-email requires --feed-file")

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=os.environ.get("ENVIRONMENT", "local"),
        )
        logger.info(
            "Listing Scanner starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config),
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "feed_files": len(args.feed_file),
            },
        )

        documents = read_feed_files(args.feed_file)

        init_database(env_config.database_url)
        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "num_posts": app_config.num_posts,
                "keyword_count": len(app_config.keywords),
                "scan_interval_seconds": app_config.scan_interval_seconds,
            },
        )

        pipeline = ScanPipeline(
            app_config=app_config,
            env_config=env_config,
            notification_service=NotificationService(),
            keyword_matcher=KeywordMatcher(
                app_config.keywords, word_boundaries=app_config.matching.word_boundaries
            ),
        )

        try:
            if documents:
                _log_summary(pipeline.run_documents(documents, notify=args.send_email))
                return 0
            if args.manual_run:
                _log_summary(pipeline.run_once())
                return 0
            return _run_daemon(pipeline, app_config.scan_interval_seconds)
        finally:
            close_database()
            logger.info(
                "Listing Scanner stopped",
                extra={
                    "event": "service.stopping",
                    "uptime_seconds": round(time.time() - start_time, 2),
                },
            )

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            f"Fatal error: {e}",
            extra={"event": "service.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
