"""Time-based trigger for daemon mode."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from listing_scanner.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "feed-scan"


class SchedulerService:
    """
    Runs the pipeline on a fixed interval in a background thread.

    At most one run executes at a time and missed runs are coalesced into
    one. A run that raises is logged by APScheduler and the next run still
    fires on schedule.
    """

    def __init__(
        self,
        pipeline_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        self.pipeline_callable = pipeline_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self, run_immediately: bool = True) -> None:
        """Register the scan job and start the scheduler thread.

        Args:
            run_immediately: Fire the first run now instead of after one interval
        """
        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)
        job_kwargs = {}
        if run_immediately:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self.pipeline_callable,
            trigger=trigger,
            id=JOB_ID,
            name="Listing Feed Scan",
            replace_existing=True,
            **job_kwargs,
        )
        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """Stop the scheduler and release anyone waiting on ``shutdown_event``."""
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        if self.shutdown_event:
            self.shutdown_event.set()
        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
