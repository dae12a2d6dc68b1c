"""Data models for pipeline run reporting."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PipelineRunResult:
    """
    Summary of one completed pipeline run.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        total_duration_seconds: Wall time of the run
        sheet: Log sheet the listings were written to
        pages_fetched: Feed pages retrieved (or saved documents read)
        total_listings: Listings parsed across all pages
        total_matched: Listings with at least one keyword match
        rows_logged: Rows appended to the listing log
        notification_status: "sent", "skipped", or None when notification
            was not requested
    """

    run_started_at: datetime
    run_finished_at: datetime
    total_duration_seconds: float = 0.0
    sheet: str = "main"
    pages_fetched: int = 0
    total_listings: int = 0
    total_matched: int = 0
    rows_logged: int = 0
    notification_status: Optional[str] = None

    def __post_init__(self):
        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()
