"""Periodic execution of the scan pipeline."""

from .service import JOB_ID, SchedulerService

__all__ = ["SchedulerService", "JOB_ID"]
