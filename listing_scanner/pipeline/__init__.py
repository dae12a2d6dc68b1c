"""Pipeline orchestration for feed scans."""

from .models import PipelineRunResult
from .runner import ScanPipeline

__all__ = ["ScanPipeline", "PipelineRunResult"]
