"""Crawler package — remote search and import job tracking."""

from crawler.callbacks import ImportCallback, LoggingCallback, RichProgressCallback
from crawler.job_tracker import ImportTracker, is_rate_limited

__all__ = [
    "ImportCallback",
    "LoggingCallback",
    "RichProgressCallback",
    "ImportTracker",
    "is_rate_limited",
]
