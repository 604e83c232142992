"""Job layer package for background ingestion lifecycles."""

from .interfaces import BackgroundJobPort, JobAlreadyRunningError, JobStatusRecord
from .short_backfill import ShortBackfillJob

__all__ = [
    "BackgroundJobPort",
    "JobAlreadyRunningError",
    "JobStatusRecord",
    "ShortBackfillJob",
]
