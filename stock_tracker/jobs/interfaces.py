"""Typed interfaces for job-layer lifecycle responsibilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol


class JobAlreadyRunningError(RuntimeError):
    """Raised when a job start is rejected because one run is already active."""


@dataclass(frozen=True)
class JobStatusRecord:
    """Point-in-time status snapshot of one background job.

    Attributes:
        job_name: Job identifier.
        status: `idle`, `running`, `stopping`, `completed`, `stopped` or `failed`.
        start_date: First date of the current or last run.
        end_date: Last date of the current or last run.
        current_date: Date being processed, if any.
        dates_processed: Dates whose file was ingested.
        dates_unavailable: Dates without a published file.
        dates_failed: Dates whose iteration failed, with error codes.
        rows_inserted: Total rows inserted by the run.
        started_at_utc: Run start timestamp.
        ended_at_utc: Run end timestamp.
        stage_timeline: Structured stage events.
    """

    job_name: str
    status: str
    start_date: date | None = None
    end_date: date | None = None
    current_date: date | None = None
    dates_processed: tuple[date, ...] = ()
    dates_unavailable: tuple[date, ...] = ()
    dates_failed: tuple[dict[str, Any], ...] = ()
    rows_inserted: int = 0
    started_at_utc: str | None = None
    ended_at_utc: str | None = None
    stage_timeline: list[dict[str, Any]] = field(default_factory=list)

    def job_to_plain(self) -> dict[str, Any]:
        """Serialize status to a JSON-compatible mapping.

        Returns:
            dict[str, Any]: Status payload with ISO dates.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "job_name": self.job_name,
            "status": self.status,
            "start_date": _job_iso_date(self.start_date),
            "end_date": _job_iso_date(self.end_date),
            "current_date": _job_iso_date(self.current_date),
            "dates_processed": [processed.isoformat() for processed in self.dates_processed],
            "dates_unavailable": [unavailable.isoformat() for unavailable in self.dates_unavailable],
            "dates_failed": list(self.dates_failed),
            "rows_inserted": self.rows_inserted,
            "started_at_utc": self.started_at_utc,
            "ended_at_utc": self.ended_at_utc,
            "stage_timeline": list(self.stage_timeline),
        }


class BackgroundJobPort(Protocol):
    """Port definition for start/stop/status job lifecycles."""

    def job_start(self, end_date: date | None = None) -> JobStatusRecord:
        """Start one background run.

        Args:
            end_date: Last date to process; defaults to today.

        Returns:
            JobStatusRecord: Status right after start.

        Raises:
            JobAlreadyRunningError: Raised when a run is already active.
        """

    def job_stop(self) -> JobStatusRecord:
        """Request cancellation of the active run.

        Returns:
            JobStatusRecord: Status after the request.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

    def job_status(self) -> JobStatusRecord:
        """Return the current status snapshot.

        Returns:
            JobStatusRecord: Current status.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """


def _job_iso_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None
