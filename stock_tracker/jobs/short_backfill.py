"""Background backfill of short-position data from the regulator's daily files."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Final

from sqlalchemy.exc import SQLAlchemyError

from stock_tracker.adapters import (
    ShortPositionSourcePort,
    ShortSourceConnectionError,
    ShortSourceTimeoutError,
    ShortSourceUnavailableError,
)
from stock_tracker.domain import RecordMissingDataError, TrackerError, UnexpectedFileError, domain_build_job_event
from stock_tracker.services import ShortDataService

from .interfaces import BackgroundJobPort, JobAlreadyRunningError, JobStatusRecord

logger = logging.getLogger(__name__)

_ACTIVE_STATUSES: Final[frozenset[str]] = frozenset({"running", "stopping"})


class ShortBackfillJob(BackgroundJobPort):
    """Fetch and ingest one daily file per date after the latest stored reporting date.

    Runs on a daemon thread. Iterations are paced by a fixed delay that a stop
    request interrupts. A failed iteration is logged and recorded on the status,
    then the loop moves on to the next date.
    """

    JOB_NAME: Final[str] = "short_backfill"

    def __init__(
        self,
        short_data_service: ShortDataService,
        source_adapter: ShortPositionSourcePort,
        delay_seconds: float = 60.0,
        today_provider: Callable[[], date] | None = None,
    ):
        """Initialize backfill job dependencies.

        Args:
            short_data_service: Service used to anchor and ingest rows.
            source_adapter: Adapter fetching daily source files.
            delay_seconds: Pause between consecutive fetches.
            today_provider: Optional provider of the default end date.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if short_data_service is None:
            raise ValueError("short_data_service must not be None")
        if source_adapter is None:
            raise ValueError("source_adapter must not be None")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

        self._short_data_service = short_data_service
        self._source_adapter = source_adapter
        self._delay_seconds = delay_seconds
        self._today_provider = today_provider or (lambda: datetime.now(timezone.utc).date())
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._status = JobStatusRecord(job_name=self.JOB_NAME, status="idle")

    def job_start(self, end_date: date | None = None) -> JobStatusRecord:
        """Anchor on the latest stored reporting date and start the loop thread.

        Args:
            end_date: Last date to fetch, inclusive; defaults to today.

        Returns:
            JobStatusRecord: Status right after the thread was started.

        Raises:
            JobAlreadyRunningError: Raised when a run is already active.
            RecordMissingDataError: Raised when no short data exists to anchor on.
        """

        with self._lock:
            self._job_reserve_run(end_date)

        try:
            dates = self._job_resolve_dates(end_date)
        except Exception:
            with self._lock:
                self._status = replace(self._status, status="failed", ended_at_utc=_job_now_iso())
            raise

        self._thread = threading.Thread(target=self._job_loop, args=(dates,), name=self.JOB_NAME, daemon=True)
        self._thread.start()
        return self.job_status()

    def job_run(self, end_date: date | None = None) -> JobStatusRecord:
        """Run the backfill loop in the calling thread.

        Args:
            end_date: Last date to fetch, inclusive; defaults to today.

        Returns:
            JobStatusRecord: Final status.

        Raises:
            JobAlreadyRunningError: Raised when a run is already active.
            RecordMissingDataError: Raised when no short data exists to anchor on.
        """

        with self._lock:
            self._job_reserve_run(end_date)

        try:
            dates = self._job_resolve_dates(end_date)
        except Exception:
            with self._lock:
                self._status = replace(self._status, status="failed", ended_at_utc=_job_now_iso())
            raise

        self._job_loop(dates)
        return self.job_status()

    def job_stop(self) -> JobStatusRecord:
        with self._lock:
            if self._status.status == "running":
                self._stop_event.set()
                self._status = replace(self._status, status="stopping")
                logger.info("stop requested for %s", self.JOB_NAME)
        return self.job_status()

    def job_status(self) -> JobStatusRecord:
        with self._lock:
            return replace(self._status, stage_timeline=list(self._status.stage_timeline))

    def job_wait(self, timeout_seconds: float | None = None) -> bool:
        """Wait for the loop thread to finish.

        Args:
            timeout_seconds: Optional wait limit.

        Returns:
            bool: True when no loop thread is alive afterwards.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout_seconds)
        return not thread.is_alive()

    def _job_reserve_run(self, end_date: date | None) -> None:
        if self._status.status in _ACTIVE_STATUSES:
            raise JobAlreadyRunningError(f"{self.JOB_NAME} is already running")

        self._stop_event.clear()
        self._status = JobStatusRecord(
            job_name=self.JOB_NAME,
            status="running",
            end_date=end_date,
            started_at_utc=_job_now_iso(),
            stage_timeline=[domain_build_job_event(stage="run", status="started")],
        )

    def _job_resolve_dates(self, end_date: date | None) -> list[date]:
        latest_reporting_date = self._short_data_service.service_get_latest_reporting_date()
        if latest_reporting_date is None:
            raise RecordMissingDataError("No short data exists to anchor the backfill on")

        final_date = end_date or self._today_provider()
        start_date = latest_reporting_date + timedelta(days=1)
        dates = [start_date + timedelta(days=offset) for offset in range((final_date - start_date).days + 1)]

        with self._lock:
            self._status = replace(
                self._status,
                start_date=start_date,
                end_date=final_date,
                stage_timeline=[
                    *self._status.stage_timeline,
                    domain_build_job_event(
                        stage="anchor",
                        status="completed",
                        details={
                            "latest_reporting_date": latest_reporting_date.isoformat(),
                            "date_count": len(dates),
                        },
                    ),
                ],
            )
        logger.info("%s anchored on %s with %d dates to fetch", self.JOB_NAME, latest_reporting_date, len(dates))
        return dates

    def _job_loop(self, dates: list[date]) -> None:
        final_status = "failed"
        try:
            for index, target_date in enumerate(dates):
                if index > 0 and self._stop_event.wait(self._delay_seconds):
                    break
                if self._stop_event.is_set():
                    break
                self._job_process_date(target_date)
            final_status = "stopped" if self._stop_event.is_set() else "completed"
        finally:
            with self._lock:
                self._status = replace(
                    self._status,
                    status=final_status,
                    current_date=None,
                    ended_at_utc=_job_now_iso(),
                    stage_timeline=[
                        *self._status.stage_timeline,
                        domain_build_job_event(stage="run", status=final_status),
                    ],
                )
            logger.info("%s finished with status=%s", self.JOB_NAME, final_status)

    def _job_process_date(self, target_date: date) -> None:
        with self._lock:
            self._status = replace(self._status, current_date=target_date)

        try:
            fetch_result = self._source_adapter.adapter_fetch_short_positions(target_date)
            upsert_results = self._short_data_service.service_ingest_source_rows(fetch_result.rows)
        except ShortSourceUnavailableError:
            logger.info("no short position file published for %s", target_date)
            self._job_record(
                target_date,
                domain_build_job_event(stage="fetch", status="unavailable", details={"date": target_date.isoformat()}),
                dates_unavailable=(target_date,),
            )
            return
        except Exception as error:
            error_code = self._job_error_code_for_exception(error)
            logger.exception("%s iteration for %s failed with %s", self.JOB_NAME, target_date, error_code)
            self._job_record(
                target_date,
                domain_build_job_event(
                    stage="fetch",
                    status="failed",
                    details={"date": target_date.isoformat(), "error_code": error_code, "error_message": str(error)},
                ),
                dates_failed=({"date": target_date.isoformat(), "error_code": error_code},),
            )
            return

        logger.info("ingested %d short rows for %s", len(upsert_results), target_date)
        self._job_record(
            target_date,
            domain_build_job_event(
                stage="persist",
                status="completed",
                details={"date": target_date.isoformat(), "row_count": len(upsert_results)},
            ),
            dates_processed=(target_date,),
            rows_inserted=len(upsert_results),
        )

    def _job_record(
        self,
        target_date: date,
        event: dict[str, object],
        dates_processed: tuple[date, ...] = (),
        dates_unavailable: tuple[date, ...] = (),
        dates_failed: tuple[dict[str, str], ...] = (),
        rows_inserted: int = 0,
    ) -> None:
        with self._lock:
            self._status = replace(
                self._status,
                current_date=target_date,
                dates_processed=(*self._status.dates_processed, *dates_processed),
                dates_unavailable=(*self._status.dates_unavailable, *dates_unavailable),
                dates_failed=(*self._status.dates_failed, *dates_failed),
                rows_inserted=self._status.rows_inserted + rows_inserted,
                stage_timeline=[*self._status.stage_timeline, event],
            )

    def _job_error_code_for_exception(self, error: Exception) -> str:
        """Map an iteration exception to a deterministic failure code.

        Args:
            error: Caught iteration exception.

        Returns:
            str: Failure code recorded on the status.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if isinstance(error, UnexpectedFileError):
            return "BACKFILL_UNEXPECTED_FILE_ERROR"
        if isinstance(error, ShortSourceTimeoutError):
            return "BACKFILL_TIMEOUT_ERROR"
        if isinstance(error, ShortSourceConnectionError):
            return "BACKFILL_CONNECTION_ERROR"
        if isinstance(error, SQLAlchemyError):
            return "BACKFILL_DATABASE_ERROR"
        if isinstance(error, TrackerError):
            return f"BACKFILL_{error.kind.value}"
        if isinstance(error, TimeoutError):
            return "BACKFILL_TIMEOUT_ERROR"
        if isinstance(error, ConnectionError):
            return "BACKFILL_CONNECTION_ERROR"
        if isinstance(error, (ValueError, TypeError)):
            return "BACKFILL_CONTRACT_ERROR"
        return "BACKFILL_UNEXPECTED_ERROR"


def _job_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
