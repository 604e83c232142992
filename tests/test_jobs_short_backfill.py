"""Tests for the short-data backfill job lifecycle."""

from __future__ import annotations

import threading
from datetime import date
from typing import Any

import pytest

from stock_tracker.adapters import ShortPositionFetchResult, ShortSourceConnectionError, ShortSourceUnavailableError
from stock_tracker.db import UpsertResult
from stock_tracker.domain import RecordMissingDataError
from stock_tracker.jobs import JobAlreadyRunningError, ShortBackfillJob


class _ShortDataServiceStub:
    """Service double anchoring on a fixed date and recording ingested rows."""

    def __init__(self, latest_reporting_date: date | None):
        self.latest_reporting_date = latest_reporting_date
        self.ingested: list[list[dict[str, Any]]] = []

    def service_get_latest_reporting_date(self) -> date | None:
        return self.latest_reporting_date

    def service_ingest_source_rows(self, rows: list[dict[str, Any]]) -> list[UpsertResult]:
        self.ingested.append(list(rows))
        return [UpsertResult(affected_rows=1, inserted_id=index) for index, _ in enumerate(rows)]


class _SourceAdapterStub:
    """Adapter double answering per date from a prepared outcome map."""

    def __init__(self, outcomes: dict[date, Any] | None = None, gate: threading.Event | None = None):
        self.outcomes = outcomes or {}
        self.gate = gate
        self.entered = threading.Event()
        self.requested: list[date] = []

    def adapter_source_name(self) -> str:
        return "stub"

    def adapter_fetch_short_positions(self, reporting_date: date) -> ShortPositionFetchResult:
        """Return or raise the prepared outcome for one date.

        Returns:
            ShortPositionFetchResult: Two parsed rows unless an error is prepared.

        Raises:
            Exception: Prepared outcome exceptions.
        """

        self.requested.append(reporting_date)
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        outcome = self.outcomes.get(reporting_date)
        if isinstance(outcome, Exception):
            raise outcome
        rows = [
            {"ticker_no": "00700", "reporting_date": reporting_date, "shorted_shares": 1, "shorted_amount": 2},
            {"ticker_no": "00005", "reporting_date": reporting_date, "shorted_shares": 3, "shorted_amount": 4},
        ]
        return ShortPositionFetchResult(
            reporting_date=reporting_date,
            source_url=f"https://example.test/{reporting_date:%Y%m%d}.csv",
            rows=rows,
            stage_timeline=[],
        )


def test_run_fetches_each_date_after_latest_through_end_date() -> None:
    """The loop covers latest+1 through the end date inclusive.

    Returns:
        None: Assertions validate processed dates and counters.

    Raises:
        AssertionError: Raised when the loop covers other dates.
    """

    service = _ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1))
    adapter = _SourceAdapterStub()
    job = ShortBackfillJob(short_data_service=service, source_adapter=adapter, delay_seconds=0)

    status = job.job_run(end_date=date(2024, 1, 3))

    assert adapter.requested == [date(2024, 1, 2), date(2024, 1, 3)]
    assert status.status == "completed"
    assert status.start_date == date(2024, 1, 2)
    assert status.dates_processed == (date(2024, 1, 2), date(2024, 1, 3))
    assert status.rows_inserted == 4
    assert len(service.ingested) == 2


def test_run_records_unavailable_and_failed_dates_and_continues() -> None:
    service = _ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1))
    adapter = _SourceAdapterStub(
        outcomes={
            date(2024, 1, 2): ShortSourceUnavailableError("No file exists for this date."),
            date(2024, 1, 3): ShortSourceConnectionError("connection reset"),
        }
    )
    job = ShortBackfillJob(short_data_service=service, source_adapter=adapter, delay_seconds=0)

    status = job.job_run(end_date=date(2024, 1, 4))

    assert status.status == "completed"
    assert status.dates_unavailable == (date(2024, 1, 2),)
    assert status.dates_failed == ({"date": "2024-01-03", "error_code": "BACKFILL_CONNECTION_ERROR"},)
    assert status.dates_processed == (date(2024, 1, 4),)


def test_run_without_anchor_fails_with_missing_data() -> None:
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=None),
        source_adapter=_SourceAdapterStub(),
        delay_seconds=0,
    )

    with pytest.raises(RecordMissingDataError):
        job.job_run(end_date=date(2024, 1, 3))

    assert job.job_status().status == "failed"


def test_end_date_before_start_completes_without_fetching() -> None:
    adapter = _SourceAdapterStub()
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=date(2024, 1, 5)),
        source_adapter=adapter,
        delay_seconds=0,
    )

    status = job.job_run(end_date=date(2024, 1, 5))

    assert status.status == "completed"
    assert adapter.requested == []


def test_end_date_defaults_to_today_provider() -> None:
    adapter = _SourceAdapterStub()
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1)),
        source_adapter=adapter,
        delay_seconds=0,
        today_provider=lambda: date(2024, 1, 2),
    )

    job.job_run()

    assert adapter.requested == [date(2024, 1, 2)]


def test_second_start_is_rejected_and_stop_interrupts_the_loop() -> None:
    """A running job refuses a second start and stops between dates.

    Returns:
        None: Assertions validate lifecycle transitions.

    Raises:
        AssertionError: Raised when lifecycle transitions differ.
    """

    gate = threading.Event()
    adapter = _SourceAdapterStub(gate=gate)
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1)),
        source_adapter=adapter,
        delay_seconds=30,
    )

    started = job.job_start(end_date=date(2024, 1, 10))
    assert started.status == "running"

    with pytest.raises(JobAlreadyRunningError):
        job.job_start(end_date=date(2024, 1, 10))

    assert adapter.entered.wait(timeout=5)
    assert job.job_stop().status == "stopping"
    gate.set()
    assert job.job_wait(timeout_seconds=5)

    final_status = job.job_status()
    assert final_status.status == "stopped"
    assert adapter.requested == [date(2024, 1, 2)]
    assert final_status.stage_timeline[-1]["status"] == "stopped"


def test_status_serializes_to_plain_mapping() -> None:
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1)),
        source_adapter=_SourceAdapterStub(),
        delay_seconds=0,
    )
    job.job_run(end_date=date(2024, 1, 2))

    plain = job.job_status().job_to_plain()

    assert plain["job_name"] == "short_backfill"
    assert plain["dates_processed"] == ["2024-01-02"]
    assert plain["end_date"] == "2024-01-02"


def test_unexpected_iteration_error_is_recorded_and_job_can_restart() -> None:
    """An unforeseen adapter error fails only its date and releases the run.

    Returns:
        None: Assertions validate the recorded failure and the restart.

    Raises:
        AssertionError: Raised when the job stays marked as running.
    """

    adapter = _SourceAdapterStub(outcomes={date(2024, 1, 2): OverflowError("cannot convert float infinity to integer")})
    job = ShortBackfillJob(
        short_data_service=_ShortDataServiceStub(latest_reporting_date=date(2024, 1, 1)),
        source_adapter=adapter,
        delay_seconds=0,
    )

    job.job_start(end_date=date(2024, 1, 3))
    assert job.job_wait(timeout_seconds=5)

    status = job.job_status()
    assert status.status == "completed"
    assert status.dates_failed == ({"date": "2024-01-02", "error_code": "BACKFILL_UNEXPECTED_ERROR"},)
    assert status.dates_processed == (date(2024, 1, 3),)
    assert job.job_start(end_date=date(2024, 1, 3)).status == "running"
    assert job.job_wait(timeout_seconds=5)


def test_error_escaping_the_loop_marks_run_failed() -> None:
    class _BrokenIngestService(_ShortDataServiceStub):
        def service_ingest_source_rows(self, rows: list[dict[str, Any]]) -> Any:
            return None

    job = ShortBackfillJob(
        short_data_service=_BrokenIngestService(latest_reporting_date=date(2024, 1, 1)),
        source_adapter=_SourceAdapterStub(),
        delay_seconds=0,
    )

    with pytest.raises(TypeError):
        job.job_run(end_date=date(2024, 1, 2))

    status = job.job_status()
    assert status.status == "failed"
    assert status.ended_at_utc is not None
    assert (status.stage_timeline[-1]["stage"], status.stage_timeline[-1]["status"]) == ("run", "failed")
