"""Tests for resource routes, response envelopes and error handling."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from stock_tracker.api import create_api_application
from stock_tracker.config import AppSettings
from stock_tracker.db import db_create_currency_cache
from stock_tracker.domain import CurrencyRecord, HealthStatus
from stock_tracker.jobs import JobAlreadyRunningError, JobStatusRecord
from stock_tracker.services import DiaryEntryService, ShortDataService, StockService, StockTransactionService


class _HealthyDatabaseService:
    def db_connection_label(self) -> str:
        return "postgresql://test"

    def db_check_health(self) -> HealthStatus:
        return HealthStatus(status="ok", detail="database connectivity verified")


class _BackfillJobStub:
    """Job double recording start and stop requests."""

    def __init__(self, running: bool = False):
        self.running = running
        self.started_with: list[date | None] = []
        self.stop_count = 0

    def job_start(self, end_date: date | None = None) -> JobStatusRecord:
        """Record the start request or refuse it while running.

        Returns:
            JobStatusRecord: Running status.

        Raises:
            JobAlreadyRunningError: Raised when the double is marked running.
        """

        if self.running:
            raise JobAlreadyRunningError("short_backfill is already running")
        self.started_with.append(end_date)
        return JobStatusRecord(job_name="short_backfill", status="running", end_date=end_date)

    def job_stop(self) -> JobStatusRecord:
        self.stop_count += 1
        return JobStatusRecord(job_name="short_backfill", status="stopping")

    def job_status(self) -> JobStatusRecord:
        return JobStatusRecord(job_name="short_backfill", status="running" if self.running else "idle")


def _application(executor: Any, backfill_job: _BackfillJobStub | None = None, max_body_items: int = 1000) -> FastAPI:
    currency_cache = db_create_currency_cache()
    currency_cache.cache_initialize(
        lambda: [CurrencyRecord(iso_code="HKD", decimal_places=2)],
        lambda currency: currency.iso_code,
    )
    return create_api_application(
        settings=AppSettings(api_max_body_items=max_body_items, whitelisted_origin="http://localhost:3000"),
        db_health_service=_HealthyDatabaseService(),
        stock_service=StockService(executor=executor),
        transaction_service=StockTransactionService(executor=executor, currency_cache=currency_cache),
        short_data_service=ShortDataService(executor=executor),
        diary_entry_service=DiaryEntryService(executor=executor),
        backfill_job=backfill_job or _BackfillJobStub(),
    )


def test_stock_list_returns_success_envelope(recording_executor_factory) -> None:
    """Successful reads answer 200 with status 1 and plain records.

    Returns:
        None: Assertions validate the envelope.

    Raises:
        AssertionError: Raised when the envelope differs.
    """

    executor = recording_executor_factory([[{"id": 1, "ticker_no": "00700", "name": "TENCENT", "board_lot": 100}]])
    client = TestClient(_application(executor))

    response = client.get("/stock", params={"name": "TEN"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 1
    assert body["message"] == "Success"
    assert body["data"][0]["ticker_no"] == "00700"
    assert body["data"][0]["board_lot"] == 100
    assert executor.queries[0][1] == {"name": "%TEN%"}


def test_tracked_route_is_not_read_as_ticker(recording_executor_factory) -> None:
    executor = recording_executor_factory()
    client = TestClient(_application(executor))

    response = client.get("/stock/tracked")

    assert response.status_code == 200
    assert executor.queries[0][0] == "SELECT * FROM stocks WHERE is_tracked AND is_active ORDER BY ticker_no"


def test_track_stock_returns_updated_record(recording_executor_factory) -> None:
    executor = recording_executor_factory([[{"id": 7, "ticker_no": "00700", "is_tracked": True}]])
    client = TestClient(_application(executor))

    response = client.post("/stock/tracked/7/track")

    assert response.json()["data"]["is_tracked"] is True
    assert executor.queries[0][1]["id"] == 7


def test_duplicate_stock_maps_to_conflict(recording_executor_factory) -> None:
    executor = recording_executor_factory([[{"ticker_no": "00700"}]])
    client = TestClient(_application(executor))

    response = client.post("/stock", json=[{"ticker_no": "00700", "name": "TENCENT"}])

    assert response.status_code == 409
    assert response.json() == {
        "status": 409,
        "message": "Stocks with ids ( 00700 ) already exist!",
        "data": {"ticker_nos": ["00700"]},
        "error_kind": "DUPLICATE_FOUND",
    }


def test_create_rejects_body_over_item_limit(recording_executor_factory) -> None:
    executor = recording_executor_factory()
    client = TestClient(_application(executor, max_body_items=1))

    response = client.post("/stock", json=[{"ticker_no": "00700"}, {"ticker_no": "00005"}])

    assert response.status_code == 400
    assert response.json()["error_kind"] == "INVALID_REQUEST"
    assert executor.queries == []


def test_malformed_json_body_maps_to_invalid_request(recording_executor_factory) -> None:
    client = TestClient(_application(recording_executor_factory()))

    response = client.post("/stock", content=b"[{bad", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["status"] == 400


def test_put_uses_path_ticker(recording_executor_factory) -> None:
    executor = recording_executor_factory()
    client = TestClient(_application(executor))

    response = client.put("/stock/00700", json={"ticker_no": "99999", "name": "TENCENT HOLDINGS"})

    assert response.status_code == 200
    assert executor.batches[0][1][0]["ticker_no"] == "00700"
    assert response.json()["data"] == [{"affected_rows": 1, "inserted_id": 1}]


def test_delete_of_missing_diary_entry_reports_success(recording_executor_factory) -> None:
    client = TestClient(_application(recording_executor_factory()))

    response = client.delete("/diary-entry/999")

    assert response.json()["data"] == {"id": "999", "status": "success"}


def test_transaction_list_collects_repeated_type_params(recording_executor_factory) -> None:
    executor = recording_executor_factory()
    client = TestClient(_application(executor))

    response = client.get("/transaction?stock_id=1&type=buy&type=sell")

    assert response.status_code == 200
    assert executor.queries[0][1] == {"stock_id": 1, "type": ["buy", "sell"]}


def test_transaction_stocks_route_reads_view(recording_executor_factory) -> None:
    executor = recording_executor_factory([[{"id": 1, "ticker_no": "00700"}]])
    client = TestClient(_application(executor))

    response = client.get("/transaction/stocks")

    assert response.json()["data"][0]["ticker_no"] == "00700"
    assert executor.queries[0][0] == "SELECT * FROM stocks_w_transactions ORDER BY ticker_no"


def test_transaction_with_missing_stock_maps_to_not_found(recording_executor_factory) -> None:
    executor = recording_executor_factory([[]])
    client = TestClient(_application(executor))
    money = {"whole": 10, "fractional": 0, "decimal_places": 2, "iso_code": "HKD"}

    response = client.post(
        "/transaction",
        json=[
            {
                "stock_id": 5,
                "type": "buy",
                "amount": money,
                "quantity": 100,
                "fee": money,
                "transaction_date": "2024-01-02",
                "currency": "HKD",
            }
        ],
    )

    assert response.status_code == 404
    assert response.json()["data"] == {"stock_ids": [5]}
    assert executor.batches == []


def test_unexpected_error_maps_to_unknown_error(recording_executor_factory) -> None:
    class _BrokenExecutor:
        def db_execute_query(self, *_args: Any, **_kwargs: Any) -> Any:
            raise RuntimeError("pool exhausted")

    client = TestClient(_application(_BrokenExecutor()), raise_server_exceptions=False)

    response = client.get("/stock")

    assert response.status_code == 500
    assert response.json() == {"status": -1, "message": "Unknown Error", "data": None}


def test_backfill_start_passes_end_date(recording_executor_factory) -> None:
    backfill_job = _BackfillJobStub()
    client = TestClient(_application(recording_executor_factory(), backfill_job=backfill_job))

    response = client.post("/short/retrieve-from-source", params={"end_date": "2024-01-05"})

    assert response.status_code == 202
    assert response.json()["data"]["status"] == "running"
    assert backfill_job.started_with == [date(2024, 1, 5)]


def test_backfill_start_requires_end_date(recording_executor_factory) -> None:
    backfill_job = _BackfillJobStub()
    client = TestClient(_application(recording_executor_factory(), backfill_job=backfill_job))

    response = client.post("/short/retrieve-from-source")

    assert response.status_code == 400
    assert response.json()["data"] == [{"index": 0, "error_messages": ['Field "end_date" is required.']}]
    assert backfill_job.started_with == []


def test_backfill_start_while_running_maps_to_conflict(recording_executor_factory) -> None:
    client = TestClient(_application(recording_executor_factory(), backfill_job=_BackfillJobStub(running=True)))

    response = client.post("/short/retrieve-from-source", params={"end_date": "2024-01-05"})

    assert response.status_code == 409
    assert response.json()["data"]["status"] == "running"


def test_backfill_status_and_stop_routes(recording_executor_factory) -> None:
    backfill_job = _BackfillJobStub()
    client = TestClient(_application(recording_executor_factory(), backfill_job=backfill_job))

    assert client.get("/short/retrieve-from-source/status").json()["data"]["status"] == "idle"
    assert client.post("/short/retrieve-from-source/stop").json()["data"]["status"] == "stopping"
    assert backfill_job.stop_count == 1


def test_short_mismatch_route_applies_paging(recording_executor_factory) -> None:
    executor = recording_executor_factory(
        [[{"ticker_no": "08888", "row_count": 2, "latest_reporting_date": date(2024, 1, 5)}]]
    )
    client = TestClient(_application(executor))

    response = client.get("/short/mismatch", params={"limit": "10"})

    assert response.json()["data"] == [{"ticker_no": "08888", "row_count": 2, "latest_reporting_date": "2024-01-05"}]
    assert executor.queries[0][1] == {"limit": 10, "offset": 0}


def test_short_get_rejects_non_integer_id(recording_executor_factory) -> None:
    executor = recording_executor_factory()
    client = TestClient(_application(executor))

    response = client.get("/short/abc")

    assert response.status_code == 400
    assert executor.queries == []


def test_cors_preflight_allows_whitelisted_origin(recording_executor_factory) -> None:
    client = TestClient(_application(recording_executor_factory()))

    response = client.options(
        "/stock",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "PUT"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_non_finite_short_numbers_map_to_invalid_request(recording_executor_factory) -> None:
    """Non-finite numerals are rejected as invalid input instead of failing later.

    Returns:
        None: Assertions validate both rejections.

    Raises:
        AssertionError: Raised when a non-finite value reaches the database layer.
    """

    executor = recording_executor_factory()
    client = TestClient(_application(executor))

    create_response = client.post(
        "/short",
        json=[{"ticker_no": "00001", "reporting_date": "2024-01-02", "shorted_shares": "nan"}],
    )
    mismatch_response = client.get("/short/mismatch", params={"limit": "inf", "offset": "-Infinity"})

    assert create_response.status_code == 400
    assert create_response.json()["data"] == [
        {"index": 0, "error_messages": ['Field "shorted_shares": Shorted Shares must be a number']}
    ]
    assert mismatch_response.status_code == 400
    assert len(mismatch_response.json()["data"][0]["error_messages"]) == 2
    assert executor.queries == []
    assert executor.batches == []
