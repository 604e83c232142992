"""Short reporting resource router, including backfill job control."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request, status
from fastapi.responses import JSONResponse

from stock_tracker.config import AppSettings
from stock_tracker.domain import domain_coerce_date
from stock_tracker.jobs import BackgroundJobPort
from stock_tracker.services import ShortDataService
from stock_tracker.validation import SHORT_BACKFILL_PARAM_RULES, validation_raise_for_invalid

from ..responses import api_require_body_items, api_require_body_object, api_success_response


def api_create_short_data_router(
    settings: AppSettings,
    short_data_service: ShortDataService,
    backfill_job: BackgroundJobPort,
) -> APIRouter:
    """Create the `/short` router.

    Fixed paths (`/retrieve-from-source`, `/mismatch`) are registered before
    `/short/{short_id}`.

    Args:
        settings: Runtime settings used for body limits.
        short_data_service: Short data service.
        backfill_job: Background job fetching daily source files.

    Returns:
        APIRouter: Router exposing short data CRUD, mismatch and backfill endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if short_data_service is None:
        raise ValueError("short_data_service must not be None")
    if backfill_job is None:
        raise ValueError("backfill_job must not be None")

    router = APIRouter(prefix="/short", tags=["short"])

    @router.get("")
    def api_short_list(request: Request) -> JSONResponse:
        return api_success_response(short_data_service.service_list(dict(request.query_params)))

    @router.post("")
    def api_short_create(payload: Any = Body(default=None)) -> JSONResponse:
        items = api_require_body_items(payload, settings.api_max_body_items)
        return api_success_response(short_data_service.service_create(items))

    @router.post("/retrieve-from-source")
    def api_short_backfill_start(request: Request) -> JSONResponse:
        """Start the background backfill up to `end_date`, inclusive.

        Args:
            request: Incoming request carrying the `end_date` query param.

        Returns:
            JSONResponse: Envelope with the job status, HTTP 202.

        Raises:
            InvalidRequestError: Raised when `end_date` is missing or malformed.
            JobAlreadyRunningError: Raised when a run is already active.
            RecordMissingDataError: Raised when no short data exists to anchor on.
        """

        params = dict(request.query_params)
        validation_raise_for_invalid(params, SHORT_BACKFILL_PARAM_RULES)

        job_status = backfill_job.job_start(end_date=domain_coerce_date(params["end_date"]))
        return api_success_response(job_status.job_to_plain(), status_code=status.HTTP_202_ACCEPTED)

    @router.get("/retrieve-from-source/status")
    def api_short_backfill_status() -> JSONResponse:
        return api_success_response(backfill_job.job_status().job_to_plain())

    @router.post("/retrieve-from-source/stop")
    def api_short_backfill_stop() -> JSONResponse:
        return api_success_response(backfill_job.job_stop().job_to_plain())

    @router.get("/mismatch")
    def api_short_mismatch_list(request: Request) -> JSONResponse:
        return api_success_response(short_data_service.service_list_mismatched_tickers(dict(request.query_params)))

    @router.get("/mismatch/{ticker_no}")
    def api_short_mismatch_rows(ticker_no: str) -> JSONResponse:
        return api_success_response(short_data_service.service_list_mismatched_rows({"ticker_no": ticker_no}))

    @router.get("/{short_id}")
    def api_short_get(short_id: str) -> JSONResponse:
        return api_success_response(short_data_service.service_get({"id": short_id}))

    @router.put("/{short_id}")
    def api_short_upsert(short_id: str, payload: Any = Body(default=None)) -> JSONResponse:
        body = {**api_require_body_object(payload), "id": short_id}
        return api_success_response(short_data_service.service_upsert(body))

    @router.delete("/{short_id}")
    def api_short_delete(short_id: str) -> JSONResponse:
        return api_success_response(short_data_service.service_delete({"id": short_id}))

    return router
