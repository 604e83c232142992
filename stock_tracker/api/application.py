"""FastAPI application factory for the stock tracker API.

This module composes resource routers, CORS, startup cache loading and the
error handlers that turn failures into response envelopes.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stock_tracker.config import AppSettings
from stock_tracker.db import CurrencyCache, DatabaseHealthPort, QueryExecutorPort, db_initialize_currency_cache
from stock_tracker.domain import InvalidRequestError, TrackerError
from stock_tracker.jobs import BackgroundJobPort, JobAlreadyRunningError
from stock_tracker.services import DiaryEntryService, ShortDataService, StockService, StockTransactionService

from .responses import api_error_response, api_unknown_error_response
from .routers import (
    api_create_diary_entry_router,
    api_create_health_router,
    api_create_short_data_router,
    api_create_stock_router,
    api_create_transaction_router,
)

logger = logging.getLogger(__name__)

JOB_ALREADY_RUNNING_CODE = 409


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    stock_service: StockService,
    transaction_service: StockTransactionService,
    short_data_service: ShortDataService,
    diary_entry_service: DiaryEntryService,
    backfill_job: BackgroundJobPort,
    currency_cache: CurrencyCache | None = None,
    executor: QueryExecutorPort | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    When both `currency_cache` and `executor` are given, the currency cache is
    loaded once at startup before any request is served.

    Args:
        settings: Validated application settings.
        db_health_service: Database health service used by health endpoints.
        stock_service: Stock service.
        transaction_service: Transaction service.
        short_data_service: Short data service.
        diary_entry_service: Diary entry service.
        backfill_job: Background job behind `/short/retrieve-from-source`.
        currency_cache: Optional currency cache to load at startup.
        executor: Optional executor used to load the currency cache.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when a router dependency is invalid.
    """

    @asynccontextmanager
    async def api_lifespan(_: FastAPI) -> AsyncIterator[None]:
        if currency_cache is not None and executor is not None:
            db_initialize_currency_cache(currency_cache, executor)
        yield

    application = FastAPI(title="Stock Tracker", lifespan=api_lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.whitelisted_origin],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "Origin", "Accept", "X-Requested-With"],
    )

    @application.exception_handler(TrackerError)
    async def api_handle_tracker_error(request: Request, error: TrackerError) -> JSONResponse:
        logger.warning(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            error.kind.value,
            error.message,
        )
        return api_error_response(error)

    @application.exception_handler(RequestValidationError)
    async def api_handle_request_validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
        messages = [str(detail.get("msg", "")) for detail in error.errors()]
        return await api_handle_tracker_error(request, InvalidRequestError([{"index": 0, "error_messages": messages}]))

    @application.exception_handler(JobAlreadyRunningError)
    async def api_handle_job_already_running(request: Request, error: JobAlreadyRunningError) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, error)
        payload = {
            "status": JOB_ALREADY_RUNNING_CODE,
            "message": str(error),
            "data": backfill_job.job_status().job_to_plain(),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_409_CONFLICT)

    @application.exception_handler(Exception)
    async def api_handle_unknown_error(request: Request, error: Exception) -> JSONResponse:
        logger.error("%s %s failed unexpectedly", request.method, request.url.path, exc_info=error)
        return api_unknown_error_response()

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {
            "service": "stock-tracker",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_stock_router(settings=settings, stock_service=stock_service))
    application.include_router(
        api_create_transaction_router(settings=settings, transaction_service=transaction_service)
    )
    application.include_router(
        api_create_short_data_router(
            settings=settings,
            short_data_service=short_data_service,
            backfill_job=backfill_job,
        )
    )
    application.include_router(
        api_create_diary_entry_router(settings=settings, diary_entry_service=diary_entry_service)
    )

    return application
