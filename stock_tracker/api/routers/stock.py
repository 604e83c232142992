"""Stock resource router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from stock_tracker.config import AppSettings
from stock_tracker.services import StockService

from ..responses import api_require_body_items, api_require_body_object, api_success_response


def api_create_stock_router(settings: AppSettings, stock_service: StockService) -> APIRouter:
    """Create the `/stock` router.

    Tracked-stock routes are registered before `/stock/{ticker_no}` so that
    `tracked` is never read as a ticker.

    Args:
        settings: Runtime settings used for body limits.
        stock_service: Stock service.

    Returns:
        APIRouter: Router exposing stock CRUD and tracking endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if stock_service is None:
        raise ValueError("stock_service must not be None")

    router = APIRouter(prefix="/stock", tags=["stock"])

    @router.get("")
    def api_stock_list(request: Request) -> JSONResponse:
        return api_success_response(stock_service.service_list(dict(request.query_params)))

    @router.post("")
    def api_stock_create(payload: Any = Body(default=None)) -> JSONResponse:
        items = api_require_body_items(payload, settings.api_max_body_items)
        return api_success_response(stock_service.service_create(items))

    @router.get("/tracked")
    def api_stock_tracked_list() -> JSONResponse:
        return api_success_response(stock_service.service_list_tracked())

    @router.post("/tracked/{stock_id}/track")
    def api_stock_track(stock_id: str) -> JSONResponse:
        return api_success_response(stock_service.service_set_tracked({"id": stock_id}, True))

    @router.post("/tracked/{stock_id}/untrack")
    def api_stock_untrack(stock_id: str) -> JSONResponse:
        return api_success_response(stock_service.service_set_tracked({"id": stock_id}, False))

    @router.get("/{ticker_no}")
    def api_stock_get(ticker_no: str) -> JSONResponse:
        return api_success_response(stock_service.service_get({"ticker_no": ticker_no}))

    @router.put("/{ticker_no}")
    def api_stock_upsert(ticker_no: str, payload: Any = Body(default=None)) -> JSONResponse:
        """Insert or update the active stock with the path ticker.

        Args:
            ticker_no: Path ticker, which overrides any ticker in the body.
            payload: Stock body object.

        Returns:
            JSONResponse: Envelope with the single upsert result.

        Raises:
            InvalidRequestError: Raised when the body is not a valid stock.
        """

        body = {**api_require_body_object(payload), "ticker_no": ticker_no}
        return api_success_response(stock_service.service_upsert(body))

    @router.delete("/{ticker_no}")
    def api_stock_delete(ticker_no: str) -> JSONResponse:
        return api_success_response(stock_service.service_delete({"ticker_no": ticker_no}))

    return router
