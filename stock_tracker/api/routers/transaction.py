"""Stock transaction resource router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from stock_tracker.config import AppSettings
from stock_tracker.services import StockTransactionService

from ..responses import api_require_body_items, api_require_body_object, api_success_response


def api_create_transaction_router(settings: AppSettings, transaction_service: StockTransactionService) -> APIRouter:
    """Create the `/transaction` router.

    Args:
        settings: Runtime settings used for body limits.
        transaction_service: Transaction service.

    Returns:
        APIRouter: Router exposing transaction CRUD endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if transaction_service is None:
        raise ValueError("transaction_service must not be None")

    router = APIRouter(prefix="/transaction", tags=["transaction"])

    @router.get("")
    def api_transaction_list(request: Request) -> JSONResponse:
        """List transactions; `type` may repeat to filter on several types.

        Args:
            request: Incoming request carrying filter query params.

        Returns:
            JSONResponse: Envelope with matching transactions.

        Raises:
            InvalidRequestError: Raised when filter params are invalid.
        """

        params: dict[str, Any] = dict(request.query_params)
        if "type" in request.query_params:
            params["type"] = request.query_params.getlist("type")
        return api_success_response(transaction_service.service_list(params))

    @router.post("")
    def api_transaction_create(payload: Any = Body(default=None)) -> JSONResponse:
        items = api_require_body_items(payload, settings.api_max_body_items)
        return api_success_response(transaction_service.service_create(items))

    @router.get("/stocks")
    def api_transaction_stock_list() -> JSONResponse:
        return api_success_response(transaction_service.service_list_stocks_with_transactions())

    @router.get("/{transaction_id}")
    def api_transaction_get(transaction_id: str) -> JSONResponse:
        return api_success_response(transaction_service.service_get({"id": transaction_id}))

    @router.put("/{transaction_id}")
    def api_transaction_upsert(transaction_id: str, payload: Any = Body(default=None)) -> JSONResponse:
        body = {**api_require_body_object(payload), "id": transaction_id}
        return api_success_response(transaction_service.service_upsert(body))

    @router.delete("/{transaction_id}")
    def api_transaction_delete(transaction_id: str) -> JSONResponse:
        return api_success_response(transaction_service.service_delete({"id": transaction_id}))

    return router
