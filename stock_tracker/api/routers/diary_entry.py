"""Diary entry resource router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from stock_tracker.config import AppSettings
from stock_tracker.services import DiaryEntryService

from ..responses import api_require_body_items, api_require_body_object, api_success_response


def api_create_diary_entry_router(settings: AppSettings, diary_entry_service: DiaryEntryService) -> APIRouter:
    if settings is None:
        raise ValueError("settings must not be None")
    if diary_entry_service is None:
        raise ValueError("diary_entry_service must not be None")

    router = APIRouter(prefix="/diary-entry", tags=["diary-entry"])

    @router.get("")
    def api_diary_entry_list(request: Request) -> JSONResponse:
        return api_success_response(diary_entry_service.service_list(dict(request.query_params)))

    @router.post("")
    def api_diary_entry_create(payload: Any = Body(default=None)) -> JSONResponse:
        items = api_require_body_items(payload, settings.api_max_body_items)
        return api_success_response(diary_entry_service.service_create(items))

    @router.get("/{entry_id}")
    def api_diary_entry_get(entry_id: str) -> JSONResponse:
        return api_success_response(diary_entry_service.service_get({"id": entry_id}))

    @router.put("/{entry_id}")
    def api_diary_entry_upsert(entry_id: str, payload: Any = Body(default=None)) -> JSONResponse:
        body = {**api_require_body_object(payload), "id": entry_id}
        return api_success_response(diary_entry_service.service_upsert(body))

    @router.delete("/{entry_id}")
    def api_diary_entry_delete(entry_id: str) -> JSONResponse:
        return api_success_response(diary_entry_service.service_delete({"id": entry_id}))

    return router
