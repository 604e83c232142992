"""JSON envelope helpers shared by all resource routers.

Every response body is `{"status": int, "message": str, "data": Any}`. Success
uses status `1`; failures carry the numeric code of the error kind.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Final

from fastapi import status
from fastapi.responses import JSONResponse

from stock_tracker.db import UpsertResult
from stock_tracker.domain import (
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
    InvalidRequestError,
    TrackerError,
    domain_record_to_plain,
)

API_SUCCESS_CODE: Final[int] = 1
API_SUCCESS_MESSAGE: Final[str] = "Success"


def api_to_plain(value: Any) -> Any:
    """Convert service results into JSON-compatible values.

    Args:
        value: Record, upsert result, list or plain value.

    Returns:
        Any: JSON-compatible value.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(value, (list, tuple)):
        return [api_to_plain(item) for item in value]
    if isinstance(value, UpsertResult):
        return asdict(value)
    if is_dataclass(value) and not isinstance(value, type):
        return domain_record_to_plain(value)
    if isinstance(value, dict):
        return {key: api_to_plain(item) for key, item in value.items()}
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def api_success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    payload = {"status": API_SUCCESS_CODE, "message": API_SUCCESS_MESSAGE, "data": api_to_plain(data)}
    return JSONResponse(content=payload, status_code=status_code)


def api_error_response(error: TrackerError) -> JSONResponse:
    """Serialize an application error with the HTTP status of its kind.

    Args:
        error: Typed application error.

    Returns:
        JSONResponse: Envelope carrying the error code, message and supporting data.

    Raises:
        KeyError: Raised when the error kind has no registered status.
    """

    payload = {
        "status": error.code,
        "message": error.message,
        "data": api_to_plain(error.supporting_data),
        "error_kind": error.kind.value,
    }
    return JSONResponse(content=payload, status_code=error.http_status)


def api_unknown_error_response() -> JSONResponse:
    payload = {"status": UNKNOWN_ERROR_CODE, "message": UNKNOWN_ERROR_MESSAGE, "data": None}
    return JSONResponse(content=payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def api_require_body_items(payload: Any, max_items: int) -> list[Any]:
    """Check that a create body is a bounded JSON array or a single object.

    Args:
        payload: Decoded request body.
        max_items: Maximum accepted number of items.

    Returns:
        list[Any]: Body items; a single object becomes a one-item list.

    Raises:
        InvalidRequestError: Raised when the body is not a non-empty array of
            objects or holds more than `max_items` items.
    """

    items = payload if isinstance(payload, list) else [payload]
    if not items or not all(isinstance(item, dict) for item in items):
        raise InvalidRequestError(
            supporting_data=[{"index": 0, "error_messages": ["Body must be a non-empty JSON array of objects."]}]
        )
    if len(items) > max_items:
        raise InvalidRequestError(
            supporting_data=[
                {"index": max_items, "error_messages": [f"Body must not contain more than {max_items} items."]}
            ]
        )
    return items


def api_require_body_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidRequestError(supporting_data=[{"index": 0, "error_messages": ["Body must be a JSON object."]}])
    return payload
