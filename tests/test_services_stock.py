"""Tests for stock service statement building and validation flow."""

from __future__ import annotations

from datetime import datetime

import pytest

from stock_tracker.domain import DuplicateFoundError, InvalidRequestError, RecordNotFoundError, StockRecord
from stock_tracker.services import StockService


def test_list_uses_like_filters_with_requested_connective(recording_executor_factory) -> None:
    """List filters bind `%value%` and honor `query_type`.

    Returns:
        None: Assertions validate statement text and bound values.

    Raises:
        AssertionError: Raised when statement or records differ.
    """

    executor = recording_executor_factory([[{"id": 1, "ticker_no": "00700", "name": "TENCENT", "is_active": True}]])
    service = StockService(executor=executor)

    stocks = service.service_list({"name": "TEN", "isin": "KYG", "query_type": "OR"})

    sql, placeholders = executor.queries[0]
    assert sql == "SELECT * FROM stocks WHERE (name LIKE :name) OR (isin LIKE :isin) ORDER BY ticker_no, id"
    assert placeholders == {"name": "%TEN%", "isin": "%KYG%"}
    assert stocks == [StockRecord(id=1, ticker_no="00700", name="TENCENT", is_active=True)]


def test_list_without_filters_selects_every_stock(recording_executor_factory) -> None:
    executor = recording_executor_factory()

    assert StockService(executor=executor).service_list({}) == []
    assert executor.queries == [("SELECT * FROM stocks ORDER BY ticker_no, id", {})]


def test_list_rejects_invalid_query_type_without_querying(recording_executor_factory) -> None:
    executor = recording_executor_factory()

    with pytest.raises(InvalidRequestError):
        StockService(executor=executor).service_list({"query_type": "NOR"})

    assert executor.queries == []


def test_create_rejects_tickers_already_active(recording_executor_factory) -> None:
    executor = recording_executor_factory([[{"ticker_no": "00700"}]])

    with pytest.raises(DuplicateFoundError) as error_info:
        StockService(executor=executor).service_create(
            [{"ticker_no": "00700", "name": "TENCENT"}, {"ticker_no": "00005", "name": "HSBC"}]
        )

    assert error_info.value.supporting_data == {"ticker_nos": ["00700"]}
    assert executor.queries[0][1] == {"ticker_nos": ["00005", "00700"]}
    assert executor.batches == []


def test_create_projects_every_declared_column(recording_executor_factory) -> None:
    executor = recording_executor_factory([[]])

    results = StockService(executor=executor).service_create(
        [{"ticker_no": "00005", "name": "HSBC", "board_lot": "400", "unknown": "dropped"}]
    )

    sql, rows = executor.batches[0]
    assert sql.startswith("INSERT INTO stocks (ticker_no, name, full_name")
    assert "COALESCE(:is_active, TRUE)" in sql
    assert rows[0]["board_lot"] == 400
    assert rows[0]["is_active"] is None
    assert "unknown" not in rows[0]
    assert isinstance(rows[0]["created_datetime"], datetime)
    assert results[0].inserted_id == 1


def test_upsert_targets_active_ticker_without_touching_flags(recording_executor_factory) -> None:
    executor = recording_executor_factory()

    StockService(executor=executor).service_upsert({"ticker_no": "00700", "name": "TENCENT HOLDINGS"})

    sql, rows = executor.batches[0]
    assert "ON CONFLICT (ticker_no) WHERE is_active DO UPDATE SET" in sql
    assert "is_tracked = EXCLUDED.is_tracked" not in sql
    assert rows[0]["created_datetime"] is None


def test_get_rejects_malformed_ticker(recording_executor_factory) -> None:
    executor = recording_executor_factory()

    with pytest.raises(InvalidRequestError):
        StockService(executor=executor).service_get({"ticker_no": "700"})

    assert executor.queries == []


def test_delete_returns_success_for_any_valid_ticker(recording_executor_factory) -> None:
    executor = recording_executor_factory()

    result = StockService(executor=executor).service_delete({"ticker_no": "99999"})

    assert result == {"id": "99999", "status": "success"}
    assert executor.queries == [("DELETE FROM stocks WHERE ticker_no = :ticker_no", {"ticker_no": "99999"})]


def test_set_tracked_raises_when_stock_is_missing(recording_executor_factory) -> None:
    executor = recording_executor_factory([[]])

    with pytest.raises(RecordNotFoundError):
        StockService(executor=executor).service_set_tracked({"id": "42"}, True)

    assert executor.queries[0][1]["id"] == 42
    assert executor.queries[0][1]["is_tracked"] is True


def test_set_tracked_returns_updated_stock(recording_executor_factory) -> None:
    executor = recording_executor_factory([[{"id": 42, "ticker_no": "00700", "is_tracked": False}]])

    stock = StockService(executor=executor).service_set_tracked({"id": 42}, False)

    assert stock.is_tracked is False


def test_create_and_upsert_require_a_name(recording_executor_factory) -> None:
    """Stocks without a name are rejected before reaching the NOT NULL column.

    Returns:
        None: Assertions validate the rejection.

    Raises:
        AssertionError: Raised when a nameless stock is written.
    """

    executor = recording_executor_factory()
    service = StockService(executor=executor)

    with pytest.raises(InvalidRequestError) as create_error:
        service.service_create([{"ticker_no": "00005"}])
    with pytest.raises(InvalidRequestError):
        service.service_upsert({"ticker_no": "00005", "board_lot": 400})

    assert create_error.value.supporting_data == [{"index": 0, "error_messages": ['Field "name" is required.']}]
    assert executor.queries == []
    assert executor.batches == []
