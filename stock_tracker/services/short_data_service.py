"""Aggregated short-position report reads and writes."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Final, Iterable, Mapping

from stock_tracker.db import (
    FieldMapping,
    ProcessDataMapping,
    QueryExecutorPort,
    UpsertResult,
    db_assert_columns_match_record,
    db_build_placeholders,
    db_project_columns,
    db_transform_date,
    db_transform_integer,
    db_transform_number,
)
from stock_tracker.domain import (
    RecordOperation,
    ShortDataRecord,
    domain_coerce_date,
    domain_record_from_mapping,
    domain_record_stamp,
    domain_record_to_storage,
)
from stock_tracker.validation import (
    SHORT_BODY_RULES,
    SHORT_KEY_RULES,
    SHORT_MISMATCH_KEY_RULES,
    SHORT_MISMATCH_QUERY_RULES,
    SHORT_PARAM_RULES,
    validation_raise_for_invalid,
)

from .common import (
    service_as_items,
    service_build_insert_sql,
    service_build_select_sql,
    service_build_upsert_sql,
    service_delete_result,
    service_require_stock_ids,
)

logger = logging.getLogger(__name__)

DEFAULT_MISMATCH_LIMIT: Final[int] = 100

SHORT_FILTER_MAPPINGS: Final[tuple[FieldMapping, ...]] = (
    FieldMapping(param="stock_id", field="stock_id", operator="="),
    FieldMapping(param="start_date", field="reporting_date", operator=">="),
    FieldMapping(param="end_date", field="reporting_date", operator="<="),
)

_SHORT_FILTER_TRANSFORMS: Final[dict[str, Any]] = {
    "stock_id": db_transform_integer,
    "start_date": db_transform_date,
    "end_date": db_transform_date,
}

SHORT_COLUMNS: Final[tuple[ProcessDataMapping, ...]] = (
    ProcessDataMapping(field="stock_id", transform=db_transform_integer),
    ProcessDataMapping(field="ticker_no"),
    ProcessDataMapping(field="reporting_date", transform=db_transform_date),
    ProcessDataMapping(field="shorted_shares", transform=db_transform_number),
    ProcessDataMapping(field="shorted_amount", transform=db_transform_number),
)

db_assert_columns_match_record(SHORT_COLUMNS, ShortDataRecord)

_SHORT_COLUMN_NAMES: Final[tuple[str, ...]] = tuple(column.field for column in SHORT_COLUMNS)

SHORT_INSERT_SQL: Final[str] = service_build_insert_sql("short_reporting", _SHORT_COLUMN_NAMES)
SHORT_UPSERT_SQL: Final[str] = service_build_upsert_sql(
    "short_reporting",
    ("id", *_SHORT_COLUMN_NAMES),
    "(id)",
    _SHORT_COLUMN_NAMES,
)


class ShortDataService:
    """Validated operations over `short_reporting` and its stock-joined view.

    Rows whose ticker does not resolve to an active stock keep a NULL
    `stock_id` and are listed by the mismatch operations.
    """

    def __init__(self, executor: QueryExecutorPort):
        if executor is None:
            raise ValueError("executor must not be None")

        self._executor = executor

    def service_list(self, params: Mapping[str, Any]) -> list[ShortDataRecord]:
        """List short data for one stock, optionally bounded by reporting date.

        Args:
            params: Request params `stock_id`, `start_date` and `end_date`.

        Returns:
            list[ShortDataRecord]: Matches, latest reporting date first.

        Raises:
            InvalidRequestError: Raised when params fail validation.
        """

        validation_raise_for_invalid(params, SHORT_PARAM_RULES)

        sql = service_build_select_sql(
            "short_reporting_w_stocks",
            SHORT_FILTER_MAPPINGS,
            params,
            order_by="reporting_date DESC",
        )
        placeholders = db_build_placeholders(SHORT_FILTER_MAPPINGS, params, _SHORT_FILTER_TRANSFORMS)
        return self._executor.db_execute_query(sql, placeholders, _service_rows_to_short_data)

    def service_get(self, params: Mapping[str, Any]) -> list[ShortDataRecord]:
        validation_raise_for_invalid(params, SHORT_KEY_RULES)

        return self._executor.db_execute_query(
            "SELECT * FROM short_reporting_w_stocks WHERE id = :id",
            {"id": int(params["id"])},
            _service_rows_to_short_data,
        )

    def service_create(self, data: Any) -> list[UpsertResult]:
        """Insert short data rows.

        Referenced stock ids must exist. Rows without a stock id are resolved by
        ticker against active stocks and keep a NULL stock id when unresolved.

        Args:
            data: Short data body mapping or list of mappings.

        Returns:
            list[UpsertResult]: One result per inserted row.

        Raises:
            InvalidRequestError: Raised when any item fails validation.
            RecordNotFoundError: Raised before any insert when a stock id does not exist.
        """

        validation_raise_for_invalid(data, SHORT_BODY_RULES)
        items = service_as_items(data)

        service_require_stock_ids(
            self._executor,
            (int(item["stock_id"]) for item in items if item.get("stock_id") is not None),
        )

        resolved_items = self._service_resolve_stock_ids(items)
        placeholders_per_row = [self._service_project(item, RecordOperation.INSERT) for item in resolved_items]
        return self._executor.db_execute_batch(SHORT_INSERT_SQL, placeholders_per_row)

    def service_upsert(self, data: Mapping[str, Any]) -> list[UpsertResult]:
        validation_raise_for_invalid(data, SHORT_KEY_RULES)
        validation_raise_for_invalid(data, SHORT_BODY_RULES)
        if data.get("stock_id") is not None:
            service_require_stock_ids(self._executor, [int(data["stock_id"])])

        placeholders = self._service_project(data, RecordOperation.UPDATE)
        placeholders["id"] = int(data["id"])
        return self._executor.db_execute_batch(SHORT_UPSERT_SQL, [placeholders])

    def service_delete(self, params: Mapping[str, Any]) -> dict[str, Any]:
        validation_raise_for_invalid(params, SHORT_KEY_RULES)

        self._executor.db_execute_query("DELETE FROM short_reporting WHERE id = :id", {"id": int(params["id"])})
        return service_delete_result(params["id"])

    def service_ingest_source_rows(self, rows: Iterable[Mapping[str, Any]]) -> list[UpsertResult]:
        """Insert parsed source rows, resolving tickers to active stocks.

        Args:
            rows: Parsed rows with `ticker_no`, `reporting_date`, `shorted_shares`
                and `shorted_amount`.

        Returns:
            list[UpsertResult]: One result per inserted row.

        Raises:
            ProjectionContractError: Raised when a parsed value has an unexpected shape.
        """

        items = [dict(row) for row in rows]
        resolved_items = self._service_resolve_stock_ids(items)
        unresolved_count = sum(1 for item in resolved_items if item.get("stock_id") is None)
        if unresolved_count:
            logger.info("ingesting %d short rows without a matching stock", unresolved_count)

        placeholders_per_row = [self._service_project(item, RecordOperation.INSERT) for item in resolved_items]
        return self._executor.db_execute_batch(SHORT_INSERT_SQL, placeholders_per_row)

    def service_get_latest_reporting_date(self) -> date | None:
        rows = self._executor.db_execute_query("SELECT MAX(reporting_date) AS latest_reporting_date FROM short_reporting")
        if not rows:
            return None
        return domain_coerce_date(rows[0]["latest_reporting_date"])

    def service_list_mismatched_tickers(self, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        """List distinct tickers whose short rows have no matching stock.

        Args:
            params: Request params `limit` and `offset`.

        Returns:
            list[dict[str, Any]]: `ticker_no`, `row_count` and
            `latest_reporting_date` per unresolved ticker.

        Raises:
            InvalidRequestError: Raised when params fail validation.
        """

        validation_raise_for_invalid(params, SHORT_MISMATCH_QUERY_RULES)

        return self._executor.db_execute_query(
            "SELECT ticker_no, COUNT(*) AS row_count, MAX(reporting_date) AS latest_reporting_date "
            "FROM short_reporting WHERE stock_id IS NULL "
            "GROUP BY ticker_no ORDER BY ticker_no LIMIT :limit OFFSET :offset",
            {
                "limit": int(float(params.get("limit", DEFAULT_MISMATCH_LIMIT))),
                "offset": int(float(params.get("offset", 0))),
            },
        )

    def service_list_mismatched_rows(self, params: Mapping[str, Any]) -> list[ShortDataRecord]:
        validation_raise_for_invalid(params, SHORT_MISMATCH_KEY_RULES)

        return self._executor.db_execute_query(
            "SELECT * FROM short_reporting WHERE stock_id IS NULL AND ticker_no = :ticker_no ORDER BY reporting_date DESC",
            {"ticker_no": params["ticker_no"]},
            _service_rows_to_short_data,
        )

    def _service_resolve_stock_ids(self, items: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
        unresolved_tickers = sorted(
            {item["ticker_no"] for item in items if item.get("stock_id") is None and item.get("ticker_no")}
        )
        stock_ids_by_ticker: dict[str, int] = {}
        if unresolved_tickers:
            rows = self._executor.db_execute_query(
                "SELECT id, ticker_no FROM stocks WHERE is_active AND ticker_no IN :ticker_nos",
                {"ticker_nos": unresolved_tickers},
            )
            stock_ids_by_ticker = {row["ticker_no"]: int(row["id"]) for row in rows}

        resolved_items: list[dict[str, Any]] = []
        for item in items:
            resolved_item = dict(item)
            if resolved_item.get("stock_id") is None:
                resolved_item["stock_id"] = stock_ids_by_ticker.get(resolved_item.get("ticker_no"))
            resolved_items.append(resolved_item)
        return resolved_items

    def _service_project(self, item: Mapping[str, Any], operation: RecordOperation) -> dict[str, Any]:
        projected = db_project_columns(item, SHORT_COLUMNS, domain_record_stamp(operation))
        return domain_record_to_storage(domain_record_from_mapping(ShortDataRecord, projected))


def _service_rows_to_short_data(rows: list[dict[str, Any]]) -> list[ShortDataRecord]:
    return [domain_record_from_mapping(ShortDataRecord, row) for row in rows]
