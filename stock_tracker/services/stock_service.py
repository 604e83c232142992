"""Stock listing reads and writes."""

from __future__ import annotations

from typing import Any, Final, Mapping

from stock_tracker.db import (
    FieldMapping,
    ProcessDataMapping,
    QueryExecutorPort,
    UpsertResult,
    db_assert_columns_match_record,
    db_build_placeholders,
    db_project_columns,
    db_transform_integer,
    db_transform_like,
)
from stock_tracker.domain import (
    DuplicateFoundError,
    QueryType,
    RecordNotFoundError,
    RecordOperation,
    StockRecord,
    domain_record_from_mapping,
    domain_record_stamp,
    domain_record_to_storage,
)
from stock_tracker.validation import (
    STOCK_BODY_RULES,
    STOCK_ID_KEY_RULES,
    STOCK_KEY_RULES,
    STOCK_PARAM_RULES,
    validation_raise_for_invalid,
)

from .common import (
    service_as_items,
    service_build_insert_sql,
    service_build_select_sql,
    service_build_upsert_sql,
    service_delete_result,
)

STOCK_FILTER_MAPPINGS: Final[tuple[FieldMapping, ...]] = (
    FieldMapping(param="ticker_no", field="ticker_no", operator="LIKE"),
    FieldMapping(param="name", field="name", operator="LIKE"),
    FieldMapping(param="isin", field="isin", operator="LIKE"),
)

STOCK_COLUMNS: Final[tuple[ProcessDataMapping, ...]] = (
    ProcessDataMapping(field="ticker_no"),
    ProcessDataMapping(field="name"),
    ProcessDataMapping(field="full_name"),
    ProcessDataMapping(field="description"),
    ProcessDataMapping(field="category"),
    ProcessDataMapping(field="subcategory"),
    ProcessDataMapping(field="board_lot", transform=db_transform_integer),
    ProcessDataMapping(field="isin"),
    ProcessDataMapping(field="currency"),
    ProcessDataMapping(field="is_active"),
    ProcessDataMapping(field="is_tracked"),
)

db_assert_columns_match_record(STOCK_COLUMNS, StockRecord)

_STOCK_COLUMN_NAMES: Final[tuple[str, ...]] = tuple(column.field for column in STOCK_COLUMNS)
_STOCK_COLUMN_DEFAULTS: Final[dict[str, str]] = {"is_active": "TRUE", "is_tracked": "FALSE"}
_STOCK_UPDATE_COLUMNS: Final[tuple[str, ...]] = (
    "name",
    "full_name",
    "description",
    "category",
    "subcategory",
    "board_lot",
    "isin",
    "currency",
)

STOCK_INSERT_SQL: Final[str] = service_build_insert_sql("stocks", _STOCK_COLUMN_NAMES, _STOCK_COLUMN_DEFAULTS)
STOCK_UPSERT_SQL: Final[str] = service_build_upsert_sql(
    "stocks",
    _STOCK_COLUMN_NAMES,
    "(ticker_no) WHERE is_active",
    _STOCK_UPDATE_COLUMNS,
    _STOCK_COLUMN_DEFAULTS,
)


class StockService:
    """Validated operations over the `stocks` table."""

    def __init__(self, executor: QueryExecutorPort):
        """Initialize stock service.

        Args:
            executor: Statement executor for the application database.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when executor is None.
        """

        if executor is None:
            raise ValueError("executor must not be None")

        self._executor = executor

    def service_list(self, params: Mapping[str, Any]) -> list[StockRecord]:
        """List stocks whose ticker, name or ISIN contain the given fragments.

        Args:
            params: Request params `ticker_no`, `name`, `isin` and `query_type`.

        Returns:
            list[StockRecord]: Matching stocks ordered by ticker; empty when none match.

        Raises:
            InvalidRequestError: Raised when params fail validation.
        """

        validation_raise_for_invalid(params, STOCK_PARAM_RULES)

        connective = params.get("query_type", QueryType.AND.value)
        sql = service_build_select_sql("stocks", STOCK_FILTER_MAPPINGS, params, connective, order_by="ticker_no, id")
        transforms = {mapping.param: db_transform_like for mapping in STOCK_FILTER_MAPPINGS}
        placeholders = db_build_placeholders(STOCK_FILTER_MAPPINGS, params, transforms)
        return self._executor.db_execute_query(sql, placeholders, _service_rows_to_stocks)

    def service_get(self, params: Mapping[str, Any]) -> list[StockRecord]:
        """Return stocks with the exact ticker, active listing first.

        Args:
            params: Path params holding `ticker_no`.

        Returns:
            list[StockRecord]: Zero or more stocks sharing the ticker.

        Raises:
            InvalidRequestError: Raised when the ticker is malformed.
        """

        validation_raise_for_invalid(params, STOCK_KEY_RULES)

        return self._executor.db_execute_query(
            "SELECT * FROM stocks WHERE ticker_no = :ticker_no ORDER BY is_active DESC, id DESC",
            {"ticker_no": params["ticker_no"]},
            _service_rows_to_stocks,
        )

    def service_create(self, data: Any) -> list[UpsertResult]:
        """Insert new stocks after rejecting tickers already active.

        Args:
            data: Stock body mapping or list of mappings.

        Returns:
            list[UpsertResult]: One result per inserted stock.

        Raises:
            InvalidRequestError: Raised when any item fails validation.
            DuplicateFoundError: Raised when an active stock already uses a ticker.
        """

        validation_raise_for_invalid(data, STOCK_BODY_RULES)
        items = service_as_items(data)

        ticker_nos = sorted({item["ticker_no"] for item in items})
        existing_rows = self._executor.db_execute_query(
            "SELECT ticker_no FROM stocks WHERE is_active AND ticker_no IN :ticker_nos",
            {"ticker_nos": ticker_nos},
        )
        if existing_rows:
            existing_tickers = sorted(row["ticker_no"] for row in existing_rows)
            raise DuplicateFoundError(
                f"Stocks with ids ( {', '.join(existing_tickers)} ) already exist!",
                supporting_data={"ticker_nos": existing_tickers},
            )

        placeholders_per_row = [self._service_project(item, RecordOperation.INSERT) for item in items]
        return self._executor.db_execute_batch(STOCK_INSERT_SQL, placeholders_per_row)

    def service_upsert(self, data: Mapping[str, Any]) -> list[UpsertResult]:
        """Insert a stock or update the active stock sharing its ticker.

        Args:
            data: Stock body mapping including `ticker_no`.

        Returns:
            list[UpsertResult]: Single result for the written row.

        Raises:
            InvalidRequestError: Raised when the body fails validation.
        """

        validation_raise_for_invalid(data, STOCK_BODY_RULES)

        return self._executor.db_execute_batch(STOCK_UPSERT_SQL, [self._service_project(data, RecordOperation.UPDATE)])

    def service_delete(self, params: Mapping[str, Any]) -> dict[str, Any]:
        validation_raise_for_invalid(params, STOCK_KEY_RULES)

        self._executor.db_execute_query("DELETE FROM stocks WHERE ticker_no = :ticker_no", {"ticker_no": params["ticker_no"]})
        return service_delete_result(params["ticker_no"])

    def service_list_tracked(self) -> list[StockRecord]:
        return self._executor.db_execute_query(
            "SELECT * FROM stocks WHERE is_tracked AND is_active ORDER BY ticker_no",
            None,
            _service_rows_to_stocks,
        )

    def service_set_tracked(self, params: Mapping[str, Any], is_tracked: bool) -> StockRecord:
        """Flag or unflag one stock as tracked.

        Args:
            params: Path params holding the stock `id`.
            is_tracked: New tracked flag.

        Returns:
            StockRecord: Updated stock.

        Raises:
            InvalidRequestError: Raised when the id is malformed.
            RecordNotFoundError: Raised when no stock has the id.
        """

        validation_raise_for_invalid(params, STOCK_ID_KEY_RULES)

        stamped = domain_record_stamp(RecordOperation.UPDATE)
        updated = self._executor.db_execute_query(
            "UPDATE stocks SET is_tracked = :is_tracked, last_modified_datetime = :last_modified_datetime "
            "WHERE id = :id RETURNING *",
            {
                "id": int(params["id"]),
                "is_tracked": is_tracked,
                "last_modified_datetime": stamped["last_modified_datetime"],
            },
            _service_rows_to_stocks,
        )
        if not updated:
            raise RecordNotFoundError(f"Stock with id {params['id']} does not exist!")
        return updated[0]

    def _service_project(self, item: Mapping[str, Any], operation: RecordOperation) -> dict[str, Any]:
        projected = db_project_columns(item, STOCK_COLUMNS, domain_record_stamp(operation))
        return domain_record_to_storage(domain_record_from_mapping(StockRecord, projected))


def _service_rows_to_stocks(rows: list[dict[str, Any]]) -> list[StockRecord]:
    return [domain_record_from_mapping(StockRecord, row) for row in rows]
