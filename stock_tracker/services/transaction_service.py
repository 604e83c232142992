"""Stock transaction reads and writes with exact money amounts."""

from __future__ import annotations

from typing import Any, Final, Mapping

from stock_tracker.db import (
    CurrencyCache,
    FieldMapping,
    ProcessDataMapping,
    QueryExecutorPort,
    UpsertResult,
    db_assert_columns_match_record,
    db_build_placeholders,
    db_project_columns,
    db_transform_date,
    db_transform_integer,
    db_transform_money,
)
from stock_tracker.domain import (
    InvalidRequestError,
    Money,
    RecordMissingDataError,
    RecordOperation,
    StockRecord,
    StockTransactionRecord,
    domain_record_from_mapping,
    domain_record_stamp,
    domain_record_to_storage,
)
from stock_tracker.validation import (
    TRANSACTION_BODY_RULES,
    TRANSACTION_KEY_RULES,
    TRANSACTION_PARAM_RULES,
    ValidatorResult,
    validation_raise_for_invalid,
    validation_transaction_currency_results,
)

from .common import (
    service_as_items,
    service_build_insert_sql,
    service_build_select_sql,
    service_build_upsert_sql,
    service_delete_result,
    service_require_stock_ids,
)

TRANSACTION_FILTER_MAPPINGS: Final[tuple[FieldMapping, ...]] = (
    FieldMapping(param="id", field="id", operator="="),
    FieldMapping(param="stock_id", field="stock_id", operator="="),
    FieldMapping(param="type", field="type", operator="IN"),
    FieldMapping(param="start_date", field="transaction_date", operator=">="),
    FieldMapping(param="end_date", field="transaction_date", operator="<="),
)

_TRANSACTION_FILTER_TRANSFORMS: Final[dict[str, Any]] = {
    "id": db_transform_integer,
    "stock_id": db_transform_integer,
    "type": list,
    "start_date": db_transform_date,
    "end_date": db_transform_date,
}

TRANSACTION_COLUMNS: Final[tuple[ProcessDataMapping, ...]] = (
    ProcessDataMapping(field="stock_id", transform=db_transform_integer),
    ProcessDataMapping(field="type"),
    ProcessDataMapping(field="amount", transform=db_transform_money),
    ProcessDataMapping(field="quantity", transform=db_transform_integer),
    ProcessDataMapping(field="fee", transform=db_transform_money),
    ProcessDataMapping(field="transaction_date", transform=db_transform_date),
    ProcessDataMapping(field="currency"),
)

db_assert_columns_match_record(TRANSACTION_COLUMNS, StockTransactionRecord)

_TRANSACTION_COLUMN_NAMES: Final[tuple[str, ...]] = tuple(column.field for column in TRANSACTION_COLUMNS)

TRANSACTION_INSERT_SQL: Final[str] = service_build_insert_sql("stock_transactions", _TRANSACTION_COLUMN_NAMES)
TRANSACTION_UPSERT_SQL: Final[str] = service_build_upsert_sql(
    "stock_transactions",
    ("id", *_TRANSACTION_COLUMN_NAMES),
    "(id)",
    _TRANSACTION_COLUMN_NAMES,
)


class StockTransactionService:
    """Validated operations over the `stock_transactions` table.

    Amounts are stored as integer minor units next to the currency code and are
    rebuilt as `Money` with the currency's decimal places on read.
    """

    def __init__(self, executor: QueryExecutorPort, currency_cache: CurrencyCache):
        """Initialize transaction service.

        Args:
            executor: Statement executor for the application database.
            currency_cache: Currency reference cache keyed by ISO code.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when a dependency is None.
        """

        if executor is None:
            raise ValueError("executor must not be None")
        if currency_cache is None:
            raise ValueError("currency_cache must not be None")

        self._executor = executor
        self._currency_cache = currency_cache

    def service_list(self, params: Mapping[str, Any]) -> list[StockTransactionRecord]:
        """List transactions filtered by id, stock, types and date range.

        Args:
            params: Request params; `type` is a list of transaction types.

        Returns:
            list[StockTransactionRecord]: Matches, newest first.

        Raises:
            InvalidRequestError: Raised when params fail validation.
            RecordMissingDataError: Raised when a row uses an unknown currency.
        """

        validation_raise_for_invalid(params, TRANSACTION_PARAM_RULES)

        sql = service_build_select_sql(
            "stock_transactions",
            TRANSACTION_FILTER_MAPPINGS,
            params,
            order_by="transaction_date DESC, id DESC",
        )
        placeholders = db_build_placeholders(TRANSACTION_FILTER_MAPPINGS, params, _TRANSACTION_FILTER_TRANSFORMS)
        return self._executor.db_execute_query(sql, placeholders, self._service_rows_to_transactions)

    def service_get(self, params: Mapping[str, Any]) -> list[StockTransactionRecord]:
        validation_raise_for_invalid(params, TRANSACTION_KEY_RULES)

        return self._executor.db_execute_query(
            "SELECT * FROM stock_transactions WHERE id = :id",
            {"id": int(params["id"])},
            self._service_rows_to_transactions,
        )

    def service_create(self, data: Any) -> list[UpsertResult]:
        """Insert transactions after checking that their stocks exist.

        Args:
            data: Transaction body mapping or list of mappings.

        Returns:
            list[UpsertResult]: One result per inserted transaction.

        Raises:
            InvalidRequestError: Raised when any item fails validation.
            RecordNotFoundError: Raised before any insert when a stock id does not exist.
        """

        self._service_validate_body(data)
        items = service_as_items(data)

        service_require_stock_ids(self._executor, (int(item["stock_id"]) for item in items))

        placeholders_per_row = [self._service_project(item, RecordOperation.INSERT) for item in items]
        return self._executor.db_execute_batch(TRANSACTION_INSERT_SQL, placeholders_per_row)

    def service_upsert(self, data: Mapping[str, Any]) -> list[UpsertResult]:
        """Insert or update one transaction keyed by `id`.

        Args:
            data: Transaction body mapping including `id`.

        Returns:
            list[UpsertResult]: Single result for the written row.

        Raises:
            InvalidRequestError: Raised when the body fails validation.
            RecordNotFoundError: Raised when the stock id does not exist.
        """

        validation_raise_for_invalid(data, TRANSACTION_KEY_RULES)
        self._service_validate_body(data)
        service_require_stock_ids(self._executor, [int(data["stock_id"])])

        placeholders = self._service_project(data, RecordOperation.UPDATE)
        placeholders["id"] = int(data["id"])
        return self._executor.db_execute_batch(TRANSACTION_UPSERT_SQL, [placeholders])

    def service_delete(self, params: Mapping[str, Any]) -> dict[str, Any]:
        validation_raise_for_invalid(params, TRANSACTION_KEY_RULES)

        self._executor.db_execute_query("DELETE FROM stock_transactions WHERE id = :id", {"id": int(params["id"])})
        return service_delete_result(params["id"])

    def service_list_stocks_with_transactions(self) -> list[StockRecord]:
        return self._executor.db_execute_query(
            "SELECT * FROM stocks_w_transactions ORDER BY ticker_no",
            None,
            lambda rows: [domain_record_from_mapping(StockRecord, row) for row in rows],
        )

    def _service_validate_body(self, data: Any) -> None:
        validation_raise_for_invalid(data, TRANSACTION_BODY_RULES)

        results = validation_transaction_currency_results(data) or self._service_precision_results(data)
        if results:
            raise InvalidRequestError(supporting_data=[result.validation_to_plain() for result in results])

    def _service_precision_results(self, data: Any) -> list[ValidatorResult]:
        currencies = self._currency_cache.cache_get()
        results: list[ValidatorResult] = []
        for index, item in enumerate(service_as_items(data)):
            currency = currencies.get(item["currency"])
            if currency is None:
                error_message = f'Field "currency": {item["currency"]} is not configured'
                results.append(ValidatorResult(index=index, error_messages=[error_message]))
                continue
            error_messages = [
                f'Field "{money_field}": decimal_places must be {currency.decimal_places} for {currency.iso_code}'
                for money_field in ("amount", "fee")
                if item[money_field]["decimal_places"] != currency.decimal_places
            ]
            if error_messages:
                results.append(ValidatorResult(index=index, error_messages=error_messages))
        return results

    def _service_project(self, item: Mapping[str, Any], operation: RecordOperation) -> dict[str, Any]:
        projected = db_project_columns(item, TRANSACTION_COLUMNS, domain_record_stamp(operation))
        return domain_record_to_storage(domain_record_from_mapping(StockTransactionRecord, projected))

    def _service_rows_to_transactions(self, rows: list[dict[str, Any]]) -> list[StockTransactionRecord]:
        currencies = self._currency_cache.cache_get() if rows else {}
        records: list[StockTransactionRecord] = []
        for row in rows:
            currency = currencies.get(row["currency"])
            if currency is None:
                raise RecordMissingDataError(
                    f"Currency {row['currency']} is not configured",
                    supporting_data={"id": row["id"], "currency": row["currency"]},
                )
            values = dict(row)
            for money_field in ("amount", "fee"):
                if row[money_field] is not None:
                    values[money_field] = Money.money_from_minor_units(
                        int(row[money_field]), currency.decimal_places, currency.iso_code
                    )
            records.append(domain_record_from_mapping(StockTransactionRecord, values))
        return records
