"""Diary entry reads and writes."""

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
    db_transform_date,
    db_transform_integer,
    db_transform_like,
)
from stock_tracker.domain import (
    DiaryEntryRecord,
    RecordOperation,
    domain_record_from_mapping,
    domain_record_stamp,
    domain_record_to_storage,
)
from stock_tracker.validation import (
    DIARY_ENTRY_BODY_RULES,
    DIARY_ENTRY_KEY_RULES,
    DIARY_ENTRY_PARAM_RULES,
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

DIARY_ENTRY_FILTER_MAPPINGS: Final[tuple[FieldMapping, ...]] = (
    FieldMapping(param="id", field="id", operator="="),
    FieldMapping(param="stock_id", field="stock_id", operator="="),
    FieldMapping(param="title", field="title", operator="LIKE"),
    FieldMapping(param="start_date", field="posted_date", operator=">="),
    FieldMapping(param="end_date", field="posted_date", operator="<="),
)

_DIARY_ENTRY_FILTER_TRANSFORMS: Final[dict[str, Any]] = {
    "id": db_transform_integer,
    "stock_id": db_transform_integer,
    "title": db_transform_like,
    "start_date": db_transform_date,
    "end_date": db_transform_date,
}

DIARY_ENTRY_COLUMNS: Final[tuple[ProcessDataMapping, ...]] = (
    ProcessDataMapping(field="stock_id", transform=db_transform_integer),
    ProcessDataMapping(field="title"),
    ProcessDataMapping(field="content"),
    ProcessDataMapping(field="posted_date", transform=db_transform_date),
)

db_assert_columns_match_record(DIARY_ENTRY_COLUMNS, DiaryEntryRecord)

_DIARY_ENTRY_COLUMN_NAMES: Final[tuple[str, ...]] = tuple(column.field for column in DIARY_ENTRY_COLUMNS)

DIARY_ENTRY_INSERT_SQL: Final[str] = service_build_insert_sql("diary_entries", _DIARY_ENTRY_COLUMN_NAMES)
DIARY_ENTRY_UPSERT_SQL: Final[str] = service_build_upsert_sql(
    "diary_entries",
    ("id", *_DIARY_ENTRY_COLUMN_NAMES),
    "(id)",
    _DIARY_ENTRY_COLUMN_NAMES,
)


class DiaryEntryService:
    """Validated operations over the `diary_entries` table."""

    def __init__(self, executor: QueryExecutorPort):
        if executor is None:
            raise ValueError("executor must not be None")

        self._executor = executor

    def service_list(self, params: Mapping[str, Any]) -> list[DiaryEntryRecord]:
        """List diary entries of one stock.

        Args:
            params: Request params `stock_id`, `id`, `title`, `start_date` and `end_date`.

        Returns:
            list[DiaryEntryRecord]: Matches, latest posted date first.

        Raises:
            InvalidRequestError: Raised when params fail validation.
        """

        validation_raise_for_invalid(params, DIARY_ENTRY_PARAM_RULES)

        sql = service_build_select_sql(
            "diary_entries",
            DIARY_ENTRY_FILTER_MAPPINGS,
            params,
            order_by="posted_date DESC, id DESC",
        )
        placeholders = db_build_placeholders(DIARY_ENTRY_FILTER_MAPPINGS, params, _DIARY_ENTRY_FILTER_TRANSFORMS)
        return self._executor.db_execute_query(sql, placeholders, _service_rows_to_diary_entries)

    def service_get(self, params: Mapping[str, Any]) -> list[DiaryEntryRecord]:
        validation_raise_for_invalid(params, DIARY_ENTRY_KEY_RULES)

        return self._executor.db_execute_query(
            "SELECT * FROM diary_entries WHERE id = :id",
            {"id": int(params["id"])},
            _service_rows_to_diary_entries,
        )

    def service_create(self, data: Any) -> list[UpsertResult]:
        """Insert diary entries after checking that their stocks exist.

        Args:
            data: Diary entry body mapping or list of mappings.

        Returns:
            list[UpsertResult]: One result per inserted entry.

        Raises:
            InvalidRequestError: Raised when any item fails validation.
            RecordNotFoundError: Raised before any insert when a stock id does not exist.
        """

        validation_raise_for_invalid(data, DIARY_ENTRY_BODY_RULES)
        items = service_as_items(data)

        service_require_stock_ids(self._executor, (int(item["stock_id"]) for item in items))

        placeholders_per_row = [self._service_project(item, RecordOperation.INSERT) for item in items]
        return self._executor.db_execute_batch(DIARY_ENTRY_INSERT_SQL, placeholders_per_row)

    def service_upsert(self, data: Mapping[str, Any]) -> list[UpsertResult]:
        validation_raise_for_invalid(data, DIARY_ENTRY_KEY_RULES)
        validation_raise_for_invalid(data, DIARY_ENTRY_BODY_RULES)
        service_require_stock_ids(self._executor, [int(data["stock_id"])])

        placeholders = self._service_project(data, RecordOperation.UPDATE)
        placeholders["id"] = int(data["id"])
        return self._executor.db_execute_batch(DIARY_ENTRY_UPSERT_SQL, [placeholders])

    def service_delete(self, params: Mapping[str, Any]) -> dict[str, Any]:
        validation_raise_for_invalid(params, DIARY_ENTRY_KEY_RULES)

        self._executor.db_execute_query("DELETE FROM diary_entries WHERE id = :id", {"id": int(params["id"])})
        return service_delete_result(params["id"])

    def _service_project(self, item: Mapping[str, Any], operation: RecordOperation) -> dict[str, Any]:
        projected = db_project_columns(item, DIARY_ENTRY_COLUMNS, domain_record_stamp(operation))
        return domain_record_to_storage(domain_record_from_mapping(DiaryEntryRecord, projected))


def _service_rows_to_diary_entries(rows: list[dict[str, Any]]) -> list[DiaryEntryRecord]:
    return [domain_record_from_mapping(DiaryEntryRecord, row) for row in rows]
