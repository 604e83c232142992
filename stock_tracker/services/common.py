"""Statement builders and lookups shared by the entity services.

Table and column names passed to the builders are module constants declared
by each service; request values only ever travel as bound placeholders.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from stock_tracker.db import FieldMapping, QueryExecutorPort, db_build_where_clause
from stock_tracker.domain import QueryType, RecordNotFoundError

RECORD_TIMESTAMP_COLUMNS: tuple[str, ...] = ("created_datetime", "last_modified_datetime")


def service_build_select_sql(
    source: str,
    mappings: Sequence[FieldMapping],
    args: Mapping[str, Any],
    connective: QueryType | str = QueryType.AND,
    order_by: str | None = None,
) -> str:
    """Build a SELECT over a table or view with an optional filter predicate.

    Args:
        source: Table or view name.
        mappings: Whitelisted filter mappings.
        args: Validated request params.
        connective: Connective between predicate fragments.
        order_by: Optional ORDER BY expression.

    Returns:
        str: Statement text; `WHERE` is omitted when no filter param is present.

    Raises:
        ValueError: Raised when connective is invalid.
    """

    where_clause = db_build_where_clause(connective, mappings, args)
    sql = f"SELECT * FROM {source}"
    if where_clause:
        sql = f"{sql} WHERE {where_clause}"
    if order_by:
        sql = f"{sql} ORDER BY {order_by}"
    return sql


def service_build_insert_sql(table: str, columns: Sequence[str], column_defaults: Mapping[str, str] | None = None) -> str:
    """Build a single-row INSERT returning the generated id.

    `created_datetime` falls back to the database clock when bound as NULL.

    Args:
        table: Target table name.
        columns: Domain columns, without lifecycle timestamps.
        column_defaults: SQL fallback expressions for columns bound as NULL.

    Returns:
        str: Statement text with one named placeholder per column.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    insert_columns = [*columns, *RECORD_TIMESTAMP_COLUMNS]
    values = [_service_insert_value(column, column_defaults or {}) for column in insert_columns]
    return f"INSERT INTO {table} ({', '.join(insert_columns)}) VALUES ({', '.join(values)}) RETURNING id"


def service_build_upsert_sql(
    table: str,
    columns: Sequence[str],
    conflict_target: str,
    update_columns: Sequence[str],
    column_defaults: Mapping[str, str] | None = None,
) -> str:
    """Build an INSERT that updates the conflicting row instead of failing.

    The update never touches `created_datetime`; an inserted row receives the
    bound value or the database clock.

    Args:
        table: Target table name.
        columns: Inserted domain columns, without lifecycle timestamps.
        conflict_target: `ON CONFLICT` target, for example `(id)`.
        update_columns: Columns overwritten from the excluded row.
        column_defaults: SQL fallback expressions for columns bound as NULL.

    Returns:
        str: Statement text ending in `RETURNING id`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    insert_columns = [*columns, *RECORD_TIMESTAMP_COLUMNS]
    values = [_service_insert_value(column, column_defaults or {}) for column in insert_columns]
    assignments = [f"{column} = EXCLUDED.{column}" for column in (*update_columns, "last_modified_datetime")]
    return (
        f"INSERT INTO {table} ({', '.join(insert_columns)}) VALUES ({', '.join(values)}) "
        f"ON CONFLICT {conflict_target} DO UPDATE SET {', '.join(assignments)} "
        "RETURNING id"
    )


def service_require_stock_ids(executor: QueryExecutorPort, stock_ids: Iterable[int]) -> set[int]:
    """Verify that every referenced stock id exists.

    Args:
        executor: Statement executor.
        stock_ids: Referenced stock ids.

    Returns:
        set[int]: Resolved stock ids.

    Raises:
        RecordNotFoundError: Raised when any referenced id has no stock row.
    """

    requested_ids = sorted(set(stock_ids))
    if not requested_ids:
        return set()

    rows = executor.db_execute_query("SELECT id FROM stocks WHERE id IN :stock_ids", {"stock_ids": requested_ids})
    resolved_ids = {int(row["id"]) for row in rows}
    missing_ids = [stock_id for stock_id in requested_ids if stock_id not in resolved_ids]
    if missing_ids:
        raise RecordNotFoundError(
            f"Stocks with ids ( {', '.join(str(stock_id) for stock_id in missing_ids)} ) do not exist!",
            supporting_data={"stock_ids": missing_ids},
        )
    return resolved_ids


def service_delete_result(key: Any) -> dict[str, Any]:
    return {"id": key, "status": "success"}


def service_as_items(data: Any) -> list[Any]:
    return list(data) if isinstance(data, (list, tuple)) else [data]


def _service_insert_value(column: str, column_defaults: Mapping[str, str]) -> str:
    if column == "created_datetime":
        return "COALESCE(:created_datetime, now())"
    if column in column_defaults:
        return f"COALESCE(:{column}, {column_defaults[column]})"
    return f":{column}"
