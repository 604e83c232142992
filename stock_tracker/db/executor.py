"""SQLAlchemy-backed statement executor shared by all entity services."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from sqlalchemy import Engine, bindparam, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.sql.elements import TextClause

from .interfaces import QueryExecutorPort, UpsertResult

logger = logging.getLogger(__name__)


class SQLAlchemyQueryExecutor(QueryExecutorPort):
    """Run parameterized `text()` statements through a pooled engine.

    Every call checks out one connection with `engine.begin()`, so one logical
    operation is one transaction. The connection is returned to the pool on
    every exit path; failures roll back and propagate unchanged.
    """

    def __init__(self, engine: Engine):
        """Initialize the executor.

        Args:
            engine: SQLAlchemy engine owning the bounded connection pool.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")

        self._engine = engine

    def db_execute_query(
        self,
        sql: str,
        placeholders: Mapping[str, Any] | None = None,
        post_processor: Callable[[list[dict[str, Any]]], Any] | None = None,
    ) -> Any:
        """Run one statement and return its rows as dicts.

        List or tuple placeholder values are bound as expanding parameters, so
        `IN :param` receives one bound value per item.

        Args:
            sql: Statement text with named `:param` placeholders.
            placeholders: Bound parameter values.
            post_processor: Optional callable applied to the row list.

        Returns:
            Any: Row dicts, an empty list for statements without rows, or the
            post-processor output.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: Propagated after rollback.
        """

        bound_values = dict(placeholders or {})
        statement = _db_prepare_statement(sql, bound_values)
        logger.debug("executing statement with params=%s", sorted(bound_values))

        with self._engine.begin() as connection:
            result = connection.execute(statement, bound_values)
            rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []

        if post_processor is not None:
            return post_processor(rows)
        return rows

    def db_execute_batch(self, sql: str, placeholders_per_row: Sequence[Mapping[str, Any]]) -> list[UpsertResult]:
        """Run one statement per placeholder row inside one transaction.

        A failure on any row rolls back every row of the batch.

        Args:
            sql: Statement text with named `:param` placeholders, optionally
                ending with `RETURNING id`.
            placeholders_per_row: One parameter mapping per executed row.

        Returns:
            list[UpsertResult]: Per-row outcomes in input order.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: Propagated after rollback.
        """

        if not placeholders_per_row:
            return []

        statement = text(sql)
        results: list[UpsertResult] = []
        logger.debug("executing batch of %d rows", len(placeholders_per_row))

        with self._engine.begin() as connection:
            for row_placeholders in placeholders_per_row:
                result = connection.execute(statement, dict(row_placeholders))
                results.append(_db_upsert_result(result))

        return results


def _db_prepare_statement(sql: str, bound_values: Mapping[str, Any]) -> TextClause:
    statement = text(sql)
    expanding_names = [name for name, value in bound_values.items() if isinstance(value, (list, tuple))]
    if expanding_names:
        statement = statement.bindparams(*(bindparam(name, expanding=True) for name in expanding_names))
    return statement


def _db_upsert_result(result: CursorResult) -> UpsertResult:
    inserted_id = None
    if result.returns_rows:
        returned_row = result.first()
        inserted_id = returned_row[0] if returned_row is not None else None
    return UpsertResult(affected_rows=result.rowcount, inserted_id=inserted_id)
