"""Shared test doubles for service, job and API tests."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

import pytest

from stock_tracker.db import UpsertResult


class RecordingExecutor:
    """Executor double that records statements and replays canned row lists.

    Each `db_execute_query` call consumes the next canned row list; an
    exhausted queue yields empty results.
    """

    def __init__(self, query_rows: Sequence[list[dict[str, Any]]] = ()):
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.batches: list[tuple[str, list[dict[str, Any]]]] = []
        self._query_rows = list(query_rows)

    def db_execute_query(
        self,
        sql: str,
        placeholders: Mapping[str, Any] | None = None,
        post_processor: Callable[[list[dict[str, Any]]], Any] | None = None,
    ) -> Any:
        """Record one statement and return the next canned rows.

        Returns:
            Any: Canned rows or the post-processor output.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        self.queries.append((sql, dict(placeholders or {})))
        rows = self._query_rows.pop(0) if self._query_rows else []
        if post_processor is not None:
            return post_processor(rows)
        return rows

    def db_execute_batch(self, sql: str, placeholders_per_row: Sequence[Mapping[str, Any]]) -> list[UpsertResult]:
        """Record one batch and report one inserted row per placeholder row.

        Returns:
            list[UpsertResult]: Sequential ids starting at 1.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        rows = [dict(row) for row in placeholders_per_row]
        self.batches.append((sql, rows))
        return [UpsertResult(affected_rows=1, inserted_id=index + 1) for index, _ in enumerate(rows)]


@pytest.fixture
def recording_executor_factory() -> Callable[..., RecordingExecutor]:
    return RecordingExecutor
