"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and the service modules that
issue statements through `QueryExecutorPort`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Sequence

from stock_tracker.domain import HealthStatus


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of one row of a batch write.

    Attributes:
        affected_rows: Row count reported by the driver for this statement.
        inserted_id: Generated or conflicting id returned by the statement, if any.
    """

    affected_rows: int
    inserted_id: int | None


class QueryExecutorPort(Protocol):
    """Port definition for parameterized statement execution."""

    def db_execute_query(
        self,
        sql: str,
        placeholders: Mapping[str, Any] | None = None,
        post_processor: Callable[[list[dict[str, Any]]], Any] | None = None,
    ) -> Any:
        """Run one statement in its own transaction and return its rows.

        Args:
            sql: Statement text with named `:param` placeholders.
            placeholders: Bound parameter values.
            post_processor: Optional callable applied to the row list.

        Returns:
            Any: Row mappings as dicts, or the post-processor output.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: Propagated after rollback.
        """

    def db_execute_batch(self, sql: str, placeholders_per_row: Sequence[Mapping[str, Any]]) -> list[UpsertResult]:
        """Run one statement per placeholder row inside a single transaction.

        Args:
            sql: Statement text with named `:param` placeholders.
            placeholders_per_row: One parameter mapping per executed row.

        Returns:
            list[UpsertResult]: Per-row outcomes in input order.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: Propagated after rollback.
        """


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """
