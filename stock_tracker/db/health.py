"""Database connectivity check used by the health endpoint."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from stock_tracker.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service backed by a `SELECT 1` round-trip."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify database connectivity.

        Returns:
            HealthStatus: `ok` status when the round-trip succeeds.

        Raises:
            ConnectionError: Raised when the pool cannot serve a working connection.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error
        return HealthStatus(status="ok", detail="database connectivity verified")
