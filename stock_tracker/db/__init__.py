"""Database layer package for all SQL and persistence boundaries."""

from .executor import SQLAlchemyQueryExecutor
from .field_mapping import (
    FieldMapping,
    ProcessDataMapping,
    db_assert_columns_match_record,
    db_build_placeholders,
    db_build_where_clause,
    db_project_columns,
    db_transform_date,
    db_transform_integer,
    db_transform_like,
    db_transform_money,
    db_transform_number,
)
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, QueryExecutorPort, UpsertResult
from .reference_cache import (
    CurrencyCache,
    ReferenceCache,
    db_create_currency_cache,
    db_initialize_currency_cache,
    db_load_currencies,
)
from .session import db_create_engine

__all__ = [
    "CurrencyCache",
    "DatabaseHealthPort",
    "FieldMapping",
    "ProcessDataMapping",
    "QueryExecutorPort",
    "ReferenceCache",
    "SQLAlchemyDatabaseHealthService",
    "SQLAlchemyQueryExecutor",
    "UpsertResult",
    "db_assert_columns_match_record",
    "db_build_placeholders",
    "db_build_where_clause",
    "db_create_currency_cache",
    "db_create_engine",
    "db_initialize_currency_cache",
    "db_load_currencies",
    "db_project_columns",
    "db_transform_date",
    "db_transform_integer",
    "db_transform_like",
    "db_transform_money",
    "db_transform_number",
]
