"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI
from sqlalchemy import Engine

from stock_tracker.adapters import ShortPositionSourceAdapter
from stock_tracker.api import create_api_application
from stock_tracker.config import AppSettings, config_load_settings
from stock_tracker.db import (
    CurrencyCache,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyQueryExecutor,
    db_create_currency_cache,
    db_create_engine,
)
from stock_tracker.jobs import ShortBackfillJob
from stock_tracker.services import DiaryEntryService, ShortDataService, StockService, StockTransactionService


@dataclass(frozen=True)
class BootstrapContainer:
    """Wired runtime dependencies shared by the API and CLI surfaces."""

    settings: AppSettings
    engine: Engine
    executor: SQLAlchemyQueryExecutor
    currency_cache: CurrencyCache
    stock_service: StockService
    transaction_service: StockTransactionService
    short_data_service: ShortDataService
    diary_entry_service: DiaryEntryService
    short_source_adapter: ShortPositionSourceAdapter
    backfill_job: ShortBackfillJob


def bootstrap_create_container(settings: AppSettings | None = None) -> BootstrapContainer:
    """Assemble engine, services, adapter and job from validated settings.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.

    Returns:
        BootstrapContainer: Wired runtime dependencies.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = db_create_engine(
        database_url=resolved_settings.database_url,
        pool_size=resolved_settings.database_pool_size,
    )
    executor = SQLAlchemyQueryExecutor(engine=engine)
    currency_cache = db_create_currency_cache()
    short_data_service = ShortDataService(executor=executor)
    short_source_adapter = ShortPositionSourceAdapter(
        base_url=resolved_settings.short_source_base_url,
        request_timeout_seconds=resolved_settings.short_source_timeout_seconds,
    )
    return BootstrapContainer(
        settings=resolved_settings,
        engine=engine,
        executor=executor,
        currency_cache=currency_cache,
        stock_service=StockService(executor=executor),
        transaction_service=StockTransactionService(executor=executor, currency_cache=currency_cache),
        short_data_service=short_data_service,
        diary_entry_service=DiaryEntryService(executor=executor),
        short_source_adapter=short_source_adapter,
        backfill_job=ShortBackfillJob(
            short_data_service=short_data_service,
            source_adapter=short_source_adapter,
            delay_seconds=resolved_settings.short_backfill_delay_seconds,
        ),
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    container = bootstrap_create_container(settings)
    return create_api_application(
        settings=container.settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=container.engine),
        stock_service=container.stock_service,
        transaction_service=container.transaction_service,
        short_data_service=container.short_data_service,
        diary_entry_service=container.diary_entry_service,
        backfill_job=container.backfill_job,
        currency_cache=container.currency_cache,
        executor=container.executor,
    )


def bootstrap_create_backfill_job(settings: AppSettings | None = None) -> ShortBackfillJob:
    return bootstrap_create_container(settings).backfill_job
