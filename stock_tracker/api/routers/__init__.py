"""API router package for endpoint composition."""

from .diary_entry import api_create_diary_entry_router
from .health import api_create_health_router
from .short_data import api_create_short_data_router
from .stock import api_create_stock_router
from .transaction import api_create_transaction_router

__all__ = [
    "api_create_diary_entry_router",
    "api_create_health_router",
    "api_create_short_data_router",
    "api_create_stock_router",
    "api_create_transaction_router",
]
