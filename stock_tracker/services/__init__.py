"""Entity services orchestrating validation, projection and statement execution."""

from .diary_entry_service import DiaryEntryService
from .short_data_service import ShortDataService
from .stock_service import StockService
from .transaction_service import StockTransactionService

__all__ = [
    "DiaryEntryService",
    "ShortDataService",
    "StockService",
    "StockTransactionService",
]
