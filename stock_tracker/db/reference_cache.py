"""In-memory reference data loaded once at startup and read-only afterwards."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Iterable, TypeVar

from stock_tracker.domain import CurrencyRecord, ReferenceCacheEmptyError

from .interfaces import QueryExecutorPort

logger = logging.getLogger(__name__)

KeyT = TypeVar("KeyT")
ValueT = TypeVar("ValueT")


class ReferenceCache(Generic[KeyT, ValueT]):
    """Named keyed snapshot of reference rows.

    `cache_initialize` replaces the whole snapshot atomically; readers always see
    either the previous or the new mapping.
    """

    def __init__(self, name: str):
        if not name.strip():
            raise ValueError("name must not be blank")
        self._name = name
        self._entries: dict[KeyT, ValueT] = {}
        self._lock = threading.Lock()

    @property
    def cache_name(self) -> str:
        return self._name

    def cache_initialize(self, fetch_fn: Callable[[], Iterable[ValueT]], key_fn: Callable[[ValueT], KeyT]) -> None:
        """Load the snapshot from a fetch callable.

        Args:
            fetch_fn: Callable returning every reference row.
            key_fn: Callable deriving the lookup key of one row.

        Returns:
            None: The snapshot is replaced as a side effect.

        Raises:
            Exception: Errors from fetch_fn propagate and keep the previous snapshot.
        """

        loaded_entries = {key_fn(entry): entry for entry in fetch_fn()}
        with self._lock:
            self._entries = loaded_entries
        logger.info("%s cache loaded with %d entries", self._name, len(loaded_entries))

    def cache_get(self) -> dict[KeyT, ValueT]:
        """Return the loaded snapshot.

        Returns:
            dict[KeyT, ValueT]: Reference rows keyed by lookup key.

        Raises:
            ReferenceCacheEmptyError: Raised when nothing was loaded yet.
        """

        entries = self._entries
        if not entries:
            raise ReferenceCacheEmptyError(f"{self._name} cache is empty")
        return entries


CurrencyCache = ReferenceCache[str, CurrencyRecord]


def db_create_currency_cache() -> CurrencyCache:
    return ReferenceCache("currency")


def db_load_currencies(executor: QueryExecutorPort) -> list[CurrencyRecord]:
    """Read every currency row.

    Args:
        executor: Statement executor.

    Returns:
        list[CurrencyRecord]: Currencies ordered by ISO code.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: Propagated from the executor.
    """

    rows = executor.db_execute_query("SELECT iso_code, decimal_places FROM currencies ORDER BY iso_code")
    return [CurrencyRecord(iso_code=row["iso_code"], decimal_places=int(row["decimal_places"])) for row in rows]


def db_initialize_currency_cache(cache: CurrencyCache, executor: QueryExecutorPort) -> None:
    cache.cache_initialize(lambda: db_load_currencies(executor), lambda currency: currency.iso_code)
