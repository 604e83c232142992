"""Immutable entity records for persisted rows and their plain projections.

Records are frozen dataclasses built by the service layer, either from a
validated request payload (stamped with lifecycle timestamps) or from a
database row. Projection to storage placeholders and to JSON payloads is done
by the free functions in this module.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping, TypeVar

from .money import Money


class RecordOperation(str, Enum):
    """Mutation intent used to stamp lifecycle timestamps."""

    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class StockRecord:
    """One listed security row.

    Attributes:
        id: Surrogate id, None until persisted.
        ticker_no: Five-character zero-padded exchange code.
        name: Short listing name.
        full_name: Full listing name.
        description: Free-text description.
        category: Listing category value.
        subcategory: Listing subcategory value.
        board_lot: Trading lot size.
        isin: ISIN identifier.
        currency: Trading currency ISO code.
        is_active: False when the listing was superseded.
        is_tracked: Whether the front-end tracks this stock.
        created_datetime: Creation timestamp, set once.
        last_modified_datetime: Last mutation timestamp.
    """

    id: int | None = None
    ticker_no: str | None = None
    name: str | None = None
    full_name: str | None = None
    description: str | None = None
    category: str | None = None
    subcategory: str | None = None
    board_lot: int | None = None
    isin: str | None = None
    currency: str | None = None
    is_active: bool | None = None
    is_tracked: bool | None = None
    created_datetime: datetime | None = None
    last_modified_datetime: datetime | None = None


@dataclass(frozen=True)
class StockTransactionRecord:
    """One buy, sell or dividend event for a stock.

    Attributes:
        id: Surrogate id, None until persisted.
        stock_id: Referenced stock id.
        type: Transaction type value.
        amount: Gross amount.
        quantity: Share quantity.
        fee: Fees paid.
        transaction_date: Trade or payment date.
        currency: ISO code shared by amount and fee.
        created_datetime: Creation timestamp, set once.
        last_modified_datetime: Last mutation timestamp.
    """

    id: int | None = None
    stock_id: int | None = None
    type: str | None = None
    amount: Money | None = None
    quantity: int | None = None
    fee: Money | None = None
    transaction_date: date | None = None
    currency: str | None = None
    created_datetime: datetime | None = None
    last_modified_datetime: datetime | None = None


@dataclass(frozen=True)
class ShortDataRecord:
    """One aggregated short-position report row.

    `stock_id` is None when the reported ticker could not be resolved to a stock.
    """

    id: int | None = None
    stock_id: int | None = None
    ticker_no: str | None = None
    reporting_date: date | None = None
    shorted_shares: int | None = None
    shorted_amount: int | None = None
    created_datetime: datetime | None = None
    last_modified_datetime: datetime | None = None


@dataclass(frozen=True)
class DiaryEntryRecord:
    """One free-text diary entry linked to a stock."""

    id: int | None = None
    stock_id: int | None = None
    title: str | None = None
    content: str | None = None
    posted_date: date | None = None
    created_datetime: datetime | None = None
    last_modified_datetime: datetime | None = None


RecordT = TypeVar("RecordT", StockRecord, StockTransactionRecord, ShortDataRecord, DiaryEntryRecord)


def domain_record_field_names(record_type: type) -> tuple[str, ...]:
    """Return declared field names of a record dataclass.

    Args:
        record_type: Record dataclass type.

    Returns:
        tuple[str, ...]: Field names in declaration order.

    Raises:
        TypeError: Raised when record_type is not a dataclass.
    """

    return tuple(record_field.name for record_field in fields(record_type))


def domain_record_stamp(operation: RecordOperation, now: datetime | None = None) -> dict[str, datetime | None]:
    """Build lifecycle timestamps for a mutation intent.

    Inserts set both timestamps. Updates refresh only `last_modified_datetime`
    and leave `created_datetime` to the storage engine.

    Args:
        operation: Mutation intent.
        now: Optional clock override.

    Returns:
        dict[str, datetime | None]: Timestamp values keyed by field name.

    Raises:
        ValueError: Raised when operation is unsupported.
    """

    stamped_at = now or datetime.now(timezone.utc)
    if operation == RecordOperation.INSERT:
        return {"created_datetime": stamped_at, "last_modified_datetime": stamped_at}
    if operation == RecordOperation.UPDATE:
        return {"created_datetime": None, "last_modified_datetime": stamped_at}
    raise ValueError(f"unsupported record operation={operation}")


def domain_record_from_mapping(record_type: type[RecordT], values: Mapping[str, Any]) -> RecordT:
    """Build a record from a mapping, ignoring keys the record does not declare.

    Args:
        record_type: Record dataclass type.
        values: Row or projected payload mapping.

    Returns:
        RecordT: Record instance; undeclared keys are dropped, missing keys are None.

    Raises:
        TypeError: Raised when record_type is not a dataclass.
    """

    declared_names = domain_record_field_names(record_type)
    return record_type(**{name: values.get(name) for name in declared_names})


def domain_record_to_storage(record: Any) -> dict[str, Any]:
    """Project a record into storage placeholders.

    Money values become integer minor units.

    Args:
        record: Entity record.

    Returns:
        dict[str, Any]: Placeholder mapping keyed by column name.

    Raises:
        TypeError: Raised when record is not a dataclass instance.
    """

    storage_values: dict[str, Any] = {}
    for record_field in fields(record):
        value = getattr(record, record_field.name)
        storage_values[record_field.name] = value.money_minor_units() if isinstance(value, Money) else value
    return storage_values


def domain_record_to_plain(record: Any) -> dict[str, Any]:
    """Project a record into a JSON-compatible mapping.

    Args:
        record: Entity record.

    Returns:
        dict[str, Any]: Mapping with ISO-formatted dates and plain money mappings.

    Raises:
        TypeError: Raised when record is not a dataclass instance.
    """

    return {record_field.name: _domain_plain_value(getattr(record, record_field.name)) for record_field in fields(record)}


def _domain_plain_value(value: Any) -> Any:
    if isinstance(value, Money):
        return value.money_to_plain()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
