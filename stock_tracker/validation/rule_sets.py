"""Per-entity validation rule sets for request params and bodies."""

from __future__ import annotations

from typing import Final, Mapping

from stock_tracker.domain import (
    CurrencyCode,
    QueryType,
    StockCategory,
    StockSubcategory,
    TransactionType,
    domain_enum_values,
)

from .engine import ValidationRule, ValidatorResult
from .predicates import (
    validation_is_big_integer_like,
    validation_is_date_string,
    validation_is_list_of,
    validation_is_money_like,
    validation_is_non_negative_number,
    validation_is_number_like,
    validation_is_one_of,
    validation_is_string,
    validation_is_ticker,
)

_TICKER_MESSAGE: Final[str] = 'Ticker No. is formatted incorrectly, it should be 5 characters long. E.g "00001"'
_ID_MESSAGE: Final[str] = "Id must be an integer or a string convertible to an integer"
_STOCK_ID_MESSAGE: Final[str] = "Stock Id must be an integer or a string convertible to an integer"
_CURRENCY_MESSAGE: Final[str] = "Currency must be one of the following: " + ", ".join(domain_enum_values(CurrencyCode))


def _validation_date_rule(name: str, label: str, is_required: bool = False) -> ValidationRule:
    return ValidationRule(
        name=name,
        is_required=is_required,
        rule=validation_is_date_string,
        error_message=f"{label} must be formatted like so: yyyy-MM-dd",
    )


def _validation_id_rule(is_required: bool) -> ValidationRule:
    return ValidationRule(name="id", is_required=is_required, rule=validation_is_big_integer_like, error_message=_ID_MESSAGE)


def _validation_stock_id_rule(is_required: bool) -> ValidationRule:
    return ValidationRule(
        name="stock_id",
        is_required=is_required,
        rule=validation_is_big_integer_like,
        error_message=_STOCK_ID_MESSAGE,
    )


STOCK_PARAM_RULES: Final[tuple[ValidationRule, ...]] = (
    ValidationRule(
        name="query_type",
        is_required=False,
        rule=validation_is_one_of(domain_enum_values(QueryType)),
        error_message='Query Type is invalid. It must be either "AND" or "OR".',
    ),
    ValidationRule(name="ticker_no", is_required=False, rule=validation_is_string, error_message="Ticker No. must be a string"),
    ValidationRule(name="name", is_required=False, rule=validation_is_string, error_message="Name must be a string"),
    ValidationRule(name="isin", is_required=False, rule=validation_is_string, error_message="ISIN must be a string"),
)

STOCK_KEY_RULES: Final[tuple[ValidationRule, ...]] = (
    ValidationRule(name="ticker_no", is_required=True, rule=validation_is_ticker, error_message=_TICKER_MESSAGE),
)

STOCK_ID_KEY_RULES: Final[tuple[ValidationRule, ...]] = (_validation_id_rule(is_required=True),)

STOCK_BODY_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    ValidationRule(name="ticker_no", is_required=True, rule=validation_is_ticker, error_message=_TICKER_MESSAGE),
    ValidationRule(name="name", is_required=True, rule=validation_is_string, error_message="Name must be a string"),
    ValidationRule(
        name="full_name", is_required=False, rule=validation_is_string, error_message="Full Name must be a string"
    ),
    ValidationRule(
        name="description", is_required=False, rule=validation_is_string, error_message="Description must be a string"
    ),
    ValidationRule(
        name="category",
        is_required=False,
        rule=validation_is_one_of(domain_enum_values(StockCategory)),
        error_message="Category must be one of the following: " + ", ".join(domain_enum_values(StockCategory)),
    ),
    ValidationRule(
        name="subcategory",
        is_required=False,
        rule=validation_is_one_of(domain_enum_values(StockSubcategory)),
        error_message="Subcategory must be one of the following: " + ", ".join(domain_enum_values(StockSubcategory)),
    ),
    ValidationRule(
        name="board_lot",
        is_required=False,
        rule=validation_is_big_integer_like,
        error_message="Board Lot must be an integer",
    ),
    ValidationRule(name="isin", is_required=False, rule=validation_is_string, error_message="ISIN must be a string"),
    ValidationRule(
        name="currency",
        is_required=False,
        rule=validation_is_one_of(domain_enum_values(CurrencyCode)),
        error_message=_CURRENCY_MESSAGE,
    ),
    ValidationRule(
        name="is_active",
        is_required=False,
        rule=lambda value: isinstance(value, bool),
        error_message="Is Active must be a boolean",
    ),
    ValidationRule(
        name="is_tracked",
        is_required=False,
        rule=lambda value: isinstance(value, bool),
        error_message="Is Tracked must be a boolean",
    ),
)

TRANSACTION_PARAM_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    _validation_stock_id_rule(is_required=False),
    ValidationRule(
        name="type",
        is_required=False,
        rule=validation_is_list_of(domain_enum_values(TransactionType)),
        error_message='Type must be a list and must only have the following values if included: "buy", "sell", "dividend"',
    ),
    _validation_date_rule("start_date", "Start Date"),
    _validation_date_rule("end_date", "End Date"),
)

TRANSACTION_KEY_RULES: Final[tuple[ValidationRule, ...]] = (_validation_id_rule(is_required=True),)

TRANSACTION_BODY_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    _validation_stock_id_rule(is_required=True),
    ValidationRule(
        name="type",
        is_required=True,
        rule=validation_is_one_of(domain_enum_values(TransactionType)),
        error_message='Type must be one of the following: "buy", "sell", "dividend"',
    ),
    ValidationRule(
        name="amount",
        is_required=True,
        rule=validation_is_money_like,
        error_message="Amount must be a money object with whole, fractional, decimal_places and iso_code",
    ),
    ValidationRule(
        name="quantity",
        is_required=True,
        rule=lambda value: validation_is_big_integer_like(value) and int(value) >= 0,
        error_message="Quantity must be a number and be a positive value",
    ),
    ValidationRule(
        name="fee",
        is_required=True,
        rule=validation_is_money_like,
        error_message="Fee must be a money object with whole, fractional, decimal_places and iso_code",
    ),
    _validation_date_rule("transaction_date", "Transaction Date", is_required=True),
    ValidationRule(
        name="currency",
        is_required=True,
        rule=validation_is_one_of(domain_enum_values(CurrencyCode)),
        error_message=_CURRENCY_MESSAGE,
    ),
)

SHORT_PARAM_RULES: Final[tuple[ValidationRule, ...]] = (
    ValidationRule(
        name="stock_id",
        is_required=True,
        rule=validation_is_big_integer_like,
        error_message="Stock Id is required and must be an integer",
    ),
    _validation_date_rule("start_date", "Start Date"),
    _validation_date_rule("end_date", "End Date"),
)

SHORT_KEY_RULES: Final[tuple[ValidationRule, ...]] = (_validation_id_rule(is_required=True),)

SHORT_BODY_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    ValidationRule(
        name="ticker_no",
        is_required=True,
        rule=validation_is_ticker,
        error_message="Ticker No. must be a string of 5 characters",
    ),
    _validation_stock_id_rule(is_required=False),
    _validation_date_rule("reporting_date", "Reporting Date", is_required=True),
    ValidationRule(
        name="shorted_shares",
        is_required=False,
        rule=validation_is_number_like,
        error_message="Shorted Shares must be a number",
    ),
    ValidationRule(
        name="shorted_amount",
        is_required=False,
        rule=validation_is_number_like,
        error_message="Shorted Amount must be a number",
    ),
)

SHORT_MISMATCH_QUERY_RULES: Final[tuple[ValidationRule, ...]] = (
    ValidationRule(
        name="limit",
        is_required=False,
        rule=validation_is_non_negative_number,
        error_message="Limit must be a positive number",
    ),
    ValidationRule(
        name="offset",
        is_required=False,
        rule=validation_is_non_negative_number,
        error_message="Offset must be a positive number",
    ),
)

SHORT_MISMATCH_KEY_RULES: Final[tuple[ValidationRule, ...]] = (
    ValidationRule(
        name="ticker_no",
        is_required=True,
        rule=validation_is_ticker,
        error_message='Ticker No. in param is formatted incorrectly, it should be 5 characters long. E.g "00001"',
    ),
)

SHORT_BACKFILL_PARAM_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_date_rule("end_date", "End Date", is_required=True),
)

DIARY_ENTRY_PARAM_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    _validation_stock_id_rule(is_required=True),
    ValidationRule(name="title", is_required=False, rule=validation_is_string, error_message="Title must be a string"),
    _validation_date_rule("start_date", "Start Date"),
    _validation_date_rule("end_date", "End Date"),
)

DIARY_ENTRY_KEY_RULES: Final[tuple[ValidationRule, ...]] = (_validation_id_rule(is_required=True),)

DIARY_ENTRY_BODY_RULES: Final[tuple[ValidationRule, ...]] = (
    _validation_id_rule(is_required=False),
    _validation_stock_id_rule(is_required=True),
    ValidationRule(name="title", is_required=True, rule=validation_is_string, error_message="Title must be a string"),
    ValidationRule(name="content", is_required=True, rule=validation_is_string, error_message="Content must be a string"),
    _validation_date_rule("posted_date", "Posted Date", is_required=True),
)


def validation_transaction_currency_results(data: object) -> list[ValidatorResult]:
    """Report transaction items whose money iso codes differ from `currency`.

    Only items that already carry a currency string and money mappings are
    checked; shape errors are reported by `TRANSACTION_BODY_RULES`.

    Args:
        data: Transaction body mapping or list of mappings.

    Returns:
        list[ValidatorResult]: Failures per mismatching item, possibly empty.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    normalized_items = list(data) if isinstance(data, (list, tuple)) else [data]
    results: list[ValidatorResult] = []
    for index, item in enumerate(normalized_items):
        if not isinstance(item, Mapping) or not isinstance(item.get("currency"), str):
            continue
        error_messages = [
            f'Field "{money_field}": iso_code must match currency {item["currency"]}'
            for money_field in ("amount", "fee")
            if validation_is_money_like(item.get(money_field)) and item[money_field]["iso_code"] != item["currency"]
        ]
        if error_messages:
            results.append(ValidatorResult(index=index, error_messages=error_messages))
    return results
