"""Declarative request validation: engine, predicates and per-entity rule sets."""

from .engine import ValidationRule, ValidatorResult, validation_raise_for_invalid, validation_validate
from .rule_sets import (
    DIARY_ENTRY_BODY_RULES,
    DIARY_ENTRY_KEY_RULES,
    DIARY_ENTRY_PARAM_RULES,
    SHORT_BACKFILL_PARAM_RULES,
    SHORT_BODY_RULES,
    SHORT_KEY_RULES,
    SHORT_MISMATCH_KEY_RULES,
    SHORT_MISMATCH_QUERY_RULES,
    SHORT_PARAM_RULES,
    STOCK_BODY_RULES,
    STOCK_ID_KEY_RULES,
    STOCK_KEY_RULES,
    STOCK_PARAM_RULES,
    TRANSACTION_BODY_RULES,
    TRANSACTION_KEY_RULES,
    TRANSACTION_PARAM_RULES,
    validation_transaction_currency_results,
)

__all__ = [
    "DIARY_ENTRY_BODY_RULES",
    "DIARY_ENTRY_KEY_RULES",
    "DIARY_ENTRY_PARAM_RULES",
    "SHORT_BACKFILL_PARAM_RULES",
    "SHORT_BODY_RULES",
    "SHORT_KEY_RULES",
    "SHORT_MISMATCH_KEY_RULES",
    "SHORT_MISMATCH_QUERY_RULES",
    "SHORT_PARAM_RULES",
    "STOCK_BODY_RULES",
    "STOCK_ID_KEY_RULES",
    "STOCK_KEY_RULES",
    "STOCK_PARAM_RULES",
    "TRANSACTION_BODY_RULES",
    "TRANSACTION_KEY_RULES",
    "TRANSACTION_PARAM_RULES",
    "ValidationRule",
    "ValidatorResult",
    "validation_raise_for_invalid",
    "validation_transaction_currency_results",
    "validation_validate",
]
