"""Reusable pure predicates for validation rules."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Mapping

from stock_tracker.domain import domain_string_to_date

_MONEY_KEYS = ("whole", "fractional", "decimal_places", "iso_code")


def validation_is_big_integer_like(value: Any) -> bool:
    """Return whether value is an int or a string holding an integer.

    Args:
        value: Candidate value.

    Returns:
        bool: True for non-bool ints and integer strings.

    Raises:
        RuntimeError: This predicate does not raise runtime errors.
    """

    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        int(value)
    except ValueError:
        return False
    return True


def validation_is_number_like(value: Any) -> bool:
    """Return whether value is a finite number or a string holding one.

    Args:
        value: Candidate value.

    Returns:
        bool: True for non-bool finite numbers and finite numeric strings.

    Raises:
        RuntimeError: This predicate does not raise runtime errors.
    """

    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        if not value.strip():
            return False
    elif not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except (ValueError, OverflowError):
        return False


def validation_is_money_like(value: Any) -> bool:
    """Return whether value is a complete money mapping with integer parts.

    Keys are checked by presence, so a zero `fractional` is accepted.

    Args:
        value: Candidate value.

    Returns:
        bool: True for `{whole, fractional, decimal_places, iso_code}` mappings.

    Raises:
        RuntimeError: This predicate does not raise runtime errors.
    """

    if not isinstance(value, Mapping):
        return False
    if any(key not in value or value[key] is None for key in _MONEY_KEYS):
        return False
    integer_parts = (value["whole"], value["fractional"], value["decimal_places"])
    if any(isinstance(part, bool) or not isinstance(part, int) for part in integer_parts):
        return False
    if value["decimal_places"] < 0 or not 0 <= value["fractional"] < 10 ** value["decimal_places"]:
        return False
    return isinstance(value["iso_code"], str) and len(value["iso_code"]) == 3


def validation_is_date_string(value: Any) -> bool:
    return isinstance(value, str) and domain_string_to_date(value) is not None


def validation_is_ticker(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 5


def validation_is_string(value: Any) -> bool:
    return isinstance(value, str)


def validation_is_one_of(allowed_values: Iterable[str]) -> Callable[[Any], bool]:
    """Build a predicate accepting only the given string values.

    Args:
        allowed_values: Accepted values.

    Returns:
        Callable[[Any], bool]: Membership predicate.

    Raises:
        RuntimeError: This factory does not raise runtime errors.
    """

    allowed = frozenset(allowed_values)
    return lambda value: isinstance(value, str) and value in allowed


def validation_is_list_of(allowed_values: Iterable[str]) -> Callable[[Any], bool]:
    """Build a predicate accepting lists whose items are all allowed values.

    Args:
        allowed_values: Accepted item values.

    Returns:
        Callable[[Any], bool]: List membership predicate.

    Raises:
        RuntimeError: This factory does not raise runtime errors.
    """

    allowed = frozenset(allowed_values)
    return lambda value: isinstance(value, (list, tuple)) and all(
        isinstance(item, str) and item in allowed for item in value
    )


def validation_is_non_negative_number(value: Any) -> bool:
    return validation_is_number_like(value) and float(value) >= 0
