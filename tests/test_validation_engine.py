"""Tests for the declarative validation engine."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from stock_tracker.domain import InvalidRequestError
from stock_tracker.validation import (
    ValidationRule,
    ValidatorResult,
    validation_raise_for_invalid,
    validation_validate,
)

_RULES = (
    ValidationRule(
        name="name",
        is_required=True,
        rule=lambda value: isinstance(value, str),
        error_message="Name must be a string",
    ),
    ValidationRule(
        name="age",
        is_required=False,
        rule=lambda value: int(value) >= 0,
        error_message="Age must be a positive integer",
    ),
)


def test_validation_reports_missing_required_field() -> None:
    """Absent required fields produce the required-field message.

    Returns:
        None: Assertions validate reported failures.

    Raises:
        AssertionError: Raised when the message or index differs.
    """

    results = validation_validate({"age": 3}, _RULES)

    assert results == [ValidatorResult(index=0, error_messages=['Field "name" is required.'])]


def test_validation_reports_rule_failure_with_field_prefix() -> None:
    results = validation_validate({"name": "Tencent", "age": -1}, _RULES)

    assert results == [ValidatorResult(index=0, error_messages=['Field "age": Age must be a positive integer'])]


def test_validation_treats_falsy_values_as_present() -> None:
    """Presence is key membership, so empty strings and zero are validated values.

    Returns:
        None: Assertions validate falsy handling.

    Raises:
        AssertionError: Raised when a falsy value is treated as absent.
    """

    assert validation_validate({"name": "", "age": 0}, _RULES) == []


def test_validation_never_invokes_rule_for_absent_optional_field() -> None:
    rule = Mock(return_value=False)
    rules = (ValidationRule(name="title", is_required=False, rule=rule, error_message="unused"),)

    assert validation_validate({"other": 1}, rules) == []
    rule.assert_not_called()


def test_validation_reports_only_failing_items_with_their_index() -> None:
    payload = [{"name": "a"}, {"age": 1}, {"name": "c", "age": "x"}]

    results = validation_validate(payload, _RULES)

    assert [result.index for result in results] == [1, 2]
    assert results[1].error_messages == ['Field "age": Age must be a positive integer']


def test_validation_counts_raising_predicate_as_failure() -> None:
    results = validation_validate({"name": "a", "age": None}, _RULES)

    assert results[0].error_messages == ['Field "age": Age must be a positive integer']


def test_validation_of_empty_list_is_empty() -> None:
    assert validation_validate([], _RULES) == []


def test_validation_treats_non_mapping_item_as_missing_every_field() -> None:
    results = validation_validate(["not-a-mapping"], _RULES)

    assert results == [ValidatorResult(index=0, error_messages=['Field "name" is required.'])]


def test_validation_raise_for_invalid_carries_plain_results() -> None:
    """Invalid payloads raise with serialized per-item failures.

    Returns:
        None: Assertions validate the raised error.

    Raises:
        AssertionError: Raised when supporting data is not plain.
    """

    with pytest.raises(InvalidRequestError) as error_info:
        validation_raise_for_invalid([{"name": "a"}, {}], _RULES)

    assert error_info.value.supporting_data == [{"index": 1, "error_messages": ['Field "name" is required.']}]
    assert error_info.value.message == "Invalid request"


def test_validation_raise_for_invalid_returns_for_valid_payload() -> None:
    assert validation_raise_for_invalid({"name": "a"}, _RULES) is None
