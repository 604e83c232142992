"""Declarative per-field validation over single payloads or payload lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from stock_tracker.domain import InvalidRequestError


@dataclass(frozen=True)
class ValidationRule:
    """One field rule.

    Attributes:
        name: Field key checked in each payload.
        is_required: Whether an absent field is an error.
        rule: Pure predicate evaluated only when the field is present.
        error_message: Message suffix used when the predicate fails.
    """

    name: str
    is_required: bool
    rule: Callable[[Any], bool]
    error_message: str


@dataclass(frozen=True)
class ValidatorResult:
    """Validation failures for one payload.

    Attributes:
        index: Position of the payload in the normalized input list.
        error_messages: Ordered failure messages.
    """

    index: int
    error_messages: list[str]

    def validation_to_plain(self) -> dict[str, object]:
        return {"index": self.index, "error_messages": list(self.error_messages)}


def validation_validate(data: Any, rules: Sequence[ValidationRule]) -> list[ValidatorResult]:
    """Validate one payload or a list of payloads against ordered rules.

    A single payload is wrapped into a one-item list. Presence is a key
    membership test, so `0`, `False` and `""` are present values. Only payloads
    with at least one failure contribute a result.

    Args:
        data: Mapping or list of mappings.
        rules: Ordered validation rules.

    Returns:
        list[ValidatorResult]: Failures per failing payload, possibly empty.

    Raises:
        RuntimeError: This function does not raise; failures are returned.
    """

    normalized_items = list(data) if isinstance(data, (list, tuple)) else [data]
    results: list[ValidatorResult] = []
    for index, item in enumerate(normalized_items):
        error_messages = _validation_check_item(item, rules)
        if error_messages:
            results.append(ValidatorResult(index=index, error_messages=error_messages))
    return results


def validation_raise_for_invalid(data: Any, rules: Sequence[ValidationRule]) -> None:
    """Raise `InvalidRequestError` when validation produced any failure.

    Args:
        data: Mapping or list of mappings.
        rules: Ordered validation rules.

    Returns:
        None: Returns only when the payload is valid.

    Raises:
        InvalidRequestError: Raised with serialized per-item failures.
    """

    results = validation_validate(data, rules)
    if results:
        raise InvalidRequestError(supporting_data=[result.validation_to_plain() for result in results])


def _validation_check_item(item: Any, rules: Sequence[ValidationRule]) -> list[str]:
    fields_by_name: Mapping[str, Any] = item if isinstance(item, Mapping) else {}
    error_messages: list[str] = []
    for validation_rule in rules:
        if validation_rule.name not in fields_by_name:
            if validation_rule.is_required:
                error_messages.append(f'Field "{validation_rule.name}" is required.')
            continue

        if not _validation_evaluate(validation_rule, fields_by_name[validation_rule.name]):
            error_messages.append(f'Field "{validation_rule.name}": {validation_rule.error_message}')
    return error_messages


def _validation_evaluate(validation_rule: ValidationRule, value: Any) -> bool:
    # A predicate that raises on an odd shape counts as a failed rule.
    try:
        return bool(validation_rule.rule(value))
    except (TypeError, ValueError, AttributeError, KeyError, OverflowError):
        return False
