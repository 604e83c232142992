"""Whitelisted parameter-to-column mapping helpers.

Filter clauses are built only from declared `FieldMapping` entries and bound by
name, so request values never reach statement text. Body projection copies
only declared `ProcessDataMapping` columns into the record mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, MutableMapping, Sequence

from stock_tracker.domain import Money, ProjectionContractError, QueryType, domain_coerce_date, domain_record_field_names

ValueTransform = Callable[[Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """Mapping from a request parameter to one predicate fragment.

    Attributes:
        param: Request parameter key and bound placeholder name.
        field: Column expression placed on the left of the operator.
        operator: SQL comparison operator, for example `=`, `LIKE` or `IN`.
    """

    param: str
    field: str
    operator: str


@dataclass(frozen=True)
class ProcessDataMapping:
    """Declared body column with an optional value transform.

    Attributes:
        field: Body key and record field name.
        transform: Optional callable applied to the raw value, including None.
    """

    field: str
    transform: ValueTransform | None = None


def db_build_where_clause(connective: QueryType | str, mappings: Sequence[FieldMapping], args: Mapping[str, Any]) -> str:
    """Build a parenthesized predicate from mappings whose param is present.

    Only key presence is inspected. Fragments follow mapping order and are
    joined by the connective.

    Args:
        connective: `AND` or `OR`.
        mappings: Whitelisted parameter mappings.
        args: Request parameters.

    Returns:
        str: Predicate text such as `(name = :name) AND (id = :id)`, or an
        empty string when no mapped param is present.

    Raises:
        ValueError: Raised when connective is not `AND` or `OR`.
    """

    normalized_connective = QueryType(connective).value
    fragments = [f"({mapping.field} {mapping.operator} :{mapping.param})" for mapping in mappings if mapping.param in args]
    return f" {normalized_connective} ".join(fragments)


def db_build_placeholders(
    mappings: Sequence[FieldMapping],
    args: Mapping[str, Any],
    transforms: Mapping[str, ValueTransform] | None = None,
) -> dict[str, Any]:
    """Build bound values for exactly the params emitted by `db_build_where_clause`.

    Args:
        mappings: Whitelisted parameter mappings.
        args: Request parameters.
        transforms: Optional per-param value transforms.

    Returns:
        dict[str, Any]: Placeholder values keyed by param name.

    Raises:
        ProjectionContractError: Propagated from a transform rejecting a value.
    """

    value_transforms = transforms or {}
    placeholders: dict[str, Any] = {}
    for mapping in mappings:
        if mapping.param not in args:
            continue
        raw_value = args[mapping.param]
        transform = value_transforms.get(mapping.param)
        placeholders[mapping.param] = transform(raw_value) if transform is not None else raw_value
    return placeholders


def db_project_columns(
    source: Mapping[str, Any],
    columns: Sequence[ProcessDataMapping],
    target: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Copy every declared column from source into target.

    Missing source keys become None before the transform runs. Keys of target
    that are not declared columns are left untouched.

    Args:
        source: Validated request body item.
        columns: Declared projection columns.
        target: Mapping receiving projected values.

    Returns:
        MutableMapping[str, Any]: The same target mapping.

    Raises:
        ProjectionContractError: Propagated from a transform rejecting a value.
    """

    for column in columns:
        raw_value = source.get(column.field)
        target[column.field] = column.transform(raw_value) if column.transform is not None else raw_value
    return target


def db_assert_columns_match_record(columns: Sequence[ProcessDataMapping], record_type: type) -> None:
    """Check that every projection column is a declared record field.

    Args:
        columns: Declared projection columns.
        record_type: Record dataclass the projection feeds.

    Returns:
        None: Returns when every column is declared.

    Raises:
        ProjectionContractError: Raised when a column has no matching record field.
    """

    record_fields = set(domain_record_field_names(record_type))
    unknown_columns = [column.field for column in columns if column.field not in record_fields]
    if unknown_columns:
        raise ProjectionContractError(f"{record_type.__name__} does not declare columns={unknown_columns}")


def db_transform_like(value: Any) -> str:
    return f"%{value}%"


def db_transform_integer(value: Any) -> int | None:
    """Convert an integer-like value, keeping None.

    Args:
        value: Integer, integer string or None.

    Returns:
        int | None: Converted value.

    Raises:
        ProjectionContractError: Raised for bools and non-integer values.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ProjectionContractError(f"{value!r} cannot be cast to an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise ProjectionContractError(f"{value!r} cannot be cast to an integer") from error


def db_transform_number(value: Any) -> int | None:
    # Reported share counts and amounts may arrive as numeric strings.
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError) as error:
        raise ProjectionContractError(f"{value!r} cannot be cast to a number") from error


def db_transform_date(value: Any) -> Any:
    return domain_coerce_date(value)


def db_transform_money(value: Any) -> Money | None:
    if value is None:
        return None
    try:
        return Money.money_from_mapping(value)
    except (TypeError, ValueError) as error:
        raise ProjectionContractError(f"{value!r} cannot be cast to money") from error
