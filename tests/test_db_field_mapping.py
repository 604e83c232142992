"""Tests for whitelisted predicate building and column projection."""

from __future__ import annotations

import pytest

from stock_tracker.db import (
    FieldMapping,
    ProcessDataMapping,
    db_assert_columns_match_record,
    db_build_placeholders,
    db_build_where_clause,
    db_project_columns,
    db_transform_date,
    db_transform_integer,
    db_transform_like,
    db_transform_money,
)
from stock_tracker.domain import DiaryEntryRecord, ProjectionContractError

_MAPPINGS = (
    FieldMapping(param="name", field="name", operator="="),
    FieldMapping(param="start_date", field="reporting_date", operator=">="),
    FieldMapping(param="end_date", field="reporting_date", operator="<="),
)


def test_where_clause_joins_fragments_in_mapping_order() -> None:
    """Present params become parenthesized fragments in declaration order.

    Returns:
        None: Assertions validate clause text.

    Raises:
        AssertionError: Raised when clause text differs.
    """

    clause = db_build_where_clause(
        "AND",
        _MAPPINGS,
        {"end_date": "2024-01-31", "name": "x", "start_date": "2024-01-01"},
    )

    assert clause == "(name = :name) AND (reporting_date >= :start_date) AND (reporting_date <= :end_date)"


def test_where_clause_omits_absent_params_and_ignores_unmapped_keys() -> None:
    clause = db_build_where_clause("OR", _MAPPINGS, {"name": "", "end_date": None, "limit": 10})

    assert clause == "(name = :name) OR (reporting_date <= :end_date)"


def test_where_clause_is_empty_without_mapped_params() -> None:
    assert db_build_where_clause("AND", _MAPPINGS, {}) == ""
    assert db_build_where_clause("AND", _MAPPINGS, {"unrelated": 1}) == ""


def test_where_clause_rejects_unknown_connective() -> None:
    with pytest.raises(ValueError):
        db_build_where_clause("XOR", _MAPPINGS, {"name": "x"})


def test_placeholders_match_emitted_params_and_apply_transforms() -> None:
    placeholders = db_build_placeholders(
        _MAPPINGS,
        {"name": "Ten", "start_date": "2024-01-01", "other": 1},
        {"name": db_transform_like, "start_date": db_transform_date},
    )

    assert set(placeholders) == {"name", "start_date"}
    assert placeholders["name"] == "%Ten%"
    assert str(placeholders["start_date"]) == "2024-01-01"


def test_projection_emits_every_declared_column_only() -> None:
    columns = (
        ProcessDataMapping(field="stock_id", transform=db_transform_integer),
        ProcessDataMapping(field="title"),
        ProcessDataMapping(field="content"),
    )

    projected = db_project_columns({"stock_id": "7", "title": "Results", "unexpected": True}, columns, {"id": 3})

    assert projected == {"id": 3, "stock_id": 7, "title": "Results", "content": None}


def test_projection_contract_is_checked_against_record_fields() -> None:
    db_assert_columns_match_record((ProcessDataMapping(field="title"),), DiaryEntryRecord)

    with pytest.raises(ProjectionContractError):
        db_assert_columns_match_record((ProcessDataMapping(field="headline"),), DiaryEntryRecord)


def test_transforms_reject_values_of_unexpected_shape() -> None:
    with pytest.raises(ProjectionContractError):
        db_transform_integer(True)
    with pytest.raises(ProjectionContractError):
        db_transform_money({"whole": 1})
    assert db_transform_integer(None) is None
