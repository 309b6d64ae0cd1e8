"""Workflow condition evaluation and validation tests."""

import pytest

from app.application.services.condition_evaluator import (
    evaluate_conditions,
    evaluate_operator,
    get_nested_value,
    validate_conditions,
)

CONTEXT = {
    "event": {
        "status": " Confirmed ",
        "guest_count": 120,
        "start_date": "2025-03-13",
        "notes": "Vegan menu requested",
        "account_id": None,
    },
    "previous": {"status": "pending"},
}


def test_get_nested_value_resolves_dotted_path() -> None:
    """Dotted paths walk nested mappings; missing segments give None."""
    assert get_nested_value(CONTEXT, "event.guest_count") == 120
    assert get_nested_value(CONTEXT, "event.missing.deeper") is None
    assert get_nested_value(CONTEXT, "event.guest_count.value") is None
    assert get_nested_value(None, "event") is None


def test_empty_conditions_pass() -> None:
    """No conditions means the workflow always proceeds."""
    assert evaluate_conditions([], CONTEXT)
    assert evaluate_conditions(None, CONTEXT)


def test_equals_is_trimmed_and_case_insensitive() -> None:
    """String comparison ignores surrounding whitespace and case."""
    assert evaluate_conditions(
        [{"field": "event.status", "operator": "equals", "value": "confirmed"}], CONTEXT
    )
    assert not evaluate_conditions(
        [{"field": "event.status", "operator": "not_equals", "value": "CONFIRMED"}], CONTEXT
    )


def test_conditions_are_anded() -> None:
    """A single failing condition rejects the whole list."""
    conditions = [
        {"field": "event.status", "operator": "equals", "value": "confirmed"},
        {"field": "previous.status", "operator": "equals", "value": "completed"},
    ]
    assert not evaluate_conditions(conditions, CONTEXT)


def test_in_and_not_in() -> None:
    """in/not_in need a list value; anything else fails closed."""
    assert evaluate_operator("in", "Confirmed", ["confirmed", "scheduled"])
    assert evaluate_operator("not_in", "cancelled", ["confirmed"])
    assert not evaluate_operator("in", "confirmed", "confirmed")


def test_contains_and_not_contains() -> None:
    """Substring checks on strings only."""
    assert evaluate_operator("contains", "Vegan menu requested", "VEGAN")
    assert not evaluate_operator("contains", 42, "4")
    assert evaluate_operator("not_contains", "Vegan menu", "gluten")
    assert evaluate_operator("not_contains", None, "gluten")


def test_is_set_and_is_not_set() -> None:
    """Blank strings count as not set."""
    assert evaluate_operator("is_set", "x", None)
    assert not evaluate_operator("is_set", "   ", None)
    assert evaluate_operator("is_not_set", None, None)
    assert evaluate_conditions(
        [{"field": "event.account_id", "operator": "is_not_set"}], CONTEXT
    )


def test_greater_and_less_than_compare_numbers_and_dates() -> None:
    """Numbers compare numerically, ISO strings compare as dates."""
    assert evaluate_operator("greater_than", 120, 100)
    assert evaluate_operator("less_than", "2025-03-13", "2025-04-01")
    assert not evaluate_operator("greater_than", "abc", 1)
    assert not evaluate_operator("greater_than", 5, "2025-01-01")


def test_unknown_operator_fails_closed() -> None:
    """Unsupported operators never pass."""
    assert not evaluate_operator("matches_regex", "a", "a")


@pytest.mark.parametrize(
    "condition",
    ["event.status == confirmed", {"operator": "equals", "value": "x"}, {"field": "event.status"}],
)
def test_malformed_condition_fails_closed(condition: object) -> None:
    """Conditions that are not {field, operator, value} objects reject the subject."""
    assert not evaluate_conditions([condition], CONTEXT)


def test_validate_conditions_reports_problems() -> None:
    """Admin-side validation lists each problem with its index."""
    problems = validate_conditions(
        [
            {"field": "event.status", "operator": "equals", "value": "confirmed"},
            {"field": "", "operator": "equals", "value": "x"},
            {"field": "event.status", "operator": "bogus"},
            {"field": "event.status", "operator": "in", "value": "confirmed"},
            {"field": "event.status", "operator": "equals"},
            "not-an-object",
        ]
    )
    assert problems == [
        "conditions[1].field is required and must be a string",
        "conditions[2].operator 'bogus' is not supported",
        "conditions[3].value must be a list for operator 'in'",
        "conditions[4].value is required for operator 'equals'",
        "conditions[5] must be an object",
    ]


def test_validate_conditions_accepts_valid_payloads() -> None:
    """None and well-formed lists are valid; other shapes are not."""
    assert validate_conditions(None) == []
    assert validate_conditions([{"field": "task.department", "operator": "is_set"}]) == []
    assert validate_conditions({"field": "x"}) == ["conditions must be a list"]
