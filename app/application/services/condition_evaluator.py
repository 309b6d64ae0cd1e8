"""Workflow condition evaluation.

Conditions are a list of {field, operator, value} dicts joined with AND.
field is a dotted path into the evaluation context (e.g. "event.status",
"task.department", "previous.status"). String comparisons are trimmed and
case-insensitive. Unknown operators and malformed conditions fail closed.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from app.shared.enums import ConditionOperator
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_NO_VALUE_OPERATORS = {ConditionOperator.IS_SET.value, ConditionOperator.IS_NOT_SET.value}
_LIST_OPERATORS = {ConditionOperator.IN.value, ConditionOperator.NOT_IN.value}


def get_nested_value(data: Mapping[str, Any] | None, path: str) -> Any:
    """Resolve a dotted path ('event.account_id'); None when any segment is missing."""
    if not data or not path:
        return None
    current: Any = data
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _as_comparable(value: Any) -> float | datetime | None:
    """Numbers compare as numbers; dates and ISO strings compare as datetimes."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).replace(
                tzinfo=None
            )
        except ValueError:
            return None
    return None


def _compare(actual: Any, expected: Any) -> int | None:
    left, right = _as_comparable(actual), _as_comparable(expected)
    if left is None or right is None or type(left) is not type(right):
        return None
    return (left > right) - (left < right)


def evaluate_operator(operator: str, actual: Any, expected: Any) -> bool:
    """Evaluate one operator. Unknown operators return False."""
    match operator:
        case ConditionOperator.EQUALS.value:
            return _normalize(actual) == _normalize(expected)
        case ConditionOperator.NOT_EQUALS.value:
            return _normalize(actual) != _normalize(expected)
        case ConditionOperator.IN.value | ConditionOperator.NOT_IN.value:
            if not isinstance(expected, (list, tuple)):
                logger.warning("Condition operator %r expects a list value", operator)
                return False
            found = any(_normalize(v) == _normalize(actual) for v in expected)
            return found if operator == ConditionOperator.IN.value else not found
        case ConditionOperator.CONTAINS.value:
            if not isinstance(actual, str) or expected is None:
                return False
            return str(_normalize(expected)) in _normalize(actual)
        case ConditionOperator.NOT_CONTAINS.value:
            if not isinstance(actual, str) or expected is None:
                return True
            return str(_normalize(expected)) not in _normalize(actual)
        case ConditionOperator.IS_SET.value:
            return _is_set(actual)
        case ConditionOperator.IS_NOT_SET.value:
            return not _is_set(actual)
        case ConditionOperator.GREATER_THAN.value:
            return _compare(actual, expected) == 1
        case ConditionOperator.LESS_THAN.value:
            return _compare(actual, expected) == -1
        case _:
            logger.warning("Unknown condition operator %r; failing closed", operator)
            return False


def evaluate_conditions(
    conditions: list[dict[str, Any]] | None, context: Mapping[str, Any]
) -> bool:
    """Return True when every condition passes (empty list passes)."""
    if not conditions:
        return True
    for condition in conditions:
        if not isinstance(condition, Mapping):
            logger.debug("Skipping workflow: condition is not an object: %r", condition)
            return False
        field = condition.get("field")
        operator = condition.get("operator")
        if not isinstance(field, str) or not isinstance(operator, str):
            logger.debug("Skipping workflow: condition missing field/operator: %r", condition)
            return False
        actual = get_nested_value(context, field)
        if not evaluate_operator(operator, actual, condition.get("value")):
            return False
    return True


def validate_conditions(conditions: Any) -> list[str]:
    """Return human-readable problems with a conditions payload (empty when valid)."""
    if conditions is None:
        return []
    if not isinstance(conditions, list):
        return ["conditions must be a list"]
    errors: list[str] = []
    for index, condition in enumerate(conditions):
        if not isinstance(condition, Mapping):
            errors.append(f"conditions[{index}] must be an object")
            continue
        field = condition.get("field")
        operator = condition.get("operator")
        if not field or not isinstance(field, str):
            errors.append(f"conditions[{index}].field is required and must be a string")
        if operator not in ConditionOperator.values():
            errors.append(f"conditions[{index}].operator {operator!r} is not supported")
            continue
        if operator not in _NO_VALUE_OPERATORS and condition.get("value") is None:
            errors.append(f"conditions[{index}].value is required for operator {operator!r}")
        if operator in _LIST_OPERATORS and not isinstance(condition.get("value"), list):
            errors.append(f"conditions[{index}].value must be a list for operator {operator!r}")
    return errors
