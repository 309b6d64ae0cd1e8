"""Application services: pure trigger matching and condition evaluation."""

from app.application.services.condition_evaluator import (
    evaluate_conditions,
    evaluate_operator,
    get_nested_value,
    validate_conditions,
)
from app.application.services.trigger_matcher import (
    MatchOutcome,
    candidate_target_date,
    evaluate,
    match,
    valid_days_before,
)

__all__ = [
    "MatchOutcome",
    "candidate_target_date",
    "evaluate",
    "evaluate_conditions",
    "evaluate_operator",
    "get_nested_value",
    "match",
    "valid_days_before",
    "validate_conditions",
]
