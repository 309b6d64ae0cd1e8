"""Shared utilities: request context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import get_correlation_id, get_request_id, set_request_ids
from app.shared.enums import (
    ConditionOperator,
    NotificationPriority,
    TriggerEntityType,
    WorkflowActionType,
    WorkflowExecutionStatus,
    WorkflowRunStatus,
    WorkflowTriggerType,
)
from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "set_request_ids",
    "get_request_id",
    "get_correlation_id",
    "ConditionOperator",
    "NotificationPriority",
    "TriggerEntityType",
    "WorkflowActionType",
    "WorkflowExecutionStatus",
    "WorkflowRunStatus",
    "WorkflowTriggerType",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
