"""Application DTOs (no ORM dependency)."""

from app.application.dtos.event import EventCreate, EventResult
from app.application.dtos.task import TaskCreate, TaskResult, TaskTemplateResult
from app.application.dtos.tenant import TenantResult
from app.application.dtos.workflow import (
    ActionContext,
    ActionFailed,
    ActionOutcome,
    ActionSucceeded,
    DedupWindow,
    ExecutionClaim,
    ExecutionRecord,
    TenantTriggerResult,
    TriggerRunSummary,
    WorkflowActionCreate,
    WorkflowRunResult,
)

__all__ = [
    "ActionContext",
    "ActionFailed",
    "ActionOutcome",
    "ActionSucceeded",
    "DedupWindow",
    "EventCreate",
    "EventResult",
    "ExecutionClaim",
    "ExecutionRecord",
    "TaskCreate",
    "TaskResult",
    "TaskTemplateResult",
    "TenantResult",
    "TenantTriggerResult",
    "TriggerRunSummary",
    "WorkflowActionCreate",
    "WorkflowRunResult",
]
