"""Shared enumerations for the CRM workflow service.

Cross-cutting enums used by application and infrastructure (workflow
triggers, actions, execution status, trigger subjects). Domain-specific
enums (e.g. TenantStatus) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowTriggerType(_ValuesMixin, str, Enum):
    """Supported workflow triggers. Anything else stored on a workflow never matches."""

    EVENT_DATE_APPROACHING = "event_date_approaching"
    TASK_STATUS_CHANGED = "task_status_changed"
    TASK_CREATED = "task_created"
    EVENT_CREATED = "event_created"


class WorkflowActionType(_ValuesMixin, str, Enum):
    """Supported workflow action types."""

    CREATE_TASK = "create_task"
    ASSIGN_TASK = "assign_task"
    SEND_NOTIFICATION = "send_notification"


class WorkflowExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution record status.

    running is the claimed, not yet finalized state; skipped audits a
    triggered workflow whose conditions were not met (key skipped:<window>).
    """

    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


class TriggerEntityType(_ValuesMixin, str, Enum):
    """Kind of record a workflow fires for."""

    EVENT = "event"
    TASK = "task"


class WorkflowRunStatus(_ValuesMixin, str, Enum):
    """Outcome of offering one subject to one workflow."""

    EXECUTED = "executed"
    ALREADY_RUN = "already_run"
    NOT_MATCHED = "not_matched"


class ConditionOperator(_ValuesMixin, str, Enum):
    """Operators accepted in workflow conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IS_SET = "is_set"
    IS_NOT_SET = "is_not_set"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class NotificationPriority(_ValuesMixin, str, Enum):
    """In-app notification priority."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
