"""DTOs for the workflow pipeline (no dependency on ORM).

Matcher, guard, executor and recorder exchange these frozen dataclasses;
ActionOutcome is a tagged union consumers narrow with `match`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from app.shared.enums import WorkflowRunStatus

if TYPE_CHECKING:
    from app.domain.entities.tenant import TenantConfig
    from app.domain.entities.workflow import WorkflowEntity


@dataclass(frozen=True)
class DedupWindow:
    """Dedup scope of one trigger firing.

    key is stored on the execution record and is what the unique index
    guards. start/end bound created_at for the pre-check; both None means
    the window is unbounded (state-based triggers).
    """

    key: str
    start: datetime | None = None
    end: datetime | None = None

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class WorkflowActionCreate:
    """Action definition to persist with a workflow (admin API)."""

    action_type: str
    execution_order: int | None = None
    task_template_id: str | None = None
    assigned_to_user_id: str | None = None
    assigned_to_role: str | None = None
    due_offset_days: int | None = None
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionClaim:
    """A running execution record that owns its dedup window."""

    execution_id: str
    tenant_id: str
    workflow_id: str
    trigger_type: str
    trigger_entity_type: str
    trigger_entity_id: str
    dedup_key: str
    started_at: datetime


@dataclass(frozen=True)
class ActionContext:
    """Everything an action needs besides the action and the subject."""

    tenant_config: TenantConfig
    workflow: WorkflowEntity
    now: datetime
    days_before: int | None = None
    user_id: str | None = None

    @property
    def today(self) -> date:
        return self.tenant_config.today(self.now)


@dataclass(frozen=True)
class ActionSucceeded:
    """Action produced (or updated) an artifact."""

    artifact_id: str
    artifact_type: str


@dataclass(frozen=True)
class ActionFailed:
    """Action failed; message becomes a warning on the execution record."""

    message: str


ActionOutcome = ActionSucceeded | ActionFailed


@dataclass(frozen=True)
class ExecutionRecord:
    """Finalized (or running) workflow execution record."""

    id: str
    tenant_id: str
    workflow_id: str
    trigger_type: str
    trigger_entity_type: str
    trigger_entity_id: str
    dedup_key: str | None
    status: str
    started_at: datetime
    completed_at: datetime | None
    actions_executed: int
    actions_successful: int
    actions_failed: int
    created_task_ids: tuple[str, ...] = ()
    created_artifact_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    created_at: datetime | None = None


@dataclass(frozen=True)
class WorkflowRunResult:
    """Outcome of offering one subject to one workflow."""

    workflow_id: str
    workflow_name: str
    status: WorkflowRunStatus
    execution: ExecutionRecord | None = None

    @property
    def executed(self) -> bool:
        return self.status == WorkflowRunStatus.EXECUTED


@dataclass
class TriggerRunSummary:
    """Aggregated result of one scheduler invocation."""

    triggers_processed: int = 0
    workflows_executed: int = 0
    events_processed: int = 0
    errors: list[str] = field(default_factory=list)
    tenants: list[str] = field(default_factory=list)
    duration_ms: int = 0
    message: str | None = None
    error: str | None = None
    fatal: bool = False

    @property
    def success(self) -> bool:
        return not self.fatal and not self.errors


@dataclass
class TenantTriggerResult:
    """Counters of one tenant pass (merged into TriggerRunSummary)."""

    triggers_processed: int = 0
    workflows_executed: int = 0
    events_processed: int = 0
    errors: list[str] = field(default_factory=list)
