"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.event import EventCreate, EventResult
    from app.application.dtos.task import TaskCreate, TaskResult, TaskTemplateResult
    from app.application.dtos.tenant import TenantResult
    from app.application.dtos.workflow import (
        ExecutionClaim,
        ExecutionRecord,
        WorkflowActionCreate,
    )
    from app.domain.entities.subject import TriggerSubject
    from app.domain.entities.workflow import WorkflowEntity


# Tenant repository interface
class ITenantRepository(Protocol):
    """Protocol for tenant repository (DIP)."""

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        """Return tenant by ID."""

    async def get_active_tenants(
        self, skip: int = 0, limit: int = 100
    ) -> list[TenantResult]:
        """Return active tenants with pagination (ordered by id)."""


# CRM event repository interface (event writes and trigger subjects)
class IEventRepository(Protocol):
    """Protocol for CRM event writes and the reads event workflows need."""

    async def list_by_target_date(
        self, tenant_id: str, target: date
    ) -> list[TriggerSubject]:
        """Non-cancelled events whose start_date or event_date equals target."""

    async def create_event(self, tenant_id: str, data: EventCreate) -> EventResult:
        """Insert an event; return created result."""

    async def list_upcoming_by_types(
        self, tenant_id: str, event_type_ids: Sequence[str], from_date: date
    ) -> list[EventResult]:
        """Non-cancelled events of the given types dated from_date or later."""


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for task repository (manual and workflow-created tasks)."""

    async def create_task(self, tenant_id: str, data: TaskCreate) -> TaskResult:
        """Insert a task; return created result."""

    async def get_by_id_and_tenant(
        self, task_id: str, tenant_id: str
    ) -> TaskResult | None:
        """Return task in tenant, or None."""

    async def update_status(
        self, task_id: str, tenant_id: str, status: str
    ) -> tuple[TaskResult, str] | None:
        """Set status; return (updated task, previous status) or None if not found."""

    async def assign(
        self, task_id: str, tenant_id: str, user_id: str
    ) -> TaskResult | None:
        """Set assigned_to_user_id; return updated task or None if not found."""

    async def set_workflow_execution(
        self, task_ids: Sequence[str], tenant_id: str, execution_id: str
    ) -> None:
        """Back-fill workflow_execution_id on the given tasks."""


# Task template repository interface
class ITaskTemplateRepository(Protocol):
    """Protocol for task template reads (create_task action)."""

    async def get_by_id_and_tenant(
        self, template_id: str, tenant_id: str
    ) -> TaskTemplateResult | None:
        """Return template in tenant, or None."""


# Workflow repository interface
class IWorkflowRepository(Protocol):
    """Protocol for workflow definitions (read by the engine, written by the admin API)."""

    async def get_active_by_trigger(
        self, tenant_id: str, trigger_type: str
    ) -> list[WorkflowEntity]:
        """Active, non-deleted workflows for trigger_type ordered by (created_at, id)."""

    async def get_entity(
        self, workflow_id: str, tenant_id: str
    ) -> WorkflowEntity | None:
        """Return one non-deleted workflow with its actions."""

    async def get_by_tenant(
        self,
        tenant_id: str,
        skip: int = 0,
        limit: int = 100,
        include_inactive: bool = False,
    ) -> list[WorkflowEntity]:
        """Non-deleted workflows of tenant, paginated."""

    async def create_workflow(
        self,
        tenant_id: str,
        name: str,
        trigger_type: str,
        actions: Sequence[WorkflowActionCreate],
        *,
        description: str | None = None,
        trigger_config: dict[str, Any] | None = None,
        conditions: list[dict[str, Any]] | None = None,
        event_type_ids: list[str] | None = None,
        is_active: bool = True,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Insert workflow and actions; return created entity."""

    async def update_workflow(
        self,
        workflow_id: str,
        tenant_id: str,
        changes: dict[str, Any],
        *,
        actions: Sequence[WorkflowActionCreate] | None = None,
        updated_by: str | None = None,
    ) -> WorkflowEntity:
        """Apply allow-listed column changes; replace actions when given."""

    async def soft_delete(
        self, workflow_id: str, tenant_id: str, *, deleted_by: str | None, now: datetime
    ) -> bool:
        """Soft-delete and deactivate; False when not found in tenant."""


# Workflow execution repository interface
class IWorkflowExecutionRepository(Protocol):
    """Protocol for execution records (dedup ledger + audit)."""

    async def exists_for_window(
        self,
        tenant_id: str,
        workflow_id: str,
        trigger_entity_id: str,
        dedup_key: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> bool:
        """Return True if a record holds this dedup key (created_at in [start, end) when bounded)."""

    async def claim(
        self,
        *,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_entity_type: str,
        trigger_entity_id: str,
        dedup_key: str,
        started_at: datetime,
    ) -> ExecutionClaim | None:
        """Insert a running record; None when the dedup key is already taken."""

    async def finalize(
        self,
        execution_id: str,
        tenant_id: str,
        *,
        status: str,
        completed_at: datetime,
        actions_executed: int,
        actions_successful: int,
        actions_failed: int,
        created_task_ids: list[str],
        created_artifact_ids: list[str],
        warnings: list[str],
        release_dedup_key: bool = False,
    ) -> ExecutionRecord:
        """Write final status, counters and ids once; return the record."""

    async def record_skipped(
        self,
        *,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_entity_type: str,
        trigger_entity_id: str,
        dedup_key: str,
        now: datetime,
        reason: str,
    ) -> ExecutionRecord | None:
        """Insert a skipped audit record (conditions not met) unless dedup_key is taken."""

    async def list_by_workflow(
        self, workflow_id: str, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[ExecutionRecord]:
        """Execution records of a workflow, newest first."""

    async def get_record(
        self, execution_id: str, tenant_id: str
    ) -> ExecutionRecord | None:
        """Return one execution record in tenant."""


# Notification repository interface
class INotificationRepository(Protocol):
    """Protocol for in-app notifications (send_notification action)."""

    async def create_notification(
        self,
        tenant_id: str,
        user_id: str,
        title: str,
        *,
        message: str | None = None,
        priority: str = "normal",
        link: str | None = None,
        workflow_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> str:
        """Insert a notification; return its id."""

