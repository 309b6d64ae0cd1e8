"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.task import TaskResult
    from app.application.dtos.tenant import TenantResult
    from app.application.dtos.workflow import (
        ActionContext,
        ActionOutcome,
        DedupWindow,
        WorkflowRunResult,
    )
    from app.application.interfaces.repositories import (
        IEventRepository,
        IWorkflowRepository,
    )
    from app.domain.entities.subject import TriggerSubject
    from app.domain.entities.tenant import TenantConfig
    from app.domain.entities.workflow import WorkflowActionEntity, WorkflowEntity


# Role-based assignment (create_task without a direct assignee)
class IRoleAssigneeResolver(Protocol):
    """Resolves a role code to the user who should receive auto-created work."""

    async def resolve_user_id(self, tenant_id: str, role: str) -> str | None:
        """Return a user id holding role in tenant, or None."""


# Action executor interface
class IActionExecutor(Protocol):
    """Protocol for running one workflow action against a subject."""

    async def execute(
        self,
        action: WorkflowActionEntity,
        subject: TriggerSubject,
        context: ActionContext,
    ) -> ActionOutcome:
        """Run the action; never raises for action-level failures."""


# Dedup guard interface
class IDedupGuard(Protocol):
    """Protocol for the cheap "already ran in this window" pre-check."""

    def window_for(
        self, trigger_type: str, subject: TriggerSubject, now: datetime, config: TenantConfig
    ) -> DedupWindow:
        """Return the dedup window of the trigger at `now`."""

    async def has_already_run(
        self, workflow_id: str, subject_id: str, tenant_id: str, window: DedupWindow
    ) -> bool:
        """Return True if an execution record already holds the window."""


# Workflow runner interface (engine entry point used by call sites)
class IWorkflowRunner(Protocol):
    """Protocol for offering one subject to a set of workflows."""

    async def run_for_subject(
        self,
        workflows: list[WorkflowEntity],
        subject: TriggerSubject,
        *,
        tenant_config: TenantConfig,
        now: datetime,
        previous_status: str | None = None,
        days_before: int | None = None,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        """Run matcher, guard, claim, actions and recorder per workflow."""


# Scheduler ports (one unit of work per tenant pass)
class ITriggerUnitOfWork(Protocol):
    """Tenant-scoped repositories and runner sharing one session."""

    workflows: IWorkflowRepository
    events: IEventRepository
    runner: IWorkflowRunner

    async def commit(self) -> None:
        """Commit the current transaction; tenant scoping survives the commit."""

    async def rollback(self) -> None:
        """Roll back the current transaction; the unit stays usable."""


class IWorkflowTriggerStore(Protocol):
    """Cross-tenant entry point of the scheduler."""

    async def list_active_tenants(self) -> list[TenantResult]:
        """Every active tenant (raises when tenants cannot be listed)."""

    def tenant_scope(
        self, tenant_id: str
    ) -> AbstractAsyncContextManager[ITriggerUnitOfWork]:
        """Open a unit of work restricted to tenant_id."""


# Task domain-event hooks (task API call sites)
class ITaskWorkflowHooks(Protocol):
    """Fires task workflows after task writes; never fails the write itself."""

    async def task_created(
        self, task: TaskResult, tenant_config: TenantConfig, *, user_id: str | None = None
    ) -> list[WorkflowRunResult]:
        """Run task_created workflows for a manual task."""

    async def task_status_changed(
        self,
        task: TaskResult,
        previous_status: str,
        tenant_config: TenantConfig,
        *,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        """Run task_status_changed workflows after a status update."""


# Event domain-event hooks (event API and apply-to-existing call sites)
class IEventWorkflowHooks(Protocol):
    """Fires event_created workflows; never fails the caller."""

    async def event_created(
        self,
        event: TriggerSubject,
        tenant_config: TenantConfig,
        *,
        workflows: list[WorkflowEntity] | None = None,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        """Run event_created workflows (all active ones unless workflows is given)."""
