"""Task operations that fire workflows (task_created, task_status_changed)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.application.dtos.task import TaskCreate, TaskResult
from app.domain.enums import TaskStatus
from app.domain.exceptions import ResourceNotFoundException, ValidationException

if TYPE_CHECKING:
    from app.application.dtos.workflow import WorkflowRunResult
    from app.application.interfaces.repositories import ITaskRepository
    from app.application.interfaces.services import ITaskWorkflowHooks
    from app.domain.entities.tenant import TenantConfig


@dataclass(frozen=True)
class TaskWriteResult:
    """Task after a write plus the workflow runs it fired."""

    task: TaskResult
    workflow_runs: list[WorkflowRunResult]


class TaskService:
    """Manual task writes. Workflow-created tasks never come through here."""

    def __init__(self, task_repo: ITaskRepository, hooks: ITaskWorkflowHooks) -> None:
        self._task_repo = task_repo
        self._hooks = hooks

    async def create_task(
        self,
        tenant_config: TenantConfig,
        data: TaskCreate,
        *,
        user_id: str | None = None,
    ) -> TaskWriteResult:
        if data.status is not None and data.status not in TaskStatus.values():
            raise ValidationException(f"Unknown task status: {data.status}", field="status")
        task = await self._task_repo.create_task(tenant_config.tenant_id, data)
        runs = await self._hooks.task_created(task, tenant_config, user_id=user_id)
        return TaskWriteResult(task=task, workflow_runs=runs)

    async def update_status(
        self,
        tenant_config: TenantConfig,
        task_id: str,
        status: str,
        *,
        user_id: str | None = None,
    ) -> TaskWriteResult:
        """Set status; fires task_status_changed only when the status actually changed."""
        if status not in TaskStatus.values():
            raise ValidationException(f"Unknown task status: {status}", field="status")
        updated = await self._task_repo.update_status(task_id, tenant_config.tenant_id, status)
        if updated is None:
            raise ResourceNotFoundException("task", task_id)
        task, previous = updated
        if previous == task.status:
            return TaskWriteResult(task=task, workflow_runs=[])
        runs = await self._hooks.task_status_changed(
            task, previous, tenant_config, user_id=user_id
        )
        return TaskWriteResult(task=task, workflow_runs=runs)
