"""Task and task template repositories."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import TaskCreate, TaskResult, TaskTemplateResult
from app.domain.enums import TaskPriority, TaskStatus
from app.infrastructure.persistence.models.task import Task, TaskTemplate
from app.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        tenant_id=t.tenant_id,
        title=t.title,
        description=t.description,
        priority=t.priority,
        status=t.status,
        due_date=t.due_date,
        assigned_to_user_id=t.assigned_to_user_id,
        created_by=t.created_by,
        entity_type=t.entity_type,
        entity_id=t.entity_id,
        task_type=t.task_type,
        department=t.department,
        auto_created=t.auto_created,
        workflow_id=t.workflow_id,
        workflow_action_id=t.workflow_action_id,
        workflow_execution_id=t.workflow_execution_id,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _template_to_result(t: TaskTemplate) -> TaskTemplateResult:
    return TaskTemplateResult(
        id=t.id,
        tenant_id=t.tenant_id,
        name=t.name,
        default_title=t.default_title,
        default_description=t.default_description,
        default_priority=t.default_priority,
        due_offset_days=t.due_offset_days,
        task_type=t.task_type,
        department=t.department,
        enabled=t.enabled,
    )


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def create_task(self, tenant_id: str, data: TaskCreate) -> TaskResult:
        """Create a task and return the result DTO."""
        task = Task(
            tenant_id=tenant_id,
            title=data.title,
            description=data.description,
            priority=data.priority or TaskPriority.MEDIUM.value,
            status=data.status or TaskStatus.PENDING.value,
            due_date=data.due_date,
            assigned_to_user_id=data.assigned_to_user_id,
            created_by=data.created_by,
            entity_type=data.entity_type,
            entity_id=data.entity_id,
            task_type=data.task_type,
            department=data.department,
            auto_created=data.auto_created,
            workflow_id=data.workflow_id,
            workflow_action_id=data.workflow_action_id,
        )
        return _to_result(await self.create(task))

    async def get_by_id_and_tenant(
        self, task_id: str, tenant_id: str
    ) -> TaskResult | None:
        task = await self.get_model_in_tenant(task_id, tenant_id)
        return _to_result(task) if task else None

    async def update_status(
        self, task_id: str, tenant_id: str, status: str
    ) -> tuple[TaskResult, str] | None:
        """Set status; return (updated task, previous status)."""
        task = await self.get_model_in_tenant(task_id, tenant_id)
        if task is None:
            return None
        previous = task.status
        task.status = status
        return _to_result(await self.update(task)), previous

    async def assign(
        self, task_id: str, tenant_id: str, user_id: str
    ) -> TaskResult | None:
        task = await self.get_model_in_tenant(task_id, tenant_id)
        if task is None:
            return None
        task.assigned_to_user_id = user_id
        return _to_result(await self.update(task))

    async def set_workflow_execution(
        self, task_ids: Sequence[str], tenant_id: str, execution_id: str
    ) -> None:
        if not task_ids:
            return
        await self.db.execute(
            update(Task)
            .where(Task.tenant_id == tenant_id, Task.id.in_(list(task_ids)))
            .values(workflow_execution_id=execution_id)
        )


class TaskTemplateRepository(BaseRepository[TaskTemplate]):
    """Task template repository. Implements ITaskTemplateRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskTemplate)

    async def get_by_id_and_tenant(
        self, template_id: str, tenant_id: str
    ) -> TaskTemplateResult | None:
        template = await self.get_model_in_tenant(template_id, tenant_id)
        return _template_to_result(template) if template else None
