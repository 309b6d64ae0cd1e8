"""DTOs for tasks and task templates (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from app.domain.entities.subject import TriggerSubject
from app.shared.enums import TriggerEntityType


@dataclass(frozen=True)
class TaskTemplateResult:
    """Task template read by the create_task action."""

    id: str
    tenant_id: str
    name: str
    default_title: str
    default_description: str | None
    default_priority: str | None
    due_offset_days: int | None
    task_type: str | None
    department: str | None
    enabled: bool


@dataclass(frozen=True)
class TaskCreate:
    """Fields of a task to insert (manual or workflow-created)."""

    title: str
    description: str | None = None
    priority: str | None = None
    status: str | None = None
    due_date: date | None = None
    assigned_to_user_id: str | None = None
    created_by: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    task_type: str | None = None
    department: str | None = None
    auto_created: bool = False
    workflow_id: str | None = None
    workflow_action_id: str | None = None


@dataclass(frozen=True)
class TaskResult:
    """Persisted task."""

    id: str
    tenant_id: str
    title: str
    description: str | None
    priority: str
    status: str
    due_date: date | None
    assigned_to_user_id: str | None
    created_by: str | None
    entity_type: str | None
    entity_id: str | None
    task_type: str | None
    department: str | None
    auto_created: bool
    workflow_id: str | None
    workflow_action_id: str | None
    workflow_execution_id: str | None
    created_at: datetime
    updated_at: datetime

    def to_subject(self) -> TriggerSubject:
        """Trigger subject view of this task (relevant date: due_date)."""
        return TriggerSubject(
            entity_type=TriggerEntityType.TASK,
            id=self.id,
            tenant_id=self.tenant_id,
            title=self.title,
            status=self.status,
            relevant_dates=(self.due_date,) if self.due_date else (),
            auto_created=self.auto_created,
            attributes={
                "id": self.id,
                "title": self.title,
                "description": self.description,
                "priority": self.priority,
                "status": self.status,
                "due_date": self.due_date.isoformat() if self.due_date else None,
                "assigned_to_user_id": self.assigned_to_user_id,
                "created_by": self.created_by,
                "entity_type": self.entity_type,
                "entity_id": self.entity_id,
                "task_type": self.task_type,
                "department": self.department,
                "auto_created": self.auto_created,
            },
        )
