"""Task API schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.task import TaskCreate
from app.schemas.workflow import WorkflowRunResponse


class TaskCreateRequest(BaseModel):
    """Manual task. Workflow linkage fields are set only by workflows."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    priority: str | None = Field(default=None, max_length=32)
    status: str | None = Field(default=None, max_length=32)
    due_date: date | None = None
    assigned_to_user_id: str | None = Field(default=None, max_length=64)
    entity_type: str | None = Field(default=None, max_length=64)
    entity_id: str | None = Field(default=None, max_length=64)
    task_type: str | None = Field(default=None, max_length=64)
    department: str | None = Field(default=None, max_length=128)

    def to_dto(self, created_by: str | None) -> TaskCreate:
        return TaskCreate(**self.model_dump(), created_by=created_by)


class TaskStatusUpdate(BaseModel):
    """Body of PATCH /tasks/{id}/status."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(..., min_length=1, max_length=32)


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

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


class TaskWriteResponse(BaseModel):
    """Task after a write plus the workflows it fired."""

    task: TaskResponse
    workflow_runs: list[WorkflowRunResponse]
