"""Workflow API schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.workflow import WorkflowActionCreate


class WorkflowActionRequest(BaseModel):
    """One action of a workflow definition (validated per type by the service)."""

    model_config = ConfigDict(extra="forbid")

    action_type: str = Field(..., min_length=1, max_length=64)
    execution_order: int | None = Field(default=None, ge=0)
    task_template_id: str | None = Field(default=None, max_length=64)
    assigned_to_user_id: str | None = Field(default=None, max_length=64)
    assigned_to_role: str | None = Field(default=None, max_length=128)
    due_offset_days: int | None = None
    config: dict[str, Any] = Field(default_factory=dict)

    def to_dto(self) -> WorkflowActionCreate:
        return WorkflowActionCreate(**self.model_dump())


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow."""

    name: str = Field(..., min_length=1, max_length=255)
    trigger_type: str = Field(..., min_length=1, max_length=64)
    actions: list[WorkflowActionRequest] = Field(..., min_length=1)
    description: str | None = None
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    conditions: list[dict[str, Any]] = Field(default_factory=list)
    event_type_ids: list[str] = Field(default_factory=list)
    is_active: bool = True


class WorkflowUpdate(BaseModel):
    """Partial update. Only these fields exist; unknown keys are rejected (422).

    actions, when present, replaces the whole action list.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    trigger_type: str | None = Field(default=None, min_length=1, max_length=64)
    trigger_config: dict[str, Any] | None = None
    conditions: list[dict[str, Any]] | None = None
    event_type_ids: list[str] | None = None
    actions: list[WorkflowActionRequest] | None = Field(default=None, min_length=1)

    def column_changes(self) -> dict[str, Any]:
        """Explicitly set fields other than actions."""
        return self.model_dump(exclude_unset=True, exclude={"actions"})


class WorkflowActionResponse(BaseModel):
    """Workflow action response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action_type: str
    execution_order: int
    task_template_id: str | None
    assigned_to_user_id: str | None
    assigned_to_role: str | None
    due_offset_days: int | None
    config: dict[str, Any]


class WorkflowResponse(BaseModel):
    """Workflow response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    description: str | None
    is_active: bool
    trigger_type: str
    trigger_config: dict[str, Any]
    conditions: list[dict[str, Any]]
    event_type_ids: list[str]
    actions: list[WorkflowActionResponse]
    created_at: datetime | None


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution record response."""

    model_config = ConfigDict(from_attributes=True)

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
    created_task_ids: list[str]
    created_artifact_ids: list[str]
    warnings: list[str]


class WorkflowRunResponse(BaseModel):
    """One workflow offered a subject (task writes report these)."""

    workflow_id: str
    workflow_name: str
    status: str
    execution: WorkflowExecutionResponse | None = None

    @classmethod
    def from_result(cls, result: Any) -> "WorkflowRunResponse":
        return cls(
            workflow_id=result.workflow_id,
            workflow_name=result.workflow_name,
            status=result.status.value,
            execution=(
                WorkflowExecutionResponse.model_validate(result.execution)
                if result.execution is not None
                else None
            ),
        )


class ApplyEventSummary(BaseModel):
    """Upcoming event offered to a workflow applied to existing events."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    start_date: date | None
    event_date: date | None
    event_type_id: str | None


class ApplyPreviewResponse(BaseModel):
    """GET /workflows/{id}/apply-to-existing."""

    model_config = ConfigDict(from_attributes=True)

    total_events: int
    already_executed: int
    eligible: list[ApplyEventSummary]


class AppliedEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    title: str
    event_date: date | None
    status: str
    tasks_created: int
    error: str | None


class ApplyResultResponse(BaseModel):
    """POST /workflows/{id}/apply-to-existing."""

    model_config = ConfigDict(from_attributes=True)

    processed: int
    failed: int
    skipped: int
    total_events: int
    results: list[AppliedEventResponse]
