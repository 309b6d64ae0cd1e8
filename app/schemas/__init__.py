"""Pydantic request/response schemas for the API."""

from app.schemas.cron import WorkflowTriggerRunResponse
from app.schemas.event import EventCreateRequest, EventResponse, EventWriteResponse
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.task import (
    TaskCreateRequest,
    TaskResponse,
    TaskStatusUpdate,
    TaskWriteResponse,
)
from app.schemas.workflow import (
    ApplyPreviewResponse,
    ApplyResultResponse,
    WorkflowActionRequest,
    WorkflowCreateRequest,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowRunResponse,
    WorkflowUpdate,
)

__all__ = [
    "HealthResponse",
    "ReadinessResponse",
    "ReadinessErrorResponse",
    "WorkflowTriggerRunResponse",
    "EventCreateRequest",
    "EventResponse",
    "EventWriteResponse",
    "TaskCreateRequest",
    "TaskStatusUpdate",
    "TaskResponse",
    "TaskWriteResponse",
    "WorkflowActionRequest",
    "WorkflowCreateRequest",
    "WorkflowUpdate",
    "WorkflowResponse",
    "WorkflowExecutionResponse",
    "WorkflowRunResponse",
    "ApplyPreviewResponse",
    "ApplyResultResponse",
]
