"""Application use cases: one entry point per workflow."""

from app.application.use_cases.events import EventService, EventWriteResult
from app.application.use_cases.tasks import TaskService, TaskWriteResult
from app.application.use_cases.workflows import (
    ApplyWorkflowToExistingUseCase,
    RunWorkflowTriggersUseCase,
    WorkflowAdminService,
    WorkflowDefinition,
)

__all__ = [
    "ApplyWorkflowToExistingUseCase",
    "EventService",
    "EventWriteResult",
    "RunWorkflowTriggersUseCase",
    "TaskService",
    "TaskWriteResult",
    "WorkflowAdminService",
    "WorkflowDefinition",
]
