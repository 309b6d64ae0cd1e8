"""Workflow use cases: scheduler pass, administration and apply-to-existing."""

from app.application.use_cases.workflows.apply_to_existing import (
    AppliedEvent,
    ApplyPreview,
    ApplyResult,
    ApplyWorkflowToExistingUseCase,
)
from app.application.use_cases.workflows.manage_workflows import (
    UPDATABLE_FIELDS,
    WorkflowAdminService,
    WorkflowDefinition,
)
from app.application.use_cases.workflows.run_workflow_triggers import (
    NO_ACTIVE_TENANTS_MESSAGE,
    RunWorkflowTriggersUseCase,
)

__all__ = [
    "NO_ACTIVE_TENANTS_MESSAGE",
    "UPDATABLE_FIELDS",
    "AppliedEvent",
    "ApplyPreview",
    "ApplyResult",
    "ApplyWorkflowToExistingUseCase",
    "RunWorkflowTriggersUseCase",
    "WorkflowAdminService",
    "WorkflowDefinition",
]
