"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.workflow_action_executor import WorkflowActionExecutor
from app.infrastructure.services.workflow_assignee_resolver import (
    TenantSettingsRoleResolver,
)
from app.infrastructure.services.workflow_dedup_guard import WorkflowDedupGuard
from app.infrastructure.services.workflow_engine import (
    EventWorkflowHooks,
    TaskWorkflowHooks,
    WorkflowEngine,
)
from app.infrastructure.services.workflow_execution_recorder import (
    WorkflowExecutionRecorder,
)
from app.infrastructure.services.workflow_template_renderer import WorkflowTemplateRenderer
from app.infrastructure.services.workflow_trigger_store import (
    SqlTriggerUnitOfWork,
    SqlWorkflowTriggerStore,
)

__all__ = [
    "EventWorkflowHooks",
    "SqlTriggerUnitOfWork",
    "SqlWorkflowTriggerStore",
    "TaskWorkflowHooks",
    "TenantSettingsRoleResolver",
    "WorkflowActionExecutor",
    "WorkflowDedupGuard",
    "WorkflowEngine",
    "WorkflowExecutionRecorder",
    "WorkflowTemplateRenderer",
]
