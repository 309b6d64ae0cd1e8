"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure.
"""

from app.application.interfaces.repositories import (
    IEventRepository,
    INotificationRepository,
    ITaskRepository,
    ITaskTemplateRepository,
    ITenantRepository,
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.application.interfaces.services import (
    IActionExecutor,
    IDedupGuard,
    IEventWorkflowHooks,
    IRoleAssigneeResolver,
    ITaskWorkflowHooks,
    ITriggerUnitOfWork,
    IWorkflowRunner,
    IWorkflowTriggerStore,
)

__all__ = [
    "IActionExecutor",
    "IDedupGuard",
    "IEventRepository",
    "IEventWorkflowHooks",
    "INotificationRepository",
    "IRoleAssigneeResolver",
    "ITaskRepository",
    "ITaskTemplateRepository",
    "ITaskWorkflowHooks",
    "ITenantRepository",
    "ITriggerUnitOfWork",
    "IWorkflowExecutionRepository",
    "IWorkflowRepository",
    "IWorkflowRunner",
    "IWorkflowTriggerStore",
]
