"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from .tenant import (
    EarlyResponse,
    TenantScope,
    require_tenant_scope,
    require_tenant_scope_for_write,
    resolve_tenant,
    unwrap_scope,
)
from .workflow import (
    get_apply_workflow_use_case,
    get_event_service,
    get_run_workflow_triggers_use_case,
    get_task_service,
    get_workflow_admin_service,
    get_workflow_execution_repo,
    get_workflow_repo,
    is_cron_authorized,
    verify_cron_request,
)

__all__ = [
    "EarlyResponse",
    "TenantScope",
    "resolve_tenant",
    "unwrap_scope",
    "require_tenant_scope",
    "require_tenant_scope_for_write",
    "get_workflow_admin_service",
    "get_workflow_repo",
    "get_workflow_execution_repo",
    "get_task_service",
    "get_event_service",
    "get_apply_workflow_use_case",
    "get_run_workflow_triggers_use_case",
    "is_cron_authorized",
    "verify_cron_request",
]
