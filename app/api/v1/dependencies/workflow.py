"""Workflow, task and scheduler dependencies (composition root).

Routes depend on these; repositories and engine services are built here on
the request's tenant-scoped session.
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.application.use_cases.events import EventService
from app.application.use_cases.tasks import TaskService
from app.application.use_cases.workflows import (
    ApplyWorkflowToExistingUseCase,
    RunWorkflowTriggersUseCase,
    WorkflowAdminService,
)
from app.core.config import Settings, get_settings
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories.event_repo import EventRepository
from app.infrastructure.persistence.repositories.task_repo import (
    TaskRepository,
    TaskTemplateRepository,
)
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from app.infrastructure.services.workflow_dedup_guard import WorkflowDedupGuard
from app.infrastructure.services.workflow_engine import (
    EventWorkflowHooks,
    TaskWorkflowHooks,
    WorkflowEngine,
)
from app.infrastructure.services.workflow_trigger_store import SqlWorkflowTriggerStore
from app.shared.telemetry.logging import get_logger

from .tenant import TenantScope, require_tenant_scope, require_tenant_scope_for_write

logger = get_logger(__name__)


async def get_workflow_admin_service(
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
) -> WorkflowAdminService:
    """Workflow CRUD on the transactional session."""
    return WorkflowAdminService(
        WorkflowRepository(scope.db), TaskTemplateRepository(scope.db)
    )


async def get_workflow_repo(
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
) -> WorkflowRepository:
    """Workflow repository for reads."""
    return WorkflowRepository(scope.db)


async def get_workflow_execution_repo(
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
) -> WorkflowExecutionRepository:
    """Execution record repository for reads."""
    return WorkflowExecutionRepository(scope.db)


def _engine(scope: TenantScope) -> WorkflowEngine:
    return WorkflowEngine.for_session(
        scope.db, retry_failed_runs=get_settings().workflow_retry_failed_runs
    )


async def get_task_service(
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
) -> TaskService:
    """Task writes with workflow hooks on the same transaction."""
    return TaskService(
        TaskRepository(scope.db), TaskWorkflowHooks(scope.db, _engine(scope))
    )


def _event_hooks(scope: TenantScope) -> EventWorkflowHooks:
    return EventWorkflowHooks(scope.db, _engine(scope))


async def get_event_service(
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
) -> EventService:
    """Event writes with event_created hooks on the same transaction."""
    return EventService(EventRepository(scope.db), _event_hooks(scope))


async def get_apply_workflow_use_case(
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
) -> ApplyWorkflowToExistingUseCase:
    """Apply-to-existing over the transactional session (preview included)."""
    return ApplyWorkflowToExistingUseCase(
        WorkflowRepository(scope.db),
        EventRepository(scope.db),
        WorkflowDedupGuard(WorkflowExecutionRepository(scope.db)),
        _event_hooks(scope),
    )


def get_run_workflow_triggers_use_case() -> RunWorkflowTriggersUseCase:
    """Scheduler use case over per-tenant sessions (no request session)."""
    settings = get_settings()
    store = SqlWorkflowTriggerStore(
        get_session_factory,
        tenant_batch_size=settings.workflow_tenant_batch_size,
        retry_failed_runs=settings.workflow_retry_failed_runs,
    )
    return RunWorkflowTriggersUseCase(
        store, default_timezone=settings.workflow_default_timezone
    )


def is_cron_authorized(request: Request, settings: Settings) -> bool:
    """Provider secret header or Authorization: Bearer <secret>; open in development."""
    if settings.is_development:
        return True
    if settings.cron_secret is None:
        return False
    secret = settings.cron_secret.get_secret_value()
    if not secret:
        return False
    provided = request.headers.get(settings.cron_secret_header_name)
    if provided and hmac.compare_digest(provided.encode(), secret.encode()):
        return True
    auth = request.headers.get("Authorization") or ""
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        return hmac.compare_digest(token.strip().encode(), secret.encode())
    return False


UNAUTHORIZED_BODY = {"error": "Unauthorized"}


async def verify_cron_request(request: Request) -> None:
    """Reject unauthorized scheduler calls with 401 before any database work."""
    if not is_cron_authorized(request, get_settings()):
        logger.warning("Rejected unauthorized scheduler call from %s", request.client)
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_BODY)
