"""Workflow administration API: thin routes delegating to WorkflowAdminService and repositories."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    TenantScope,
    get_apply_workflow_use_case,
    get_workflow_admin_service,
    get_workflow_execution_repo,
    get_workflow_repo,
    require_tenant_scope,
    require_tenant_scope_for_write,
)
from app.application.use_cases.workflows import (
    ApplyWorkflowToExistingUseCase,
    WorkflowAdminService,
    WorkflowDefinition,
)
from app.core.limiter import limit_writes
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from app.schemas.workflow import (
    ApplyPreviewResponse,
    ApplyResultResponse,
    WorkflowCreateRequest,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowUpdate,
)

router = APIRouter()


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    include_inactive: bool = False,
):
    """List workflows for tenant (paginated; active only unless include_inactive)."""
    workflows = await workflow_repo.get_by_tenant(
        scope.tenant_id, skip=skip, limit=limit, include_inactive=include_inactive
    )
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.post("", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[WorkflowAdminService, Depends(get_workflow_admin_service)],
):
    """Create a workflow with its actions. Invalid definitions return 400."""
    workflow = await service.create(
        scope.tenant_id,
        WorkflowDefinition(
            name=body.name,
            trigger_type=body.trigger_type,
            actions=[a.to_dto() for a in body.actions],
            description=body.description,
            trigger_config=body.trigger_config,
            conditions=body.conditions,
            event_type_ids=body.event_type_ids,
            is_active=body.is_active,
        ),
        created_by=scope.user_id,
    )
    return WorkflowResponse.model_validate(workflow)


@router.get("/executions/{execution_id}", response_model=WorkflowExecutionResponse)
async def get_execution(
    execution_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
    execution_repo: Annotated[
        WorkflowExecutionRepository, Depends(get_workflow_execution_repo)
    ],
):
    """Get one execution record. Tenant-scoped."""
    record = await execution_repo.get_record(execution_id, scope.tenant_id)
    if record is None:
        raise ResourceNotFoundException("workflow_execution", execution_id)
    return WorkflowExecutionResponse.model_validate(record)


@router.get("/{workflow_id}/executions", response_model=list[WorkflowExecutionResponse])
async def get_workflow_executions(
    workflow_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    execution_repo: Annotated[
        WorkflowExecutionRepository, Depends(get_workflow_execution_repo)
    ],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Execution history of a workflow, newest first. Tenant-scoped."""
    if await workflow_repo.get_entity(workflow_id, scope.tenant_id) is None:
        raise ResourceNotFoundException("workflow", workflow_id)
    records = await execution_repo.list_by_workflow(
        workflow_id, scope.tenant_id, skip=skip, limit=limit
    )
    return [WorkflowExecutionResponse.model_validate(r) for r in records]


@router.get("/{workflow_id}/apply-to-existing", response_model=ApplyPreviewResponse)
async def preview_apply_to_existing(
    workflow_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    use_case: Annotated[
        ApplyWorkflowToExistingUseCase, Depends(get_apply_workflow_use_case)
    ],
):
    """Upcoming events of the workflow's event types and how many already ran."""
    preview = await use_case.preview(scope.tenant_config, workflow_id)
    return ApplyPreviewResponse.model_validate(preview)


@router.post("/{workflow_id}/apply-to-existing", response_model=ApplyResultResponse)
@limit_writes
async def apply_to_existing(
    request: Request,
    workflow_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    use_case: Annotated[
        ApplyWorkflowToExistingUseCase, Depends(get_apply_workflow_use_case)
    ],
):
    """Run an event_created workflow for upcoming events created before it."""
    result = await use_case.run(scope.tenant_config, workflow_id, user_id=scope.user_id)
    return ApplyResultResponse.model_validate(result)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope)],
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
):
    """Get workflow by id (tenant-scoped)."""
    workflow = await workflow_repo.get_entity(workflow_id, scope.tenant_id)
    if workflow is None:
        raise ResourceNotFoundException("workflow", workflow_id)
    return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdate,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[WorkflowAdminService, Depends(get_workflow_admin_service)],
):
    """Partial update; `actions`, when given, replaces the action list."""
    workflow = await service.update(
        workflow_id,
        scope.tenant_id,
        body.column_changes(),
        actions=[a.to_dto() for a in body.actions] if body.actions is not None else None,
        updated_by=scope.user_id,
    )
    return WorkflowResponse.model_validate(workflow)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[WorkflowAdminService, Depends(get_workflow_admin_service)],
) -> Response:
    """Soft-delete (and deactivate) a workflow. Execution history is kept."""
    await service.delete(workflow_id, scope.tenant_id, deleted_by=scope.user_id)
    return Response(status_code=204)
