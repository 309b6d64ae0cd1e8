"""Task API: manual writes that fire task_created / task_status_changed workflows."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    TenantScope,
    get_task_service,
    require_tenant_scope_for_write,
)
from app.application.use_cases.tasks import TaskService, TaskWriteResult
from app.core.limiter import limit_writes
from app.schemas.task import (
    TaskCreateRequest,
    TaskResponse,
    TaskStatusUpdate,
    TaskWriteResponse,
)
from app.schemas.workflow import WorkflowRunResponse

router = APIRouter()


def _to_response(result: TaskWriteResult) -> TaskWriteResponse:
    return TaskWriteResponse(
        task=TaskResponse.model_validate(result.task),
        workflow_runs=[WorkflowRunResponse.from_result(r) for r in result.workflow_runs],
    )


@router.post("", response_model=TaskWriteResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[TaskService, Depends(get_task_service)],
):
    """Create a manual task; task_created workflows run in the same transaction."""
    result = await service.create_task(
        scope.tenant_config, body.to_dto(scope.user_id), user_id=scope.user_id
    )
    return _to_response(result)


@router.patch("/{task_id}/status", response_model=TaskWriteResponse)
@limit_writes
async def update_task_status(
    request: Request,
    task_id: str,
    body: TaskStatusUpdate,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[TaskService, Depends(get_task_service)],
):
    """Set task status. A failing workflow never fails the update."""
    result = await service.update_status(
        scope.tenant_config, task_id, body.status, user_id=scope.user_id
    )
    return _to_response(result)
