"""CRM event API: event writes that fire event_created workflows."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    TenantScope,
    get_event_service,
    require_tenant_scope_for_write,
)
from app.application.use_cases.events import EventService
from app.core.limiter import limit_writes
from app.schemas.event import EventCreateRequest, EventResponse, EventWriteResponse
from app.schemas.workflow import WorkflowRunResponse

router = APIRouter()


@router.post("", response_model=EventWriteResponse, status_code=201)
@limit_writes
async def create_event(
    request: Request,
    body: EventCreateRequest,
    scope: Annotated[TenantScope, Depends(require_tenant_scope_for_write)],
    service: Annotated[EventService, Depends(get_event_service)],
):
    """Create an event; event_created workflows run in the same transaction."""
    result = await service.create_event(
        scope.tenant_config, body.to_dto(), user_id=scope.user_id
    )
    return EventWriteResponse(
        event=EventResponse.model_validate(result.event),
        workflow_runs=[WorkflowRunResponse.from_result(r) for r in result.workflow_runs],
    )
