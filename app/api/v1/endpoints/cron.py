"""Scheduler endpoint: runs time-based workflow triggers for all active tenants.

Called by an external cron (GET or POST, identical). Authenticated with the
provider secret header or a Bearer token; open in development.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import (
    get_run_workflow_triggers_use_case,
    verify_cron_request,
)
from app.application.use_cases.workflows import RunWorkflowTriggersUseCase
from app.core.limiter import limit_cron
from app.schemas.cron import UnauthorizedResponse, WorkflowTriggerRunResponse

router = APIRouter()


@router.api_route(
    "/workflow-triggers",
    methods=["GET", "POST"],
    response_model=WorkflowTriggerRunResponse,
    responses={
        401: {"model": UnauthorizedResponse},
        500: {"model": WorkflowTriggerRunResponse},
    },
)
@limit_cron
async def run_workflow_triggers(
    request: Request,
    _auth: Annotated[None, Depends(verify_cron_request)],
    use_case: Annotated[
        RunWorkflowTriggersUseCase, Depends(get_run_workflow_triggers_use_case)
    ],
) -> JSONResponse:
    """Process event_date_approaching workflows for every active tenant.

    200 with the summary (errors listed per tenant); 500 when the pass failed
    before any tenant could be processed.
    """
    summary = await use_case.run()
    body = WorkflowTriggerRunResponse.from_summary(summary).to_body()
    return JSONResponse(status_code=500 if summary.fatal else 200, content=body)
