"""Event operations that fire workflows (event_created)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.application.dtos.event import EventCreate, EventResult
from app.domain.enums import EventStatus
from app.domain.exceptions import ValidationException

if TYPE_CHECKING:
    from app.application.dtos.workflow import WorkflowRunResult
    from app.application.interfaces.repositories import IEventRepository
    from app.application.interfaces.services import IEventWorkflowHooks
    from app.domain.entities.tenant import TenantConfig


@dataclass(frozen=True)
class EventWriteResult:
    """Event after a write plus the workflow runs it fired."""

    event: EventResult
    workflow_runs: list[WorkflowRunResult]


class EventService:
    """CRM event writes."""

    def __init__(self, event_repo: IEventRepository, hooks: IEventWorkflowHooks) -> None:
        self._event_repo = event_repo
        self._hooks = hooks

    async def create_event(
        self,
        tenant_config: TenantConfig,
        data: EventCreate,
        *,
        user_id: str | None = None,
    ) -> EventWriteResult:
        """Insert the event, then run the tenant's event_created workflows for it."""
        if data.status is not None and data.status not in EventStatus.values():
            raise ValidationException(f"Unknown event status: {data.status}", field="status")
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise ValidationException("end_date is before start_date", field="end_date")
        event = await self._event_repo.create_event(tenant_config.tenant_id, data)
        runs = await self._hooks.event_created(
            event.to_subject(), tenant_config, user_id=user_id
        )
        return EventWriteResult(event=event, workflow_runs=runs)
